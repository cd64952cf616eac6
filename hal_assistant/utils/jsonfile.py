"""JSON document helpers shared by the persisted stores."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from ..exceptions import StoreFormatError


def atomic_write_json(file_path: Union[str, Path], data: Dict[str, Any]) -> None:
    """Atomically write data to file."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Write to temporary file first
    with tempfile.NamedTemporaryFile(
        mode="w", dir=file_path.parent, delete=False, suffix=".tmp", encoding="utf-8"
    ) as tmp_file:
        json.dump(data, tmp_file, indent=1, ensure_ascii=False)
        tmp_file.flush()
        os.fsync(tmp_file.fileno())
        tmp_path = tmp_file.name

    os.replace(tmp_path, file_path)


def read_json_object(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a JSON document whose top level is an object.

    Raises:
        FileNotFoundError: The file does not exist
        StoreFormatError: The file is not a JSON object
    """
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreFormatError(f"{file_path}: invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise StoreFormatError(f"{file_path}: top level must be an object")

    return data
