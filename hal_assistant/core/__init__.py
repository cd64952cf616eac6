"""Application context and the voice loop."""
