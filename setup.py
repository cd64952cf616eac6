"""Setup script for the HAL assistant."""

from setuptools import setup, find_packages

setup(
    name="hal-assistant",
    version="1.0.0",
    description="Voice-driven assistant on top of chat completions",
    author="Your Name",
    packages=find_packages(include=['hal_assistant', 'hal_assistant.*']),
    python_requires=">=3.11",
    install_requires=[
        "python-dotenv>=1.0.0",
        "openai>=1.0.0",
        "structlog>=23.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "hal=hal_assistant.cli.main:cli",
        ],
    },
)
