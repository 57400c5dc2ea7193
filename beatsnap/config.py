from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path("~/.config/beatsnap").expanduser()
CONFIG_FILE = CONFIG_DIR / "config.yaml"


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class AppConfig(BaseModel):
    beat_divisor: int = Field(default=4, ge=1)
    track_length: float | None = Field(default=None, ge=0)
    server_port: int = 9345
    logging: LoggingConfig = LoggingConfig()


def load_config() -> AppConfig:
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with CONFIG_FILE.open("w") as f:
            yaml.dump(AppConfig().model_dump(), f, default_flow_style=False)
        return AppConfig()

    try:
        with CONFIG_FILE.open() as f:
            data: dict[str, object] = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise RuntimeError(
            f"Config file at {CONFIG_FILE} contains invalid YAML: {e}. "
            "Fix or delete the file to reset to defaults."
        ) from e

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise RuntimeError(
            f"Config file at {CONFIG_FILE} has invalid values: {e}. "
            "Fix or delete the file to reset to defaults."
        ) from e


def open_config_in_editor() -> None:
    if not CONFIG_FILE.exists():
        load_config()

    editor = os.environ.get("EDITOR", "nano")
    try:
        result = subprocess.run([editor, str(CONFIG_FILE)], check=False)
        if result.returncode != 0:
            print(
                f"Warning: editor '{editor}' exited with code {result.returncode}.",
                file=sys.stderr,
            )
    except FileNotFoundError:
        print(
            f"Error: editor '{editor}' not found. Set $EDITOR to a valid editor.",
            file=sys.stderr,
        )
