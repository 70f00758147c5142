"""Run configuration file IO (YAML or JSON)."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigurationError
from .models import RunConfiguration, build_config

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
TEMPLATE_NAME = "run_template.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def _anchor_path(section: Any, base_dir: Path) -> Any:
    if not isinstance(section, dict) or section.get("path") in (None, ""):
        return section
    path = Path(section["path"]).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return {**section, "path": path}


class ConfigRepository:
    """Load and save run configurations; relative paths follow the file."""

    def load(self, path: Path) -> RunConfiguration:
        if path.suffix not in CONFIG_EXTENSIONS:
            raise ConfigurationError(f"Unsupported configuration file type: {path.suffix}")
        if not path.exists():
            raise FileNotFoundError(f"Run configuration not found: {path}")
        payload = _read_file(path)
        base_dir = path.resolve().parent
        payload["source"] = _anchor_path(payload.get("source"), base_dir)
        payload["target"] = _anchor_path(payload.get("target"), base_dir)
        return build_config(**payload)

    def save(self, config: RunConfiguration, path: Path) -> Path:
        if path.suffix not in CONFIG_EXTENSIONS:
            raise ConfigurationError(f"Unsupported configuration file type: {path.suffix}")
        _write_file(path, config.to_payload())
        return path

    @staticmethod
    def template_path() -> Path:
        template = Path(__file__).resolve().parent / "templates" / TEMPLATE_NAME
        if not template.exists():
            raise FileNotFoundError(f"Template not found: {template}")
        return template

    def write_template(self, destination: Path) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.template_path(), destination)
        return destination


__all__ = ["CONFIG_EXTENSIONS", "ConfigRepository", "TEMPLATE_NAME"]
