"""
Configuration models for the diagram engine.

Provides a configuration object that can be loaded from YAML files,
environment variables, or constructed programmatically.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from diagram_engine.errors import ConfigError

DEFAULT_EXPORT_TIMEOUT = 10.0

_ENV_PREFIX = "DIAGRAM_ENGINE_"
_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class EngineConfig:
    """
    Main configuration for the diagram engine.

    Example YAML:
        export_timeout_seconds: 10
        format_exports: false
        wrap_root_fragments: true
        host: 127.0.0.1
        port: 8080
        log_level: INFO
    """

    # Export bridge
    export_timeout_seconds: float = DEFAULT_EXPORT_TIMEOUT  # Deadline for one export round trip
    format_exports: bool = False  # Pretty-print exported XML before patching

    # Loader
    wrap_root_fragments: bool = True  # Accept bare <root> fragments in display_diagram

    # Web bridge
    host: str = "127.0.0.1"
    port: int = 8080

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.export_timeout_seconds <= 0:
            raise ConfigError(
                f"export_timeout_seconds must be positive, got {self.export_timeout_seconds}"
            )
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Create config from a dictionary."""
        try:
            return cls(
                export_timeout_seconds=float(
                    data.get("export_timeout_seconds", DEFAULT_EXPORT_TIMEOUT)
                ),
                format_exports=bool(data.get("format_exports", False)),
                wrap_root_fragments=bool(data.get("wrap_root_fragments", True)),
                host=str(data.get("host", "127.0.0.1")),
                port=int(data.get("port", 8080)),
                log_level=str(data.get("log_level", "INFO")).upper(),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: Path) -> EngineConfig:
        """Load config from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> EngineConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    @classmethod
    def from_env(cls, **overrides: Any) -> EngineConfig:
        """Create config from ``DIAGRAM_ENGINE_*`` environment variables.

        A ``.env`` file in the current directory (or a parent) is loaded first;
        variables already present in the environment win.
        """
        load_dotenv(find_dotenv(usecwd=True))
        env = {
            key[len(_ENV_PREFIX):].lower(): value
            for key, value in os.environ.items()
            if key.startswith(_ENV_PREFIX)
        }

        data: dict[str, Any] = {}
        if "export_timeout" in env:
            data["export_timeout_seconds"] = env["export_timeout"]
        for flag in ("format_exports", "wrap_root_fragments"):
            if flag in env:
                data[flag] = env[flag].lower() in _TRUE_VALUES
        for key in ("host", "port", "log_level"):
            if key in env:
                data[key] = env[key]
        data.update(overrides)
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "export_timeout_seconds": self.export_timeout_seconds,
            "format_exports": self.format_exports,
            "wrap_root_fragments": self.wrap_root_fragments,
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
        }
