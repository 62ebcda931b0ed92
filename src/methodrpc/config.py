from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Self

import yaml

ENV_PREFIX = "METHODRPC_"


def _env_bool(value: str) -> bool:
    return value.lower() in {"1", "true", "yes"}


@dataclass
class ServerConfig:
    """Settings for serving services over HTTP."""
    host: str = "127.0.0.1"
    port: int = 5000
    workers: int = 1
    timeout: int = 600
    log_level: str = "INFO"
    mount_path: str = "/jobs"
    include_traceback: bool = False

    @classmethod
    def from_env(cls, environ: Dict[str, str] | None = None) -> Self:
        """Read `METHODRPC_<FIELD>` variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                values[f.name] = _env_bool(raw)
            elif f.type in (int, "int"):
                values[f.name] = int(raw)
            else:
                values[f.name] = raw
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str) -> Self:
        """Load a `ServerConfig` from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def merge(self, **overrides: Any) -> Self:
        """Return a copy with every non-None override applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**values)
