"""
vmtray configuration.

Settings come from ~/.config/vmtray/config.json, then VMTRAY_* environment
variables, then command line flags.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from common.exceptions import InvalidConfigError
from common.logging_config import resolve_level

from . import messages

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "vmtray"
CONFIG_FILE = CONFIG_DIR / "config.json"

DIALOG_KINDS = ("console", "gtk")

ENV_OVERRIDES = {
    "VMTRAY_URI": "uri",
    "VMTRAY_LOG_LEVEL": "log_level",
    "VMTRAY_LOG_DIR": "log_dir",
    "VMTRAY_DIALOGS": "dialogs",
}


@dataclass
class TrayConfig:
    """Settings for the tray service and command line."""
    uri: str = "qemu:///system"
    application_name: str = messages.APPLICATION_NAME
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    json_logs: bool = False
    dialogs: str = "console"

    def validate(self) -> None:
        """
        Raises:
            InvalidConfigError: On the first invalid field
        """
        if not self.uri:
            raise InvalidConfigError("uri", self.uri, "must not be empty")
        if not self.application_name:
            raise InvalidConfigError("application_name", self.application_name, "must not be empty")
        try:
            resolve_level(self.log_level)
        except ValueError as e:
            raise InvalidConfigError("log_level", self.log_level, str(e)) from e
        if self.dialogs not in DIALOG_KINDS:
            raise InvalidConfigError("dialogs", self.dialogs, f"must be one of {', '.join(DIALOG_KINDS)}")
        if not isinstance(self.json_logs, bool):
            raise InvalidConfigError("json_logs", self.json_logs, "must be true or false")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrayConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def with_overrides(self, **overrides: Any) -> "TrayConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TrayConfig:
    """
    Load and validate configuration.

    Args:
        path: Config file (default ~/.config/vmtray/config.json); a missing
            file means defaults
        environ: Environment to read overrides from (default os.environ)

    Raises:
        InvalidConfigError: If the file is unreadable or a value is invalid
    """
    path = Path(path) if path else CONFIG_FILE
    environ = os.environ if environ is None else environ

    config = TrayConfig()
    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidConfigError("config_file", path, str(e)) from e
        if not isinstance(data, dict):
            raise InvalidConfigError("config_file", path, "top level must be an object")
        config = TrayConfig.from_dict(data)
        logger.debug(f"Loaded config from {path}")

    env_values = {
        field_name: environ[var]
        for var, field_name in ENV_OVERRIDES.items()
        if environ.get(var)
    }
    config = config.with_overrides(**env_values)

    config.validate()
    return config

