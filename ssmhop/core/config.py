import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException

from ssmhop.constants import (
    DEFAULT_PLUGIN_PATH,
    DEFAULT_SCP_BINARY,
    DEFAULT_SSH_BINARY,
    SESSION_OPEN_TIMEOUT_SECONDS,
    SESSION_TERMINATE_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

TARGET_ID_PATTERN = r"^(i|mi)-[0-9a-f]+$"


class ConfigLoader:
    """Load and merge YAML configuration with defaults."""

    def __init__(self) -> None:
        """Initialize ConfigLoader with built-in defaults."""
        self.BUILT_IN_DEFAULTS = {
            "profile": os.environ.get("AWS_PROFILE", ""),
            "region": "",
            "target": "",
            "plugin_path": DEFAULT_PLUGIN_PATH,
            "ssh_binary": DEFAULT_SSH_BINARY,
            "scp_binary": DEFAULT_SCP_BINARY,
            "open_timeout": SESSION_OPEN_TIMEOUT_SECONDS,
            "close_timeout": SESSION_TERMINATE_TIMEOUT_SECONDS,
        }

    def load_config(self, config_path: str | None = None) -> dict[str, Any]:
        """Load configuration from YAML file.

        Keys under ``vars`` are available to ``${...}`` interpolation anywhere
        in the file.

        Parameters
        ----------
        config_path : str | None
            Path to YAML config file. If None, checks SSMHOP_CONFIG env var,
            then falls back to ssmhop.yaml

        Returns
        -------
        dict[str, Any]
            Parsed configuration with interpolations resolved, or an empty
            defaults section when there is no file

        Raises
        ------
        ValueError
            If the file is not valid YAML or references an undefined variable
        """
        path = Path(config_path or os.environ.get("SSMHOP_CONFIG", "ssmhop.yaml"))
        path = path.expanduser()

        if not path.is_file():
            logger.debug("No config file at %s", path)
            return {"defaults": {}}

        try:
            cfg = OmegaConf.load(path)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if not cfg:
            return {"defaults": {}}

        try:
            if isinstance(cfg, DictConfig) and cfg.get("vars"):
                cfg = OmegaConf.merge(cfg.vars, cfg)
            return OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        except OmegaConfBaseException as e:
            raise ValueError(f"Cannot resolve variables in {path}: {e}") from e

    def get_preset_config(
        self, config: dict[str, Any], preset_name: str | None = None
    ) -> dict[str, Any]:
        """Get merged configuration for a specific preset or defaults.

        Parameters
        ----------
        config : dict[str, Any]
            Full configuration from YAML
        preset_name : str | None
            Name of preset to use, or None for defaults only

        Returns
        -------
        dict[str, Any]
            Merged configuration (built-in defaults + YAML defaults + preset)
        """
        merged = copy.deepcopy(self.BUILT_IN_DEFAULTS)

        yaml_defaults = config.get("defaults") or {}
        for key, value in yaml_defaults.items():
            merged[key] = value

        if preset_name is not None:
            presets = config.get("presets") or {}

            if preset_name not in presets:
                available = list(presets.keys())

                if not available:
                    raise ValueError(
                        f"Preset '{preset_name}' not found in configuration. "
                        f"No presets are defined in the config file."
                    )

                raise ValueError(
                    f"Preset '{preset_name}' not found in configuration. "
                    f"Available presets: {available}"
                )

            for key, value in (presets[preset_name] or {}).items():
                merged[key] = value

        return merged

    def validate_config(self, config: dict[str, Any]) -> None:
        """Validate configuration field types and values.

        Parameters
        ----------
        config : dict[str, Any]
            Configuration to validate

        Raises
        ------
        ValueError
            If configuration is invalid
        """
        string_fields = {
            "profile": "profile must be a string",
            "region": "region must be a string",
            "target": "target must be a string",
            "plugin_path": "plugin_path must be a string",
            "ssh_binary": "ssh_binary must be a string",
            "scp_binary": "scp_binary must be a string",
        }

        for field, type_msg in string_fields.items():
            if field in config and config[field] is not None:
                if not isinstance(config[field], str):
                    raise ValueError(type_msg)

        for field in ("plugin_path", "ssh_binary", "scp_binary"):
            if not config.get(field):
                raise ValueError(f"{field} is required")

        self._validate_timeouts(config)
        self._validate_target(config)

    def _validate_timeouts(self, config: dict[str, Any]) -> None:
        """Validate timeout fields.

        Raises
        ------
        ValueError
            If a timeout is not a positive number
        """
        for field in ("open_timeout", "close_timeout"):
            if field not in config:
                continue

            value = config[field]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{field} must be a number")

            if value <= 0:
                raise ValueError(f"{field} must be positive, got {value}")

    def _validate_target(self, config: dict[str, Any]) -> None:
        """Validate the target instance id format.

        Raises
        ------
        ValueError
            If target is set and is not an instance or managed-instance id
        """
        target = config.get("target")
        if not target:
            return

        if not re.match(TARGET_ID_PATTERN, target):
            raise ValueError(
                f"Invalid target '{target}'. "
                f"Expected an instance id such as i-0123456789abcdef0."
            )
