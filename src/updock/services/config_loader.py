"""Configuration loader for updock."""

import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from updock.errors import ConfigurationError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "timeout",
        "verbose",
        "log_file",
        "templates_dir",
        "email_sender_name",
        "email_sender_address",
        "email_recipients",
        "smtp_host",
        "smtp_port",
        "settings",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigurationError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigurationError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise ConfigurationError(f"Unknown configuration keys: {unknown_list}")

        settings = parsed.get("settings")
        if settings is not None and not isinstance(settings, dict):
            raise ConfigurationError("The `settings` key must contain a YAML mapping.")

        self._validate_values(parsed)
        return parsed

    def _validate_values(self, parsed: Dict[str, Any]):
        verbose = parsed.get("verbose")
        if verbose is not None and not isinstance(verbose, bool):
            raise ConfigurationError(f"`verbose` must be true or false, got {verbose!r}.")

        timeout = parsed.get("timeout")
        if timeout is not None and (not _is_int(timeout) or timeout < 0):
            raise ConfigurationError(f"`timeout` must be a non-negative integer, got {timeout!r}.")

        smtp_port = parsed.get("smtp_port")
        if smtp_port is not None and (not _is_int(smtp_port) or not 1 <= smtp_port <= 65535):
            raise ConfigurationError(f"`smtp_port` must be a port number between 1 and 65535, got {smtp_port!r}.")

    def build_settings(
        self,
        config: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
    ) -> Mapping[str, str]:
        """Freezes template settings: environment first, config file `settings` on top."""
        merged = dict(os.environ if environ is None else environ)
        for key, value in (config.get("settings") or {}).items():
            merged[str(key)] = "" if value is None else str(value)
        return MappingProxyType(merged)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
