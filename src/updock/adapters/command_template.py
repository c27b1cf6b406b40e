"""Adapters defined by YAML templates of shell commands."""

from pathlib import Path
from string import Template
from typing import Any, Dict, Mapping, Optional

import yaml

from updock.adapters.base import ApplicationAdapter
from updock.errors import ConfigurationError

HOOK_KEYS = (
    "start",
    "is_running",
    "enter_maintenance",
    "exit_maintenance",
    "backup",
    "restore",
    "post_start",
    "get_version",
)
TEMPLATE_KEYS = {"image", "description", "health_timeout"} | set(HOOK_KEYS)
DEFAULT_HEALTH_TIMEOUT = 5.0
TEMPLATE_SUFFIXES = (".yml", ".yaml")


def find_template_file(templates_dir: Optional[str], template: str) -> Optional[Path]:
    if not templates_dir or not template or "/" in template or "\\" in template or template.startswith("."):
        return None

    root = Path(templates_dir)
    for suffix in TEMPLATE_SUFFIXES:
        candidate = root / f"{template}{suffix}"
        if candidate.is_file():
            return candidate
    return None


class CommandTemplateAdapter(ApplicationAdapter):
    """Adapter whose hooks are shell commands.

    Commands are expanded with ``string.Template`` using the template settings
    plus ``$name`` (the instance name) and ``$image``. Unknown ``$VARS`` are
    left for the shell. Only hooks present in the template are defined.
    A health check running longer than ``health_timeout`` seconds fails the
    attempt.
    """

    def __init__(self, name: str, definition: Mapping[str, Any], settings: Mapping[str, str], command_runner, logger):
        self.name = name
        self.settings = settings
        self.command_runner = command_runner
        self.logger = logger
        self.commands: Dict[str, str] = {}

        unknown = sorted(set(definition) - TEMPLATE_KEYS)
        if unknown:
            raise ConfigurationError(
                f"Template '{name}' has unknown keys: {', '.join(unknown)}"
            )

        for key in HOOK_KEYS:
            value = definition.get(key)
            if value is None:
                continue
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"Template '{name}' hook `{key}` must be a non-empty command string.")
            self.commands[key] = value

        self.image = Template(str(definition.get("image") or "")).safe_substitute(settings)
        self.health_timeout = _health_timeout(name, definition.get("health_timeout"))

        if "start" in self.commands:
            self.start_instance = self._start_instance
        if "is_running" in self.commands:
            self.is_running = self._is_running
        if "get_version" in self.commands:
            self.get_version = self._get_version
        for key in ("enter_maintenance", "exit_maintenance", "backup", "restore", "post_start"):
            if key in self.commands:
                setattr(self, key, self._instance_hook(key))

    @classmethod
    def from_file(cls, path: Path, settings: Mapping[str, str], command_runner, logger):
        try:
            definition = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigurationError(f"Invalid template file '{path}': {exc}") from exc

        if not isinstance(definition, dict):
            raise ConfigurationError(f"Template file '{path}' must contain a YAML mapping.")

        return cls(path.stem, definition, settings, command_runner, logger)

    def render(self, key: str, name: str = "", image: str = "") -> str:
        values = dict(self.settings)
        values.update({"name": name, "image": image or self.image})
        return Template(self.commands[key]).safe_substitute(values)

    def _start_instance(self, name: str, image: str):
        self.command_runner.run(self.render("start", name, image), shell=True, capture_output=True)

    def _is_running(self) -> bool:
        result = self.command_runner.run(
            self.render("is_running"),
            shell=True,
            check=False,
            capture_output=True,
            timeout=self.health_timeout,
        )
        return result.returncode == 0

    def _get_version(self, name: str) -> str:
        result = self.command_runner.run(self.render("get_version", name), shell=True, capture_output=True)
        return (result.stdout or "").strip()

    def _instance_hook(self, key: str):
        def hook(name: str):
            self.command_runner.run(self.render(key, name), shell=True, capture_output=True)

        hook.__name__ = key
        return hook


def _health_timeout(name: str, value: Any) -> float:
    if value is None:
        return DEFAULT_HEALTH_TIMEOUT
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(
            f"Template '{name}' `health_timeout` must be a positive number of seconds, got {value!r}."
        )
    return float(value)
