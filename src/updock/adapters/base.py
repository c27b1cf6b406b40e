"""Application adapter interface and capability detection."""

from typing import Tuple

from updock.errors import ConfigurationError
from updock.errors_catalog import actionable_error
from updock.models import AdapterCapabilities

MANDATORY_HOOKS = ("start_instance", "is_running")
PAIRED_HOOKS = (
    ("enter_maintenance", "exit_maintenance"),
    ("backup", "restore"),
)


class ApplicationAdapter:
    """Per-application hooks driven by the upgrade controller.

    Every hook is a slot that variants fill in by defining a method (or, for
    command templates, an instance attribute) of the same name:

    - ``start_instance(name, image)`` and ``is_running()`` are mandatory.
    - ``enter_maintenance(name)`` / ``exit_maintenance(name)`` and
      ``backup(name)`` / ``restore(name)`` are optional but come in pairs.
    - ``post_start(name)`` and ``get_version(name) -> str`` are optional.

    Slots left as ``None`` are absent. Which ones are present is read once by
    ``validate_adapter``; the controller only looks at the resulting
    ``AdapterCapabilities``.
    """

    name: str = ""
    image: str = ""

    start_instance = None
    is_running = None
    enter_maintenance = None
    exit_maintenance = None
    backup = None
    restore = None
    post_start = None
    get_version = None


def has_hook(adapter, hook: str) -> bool:
    return callable(getattr(adapter, hook, None))


def detect_capabilities(adapter) -> AdapterCapabilities:
    return AdapterCapabilities(
        has_maintenance=has_hook(adapter, "enter_maintenance") or has_hook(adapter, "exit_maintenance"),
        has_backup=has_hook(adapter, "backup") or has_hook(adapter, "restore"),
        has_post_start_hook=has_hook(adapter, "post_start"),
        has_version_query=has_hook(adapter, "get_version"),
    )


def _missing_pair(adapter, pair: Tuple[str, str]):
    first, second = pair
    if has_hook(adapter, first) and not has_hook(adapter, second):
        return first, second
    if has_hook(adapter, second) and not has_hook(adapter, first):
        return second, first
    return None


def validate_adapter(adapter) -> AdapterCapabilities:
    """Checks mandatory hooks and hook pairing, returning the capability set."""
    template = getattr(adapter, "name", "") or type(adapter).__name__

    for hook in MANDATORY_HOOKS:
        if not has_hook(adapter, hook):
            raise ConfigurationError(
                actionable_error("missing_mandatory_hook", template=template, hook=hook)
            )

    for pair in PAIRED_HOOKS:
        missing = _missing_pair(adapter, pair)
        if missing:
            present, absent = missing
            raise ConfigurationError(
                actionable_error("unpaired_hook", template=template, present=present, missing=absent)
            )

    return detect_capabilities(adapter)
