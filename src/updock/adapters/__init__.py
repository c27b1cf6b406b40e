"""Template resolution: built-in adapters first, then YAML command templates."""

from typing import Mapping, Optional

from updock.adapters.base import ApplicationAdapter, detect_capabilities, validate_adapter
from updock.adapters.command_template import CommandTemplateAdapter, find_template_file
from updock.adapters.gitlab import GitLabAdapter
from updock.errors import TemplateNotFoundError
from updock.errors_catalog import actionable_error

BUILTIN_ADAPTERS = {
    "gitlab": GitLabAdapter,
}

__all__ = [
    "ApplicationAdapter",
    "BUILTIN_ADAPTERS",
    "CommandTemplateAdapter",
    "GitLabAdapter",
    "detect_capabilities",
    "load_adapter",
    "validate_adapter",
]


def load_adapter(
    template: str,
    settings: Mapping[str, str],
    runtime,
    command_runner,
    logger,
    templates_dir: Optional[str] = None,
) -> ApplicationAdapter:
    """Resolves and validates the adapter for ``template``.

    Missing or unpaired hooks raise ``ConfigurationError`` here, before the
    controller is built.
    """
    adapter_cls = BUILTIN_ADAPTERS.get(template)
    if adapter_cls is not None:
        adapter = adapter_cls.from_settings(settings, runtime, logger)
        validate_adapter(adapter)
        return adapter

    template_file = find_template_file(templates_dir, template)
    if template_file is not None:
        logger.debug("Loading template %s from %s", template, template_file)
        adapter = CommandTemplateAdapter.from_file(template_file, settings, command_runner, logger)
        validate_adapter(adapter)
        return adapter

    raise TemplateNotFoundError(
        actionable_error(
            "template_not_found",
            template=template,
            available=", ".join(sorted(BUILTIN_ADAPTERS)),
        )
    )
