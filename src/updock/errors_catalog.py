"""Actionable error catalog for updock."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "template_not_found": {
        "what": "Template not found: {template}",
        "next": "Use a built-in template ({available}) or add `{template}.yml` to the templates directory.",
    },
    "missing_mandatory_hook": {
        "what": "Template '{template}' does not define the mandatory `{hook}` hook.",
        "next": "Implement `{hook}` in the template before running an upgrade.",
    },
    "unpaired_hook": {
        "what": "Template '{template}' defines `{present}` without `{missing}`.",
        "next": "Define both `{present}` and `{missing}`, or neither of them.",
    },
    "missing_setting": {
        "what": "Template '{template}' requires the `{setting}` setting.",
        "next": "Export {setting} or add it under `settings` in the config file.",
    },
    "invalid_setting": {
        "what": "Template '{template}' has an invalid `{setting}` setting: {value}",
        "next": "Fix the value of {setting} and retry.",
    },
    "docker_not_found": {
        "what": "The docker command is not available.",
        "next": "Install Docker and make sure `docker` is on the PATH.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
