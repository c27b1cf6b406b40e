"""Shared domain models for updock."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from updock.errors import ConfigurationError

ImageIdentity = str

EXIT_SUCCESS = 0
EXIT_ROLLED_BACK = 1
EXIT_TEMPLATE_NOT_FOUND = 64
EXIT_CONFIGURATION_ERROR = 65


@dataclass(frozen=True)
class UpgradeRequest:
    """A single upgrade attempt of one container."""

    template: str
    container: str
    image: str
    timeout: int

    def __post_init__(self):
        if not self.container:
            raise ConfigurationError("Container name must not be empty.")
        if not self.image:
            raise ConfigurationError(f"Template '{self.template}' does not define an image.")
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, int) or self.timeout < 0:
            raise ConfigurationError(f"Timeout must be a non-negative integer, got {self.timeout!r}.")


@dataclass(frozen=True)
class AdapterCapabilities:
    """Optional hooks an adapter provides, derived once at load time."""

    has_maintenance: bool = False
    has_backup: bool = False
    has_post_start_hook: bool = False
    has_version_query: bool = False


class OutcomeKind(Enum):
    NO_OP_ALREADY_LATEST = "already-latest"
    SUCCESS = "success"
    ROLLED_BACK = "rolled-back"
    CONFIGURATION_ERROR = "configuration-error"
    TEMPLATE_NOT_FOUND = "template-not-found"


_EXIT_CODES = {
    OutcomeKind.NO_OP_ALREADY_LATEST: EXIT_SUCCESS,
    OutcomeKind.SUCCESS: EXIT_SUCCESS,
    OutcomeKind.ROLLED_BACK: EXIT_ROLLED_BACK,
    OutcomeKind.CONFIGURATION_ERROR: EXIT_CONFIGURATION_ERROR,
    OutcomeKind.TEMPLATE_NOT_FOUND: EXIT_TEMPLATE_NOT_FOUND,
}


@dataclass(frozen=True)
class UpgradeOutcome:
    kind: OutcomeKind
    version_before: Optional[str] = None
    version_after: Optional[str] = None
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self.kind]


def instance_name(container: str, identity: ImageIdentity) -> str:
    """Name of the new instance running alongside ``container`` during the swap."""
    return f"{container}-{identity}"
