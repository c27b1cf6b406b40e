"""Upgrade workflow: version check, container swap, health gate and rollback."""

import logging
import socket
from typing import Optional

from rich.console import Console

from .adapters.base import validate_adapter
from .errors import ConfigurationError, PollTimeout, RuntimeCommandError
from .models import AdapterCapabilities, OutcomeKind, UpgradeOutcome, UpgradeRequest, instance_name

console = Console()
logger = logging.getLogger("updock")

UNKNOWN_VERSION = "unknown"


class UpgradeController:
    """Runs one upgrade attempt of a container end to end.

    The forward sequence never stops on a failing step: failures are logged
    and the health poll decides whether the new instance is kept or rolled
    back. Only adapter misconfiguration aborts, and it does so before any
    runtime call is made.
    """

    def __init__(
        self,
        request: UpgradeRequest,
        adapter,
        runtime,
        notifier,
        health_poller,
        hostname: Optional[str] = None,
    ):
        self.request = request
        self.adapter = adapter
        self.runtime = runtime
        self.notifier = notifier
        self.health_poller = health_poller
        self.hostname = hostname or socket.gethostname()
        self.capabilities = AdapterCapabilities()
        self.maintenance_exited = False

    def run(self) -> UpgradeOutcome:
        request = self.request
        logger.info("Starting upgrade of %s with template %s", request.container, request.template)

        try:
            self.capabilities = validate_adapter(self.adapter)
        except ConfigurationError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            return UpgradeOutcome(OutcomeKind.CONFIGURATION_ERROR, error=str(exc))

        logger.debug("Template capabilities: %s", self.capabilities)

        self.runtime.pull_image(request.image)
        running_identity = self.runtime.get_running_image_identity(request.container)
        pulled_identity = self.runtime.get_pulled_image_identity(request.image)
        logger.debug("Running image %s, pulled image %s", running_identity, pulled_identity)

        if running_identity == pulled_identity:
            console.print(f"[green]{request.container} is already running the latest {request.image}.[/green]")
            logger.info("%s is up to date", request.container)
            return UpgradeOutcome(OutcomeKind.NO_OP_ALREADY_LATEST)

        version_before = self.query_version(request.container)
        new_name = instance_name(request.container, pulled_identity)
        console.print(f"[bold blue]Upgrading {request.container} (version {version_before})...[/bold blue]")

        self.upgrade(new_name)

        try:
            self.health_poller.wait(self.adapter.is_running, request.timeout)
        except PollTimeout as exc:
            console.print(f"[bold red]{exc}[/bold red] Rolling back...")
            logger.error(str(exc))
            return self.roll_back(new_name, version_before)

        return self.finalize(new_name, version_before)

    def upgrade(self, new_name: str):
        container = self.request.container
        caps = self.capabilities

        if caps.has_maintenance:
            self._step("Entering maintenance mode", self.adapter.enter_maintenance, container)
        if caps.has_backup:
            self._step("Creating backup", self.adapter.backup, container)
        self._step("Stopping old instance", self.runtime.stop_instance, container)
        self._step("Starting new instance", self.adapter.start_instance, new_name, self.request.image)
        if caps.has_post_start_hook:
            self._step("Running post-start hook", self.adapter.post_start, new_name)
        if caps.has_maintenance:
            self.maintenance_exited = self._step(
                "Leaving maintenance mode", self.adapter.exit_maintenance, new_name
            )

    def finalize(self, new_name: str, version_before: str) -> UpgradeOutcome:
        container = self.request.container

        self._step("Removing old instance", self.runtime.remove_instance, container)
        self._step("Renaming new instance", self.runtime.rename_instance, new_name, container)
        if self.capabilities.has_maintenance and not self.maintenance_exited:
            self.maintenance_exited = self._step(
                "Leaving maintenance mode", self.adapter.exit_maintenance, container
            )

        version_after = self.query_version(container)
        console.print(
            f"[bold green]Upgraded {container} from {version_before} to {version_after}.[/bold green]"
        )
        logger.info("Upgrade of %s succeeded: %s -> %s", container, version_before, version_after)

        self.notify(
            f"{self.request.template} upgraded on {self.hostname}",
            f"{container} was upgraded from version {version_before} to version {version_after}.\n"
            f"Image: {self.request.image}\n",
        )
        return UpgradeOutcome(OutcomeKind.SUCCESS, version_before, version_after)

    def roll_back(self, new_name: str, version_before: str) -> UpgradeOutcome:
        container = self.request.container
        caps = self.capabilities

        self._step("Stopping new instance", self.runtime.stop_instance, new_name)
        self._step("Starting old instance", self.runtime.start_instance, container)
        if caps.has_backup:
            self._step("Restoring backup", self.adapter.restore, container)
        if caps.has_maintenance:
            self._step("Leaving maintenance mode", self.adapter.exit_maintenance, container)
        self._step("Removing new instance", self.runtime.remove_instance, new_name)

        restored_version = self.query_version(container)
        console.print(
            f"[bold red]Upgrade failed.[/bold red] {container} was rolled back to version {restored_version}."
        )
        logger.error("Upgrade of %s failed, rolled back to %s", container, restored_version)

        self.notify(
            f"{self.request.template} upgrade failed on {self.hostname}",
            f"{container} did not become healthy within {self.request.timeout} attempt(s) "
            f"after upgrading to {self.request.image}.\n"
            f"Version before the upgrade: {version_before}\n"
            f"The previous instance was restored and is running version {restored_version}.\n",
        )
        return UpgradeOutcome(OutcomeKind.ROLLED_BACK, version_before, restored_version)

    def query_version(self, name: str) -> str:
        if self.capabilities.has_version_query:
            try:
                version = self.adapter.get_version(name)
            except Exception as exc:
                logger.warning("Could not read version of %s: %s", name, exc)
            else:
                if version:
                    return version

        try:
            return self.runtime.get_short_identifier(name)
        except RuntimeCommandError as exc:
            logger.warning("Could not read identifier of %s: %s", name, exc)
            return UNKNOWN_VERSION

    def notify(self, subject: str, body: str):
        try:
            self.notifier.send(subject, body)
        except Exception as exc:
            logger.warning("Could not send notification: %s", exc)

    def _step(self, description: str, callback, *args) -> bool:
        logger.info("%s...", description)
        try:
            callback(*args)
        except Exception as exc:
            console.print(f"[yellow]{description} failed: {exc}[/yellow]")
            logger.warning("%s failed: %s", description, exc)
            return False
        return True
