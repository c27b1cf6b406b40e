"""Docker runtime gateway for updock."""

from typing import List

from updock.errors import ConfigurationError, RuntimeCommandError
from updock.errors_catalog import actionable_error
from updock.models import ImageIdentity

SHORT_ID_LENGTH = 12


class DockerRuntimeService:
    """Translates container lifecycle operations into docker CLI calls."""

    def __init__(self, command_runner, logger, console):
        self.command_runner = command_runner
        self.logger = logger
        self.console = console

    def validate_environment(self):
        try:
            self.command_runner.run(["docker", "--version"], capture_output=True)
        except RuntimeCommandError as exc:
            raise ConfigurationError(actionable_error("docker_not_found")) from exc

    def pull_image(self, image: str):
        self.console.print(f"[blue]Pulling {image}...[/blue]")
        self.command_runner.run(["docker", "pull", image], capture_output=True)

    def get_running_image_identity(self, container: str) -> ImageIdentity:
        return self._inspect(["docker", "inspect", "--format", "{{.Image}}", container])

    def get_pulled_image_identity(self, image: str) -> ImageIdentity:
        return self._inspect(["docker", "image", "inspect", "--format", "{{.Id}}", image])

    def get_short_identifier(self, name: str) -> str:
        container_id = self._inspect(["docker", "inspect", "--format", "{{.Id}}", name])
        return container_id[:SHORT_ID_LENGTH]

    def run_container(self, args: List[str]):
        self.command_runner.run(["docker", "run", "-d"] + list(args), capture_output=True)

    def exec_in_instance(self, name: str, *cmd: str, capture_output: bool = False) -> str:
        result = self.command_runner.run(
            ["docker", "exec", name] + list(cmd),
            capture_output=capture_output,
        )
        return (result.stdout or "").strip() if capture_output else ""

    def start_instance(self, name: str):
        self.command_runner.run(["docker", "start", name], capture_output=True)

    def stop_instance(self, name: str):
        self.command_runner.run(["docker", "stop", name], capture_output=True)

    def rename_instance(self, old_name: str, new_name: str):
        self.command_runner.run(["docker", "rename", old_name, new_name], capture_output=True)

    def remove_instance(self, name: str):
        self.command_runner.run(["docker", "rm", name], capture_output=True)

    def _inspect(self, cmd: List[str]) -> ImageIdentity:
        result = self.command_runner.run(cmd, capture_output=True)
        identity = (result.stdout or "").strip()
        if not identity:
            raise RuntimeCommandError(f"Empty response from: {' '.join(cmd)}")
        # Container names only accept [a-zA-Z0-9_.-], so drop the digest algorithm.
        _, _, digest = identity.rpartition(":")
        return digest
