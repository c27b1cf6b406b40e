"""GitLab CE adapter."""

from dataclasses import dataclass
from typing import Mapping

import requests

from updock.adapters.base import ApplicationAdapter
from updock.errors import ConfigurationError
from updock.errors_catalog import actionable_error

VERSION_MANIFEST = "/opt/gitlab/version-manifest.txt"


@dataclass(frozen=True)
class GitLabSettings:
    config_dir: str
    logs_dir: str
    data_dir: str
    url: str
    http_port: int = 80
    https_port: int = 443
    ssh_port: int = 22
    image: str = "gitlab/gitlab-ce:latest"

    @classmethod
    def from_settings(cls, settings: Mapping[str, str]) -> "GitLabSettings":
        required = {}
        for key in ("GITLAB_CONFIG", "GITLAB_LOGS", "GITLAB_DATA", "GITLAB_URL"):
            value = settings.get(key)
            if not value:
                raise ConfigurationError(
                    actionable_error("missing_setting", template="gitlab", setting=key)
                )
            required[key] = value

        return cls(
            config_dir=required["GITLAB_CONFIG"],
            logs_dir=required["GITLAB_LOGS"],
            data_dir=required["GITLAB_DATA"],
            url=required["GITLAB_URL"],
            http_port=_port(settings, "GITLAB_HTTP_PORT", 80),
            https_port=_port(settings, "GITLAB_HTTPS_PORT", 443),
            ssh_port=_port(settings, "GITLAB_SSH_PORT", 22),
            image=settings.get("IMAGE") or cls.image,
        )


def _port(settings: Mapping[str, str], key: str, default: int) -> int:
    raw = settings.get(key)
    if not raw:
        return default
    try:
        port = int(raw)
    except ValueError:
        port = 0
    if not 1 <= port <= 65535:
        raise ConfigurationError(
            actionable_error("invalid_setting", template="gitlab", setting=key, value=raw)
        )
    return port


class GitLabAdapter(ApplicationAdapter):
    """Runs GitLab CE with its config, logs and data directories bind-mounted."""

    name = "gitlab"

    def __init__(self, settings: GitLabSettings, runtime, logger, requests_module=requests):
        self.settings = settings
        self.image = settings.image
        self.runtime = runtime
        self.logger = logger
        self.requests = requests_module

    @classmethod
    def from_settings(cls, settings: Mapping[str, str], runtime, logger):
        return cls(GitLabSettings.from_settings(settings), runtime, logger)

    def start_instance(self, name: str, image: str):
        s = self.settings
        self.runtime.run_container(
            [
                "--restart", "always",
                "-p", f"{s.http_port}:80",
                "-p", f"{s.https_port}:443",
                "-p", f"{s.ssh_port}:22",
                "-v", f"{s.config_dir}:/etc/gitlab",
                "-v", f"{s.logs_dir}:/var/log/gitlab",
                "-v", f"{s.data_dir}:/var/opt/gitlab",
                "--name", name,
                image,
            ]
        )

    def is_running(self) -> bool:
        try:
            response = self.requests.head(self.settings.url, timeout=5)
            response.raise_for_status()
        except self.requests.RequestException as exc:
            self.logger.debug("GitLab is not reachable at %s: %s", self.settings.url, exc)
            return False
        return True

    def enter_maintenance(self, name: str):
        self.runtime.exec_in_instance(name, "gitlab-ctl", "deploy-page", "up")

    def exit_maintenance(self, name: str):
        self.runtime.exec_in_instance(name, "gitlab-ctl", "deploy-page", "down")

    def backup(self, name: str):
        self.runtime.exec_in_instance(name, "gitlab-rake", "gitlab:backup:create")

    def restore(self, name: str):
        self.runtime.exec_in_instance(name, "gitlab-ctl", "reconfigure")
        # Without force=yes the rake task waits for confirmation on stdin.
        self.runtime.exec_in_instance(name, "gitlab-rake", "gitlab:backup:restore", "force=yes")

    def get_version(self, name: str) -> str:
        manifest = self.runtime.exec_in_instance(name, "cat", VERSION_MANIFEST, capture_output=True)
        for line in manifest.splitlines():
            if line.startswith("gitlab-ce "):
                return line[len("gitlab-ce "):].strip()
        return ""
