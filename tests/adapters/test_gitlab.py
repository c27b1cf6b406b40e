import pytest
import requests

from updock.adapters.base import validate_adapter
from updock.adapters.gitlab import GitLabAdapter, GitLabSettings
from updock.errors import ConfigurationError

SETTINGS = {
    "GITLAB_CONFIG": "/srv/gitlab/config",
    "GITLAB_LOGS": "/srv/gitlab/logs",
    "GITLAB_DATA": "/srv/gitlab/data",
    "GITLAB_URL": "https://git.example.com",
}


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


class FakeRuntime:
    def __init__(self, output=""):
        self.calls = []
        self.output = output

    def run_container(self, args):
        self.calls.append(("run", args))

    def exec_in_instance(self, name, *cmd, capture_output=False):
        self.calls.append(("exec", name) + cmd)
        return self.output if capture_output else ""


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeRequests:
    RequestException = requests.RequestException

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def head(self, url, timeout=None):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


def _adapter(runtime=None, requests_module=None, **overrides):
    settings = GitLabSettings.from_settings(dict(SETTINGS, **overrides))
    return GitLabAdapter(settings, runtime or FakeRuntime(), DummyLogger(), requests_module=requests_module or requests)


def test_settings_defaults():
    settings = GitLabSettings.from_settings(SETTINGS)

    assert (settings.http_port, settings.https_port, settings.ssh_port) == (80, 443, 22)
    assert settings.image == "gitlab/gitlab-ce:latest"


def test_settings_require_directories_and_url():
    incomplete = dict(SETTINGS)
    del incomplete["GITLAB_DATA"]

    with pytest.raises(ConfigurationError, match="GITLAB_DATA"):
        GitLabSettings.from_settings(incomplete)


def test_settings_reject_invalid_port():
    with pytest.raises(ConfigurationError, match="GITLAB_SSH_PORT"):
        GitLabSettings.from_settings(dict(SETTINGS, GITLAB_SSH_PORT="ssh"))


def test_image_can_be_overridden():
    assert _adapter(IMAGE="gitlab/gitlab-ee:16.1.0-ee.0").image == "gitlab/gitlab-ee:16.1.0-ee.0"


def test_gitlab_adapter_supports_every_capability():
    capabilities = validate_adapter(_adapter())

    assert capabilities.has_maintenance
    assert capabilities.has_backup
    assert capabilities.has_version_query
    assert not capabilities.has_post_start_hook


def test_start_instance_maps_ports_and_volumes():
    runtime = FakeRuntime()
    adapter = _adapter(runtime, GITLAB_SSH_PORT="2222")

    adapter.start_instance("gitlab-abc", "gitlab/gitlab-ce:latest")

    _, args = runtime.calls[0]
    assert args[-3:] == ["--name", "gitlab-abc", "gitlab/gitlab-ce:latest"]
    assert "2222:22" in args
    assert "/srv/gitlab/data:/var/opt/gitlab" in args


def test_is_running_follows_http_status():
    assert _adapter(requests_module=FakeRequests(FakeResponse(200))).is_running() is True
    assert _adapter(requests_module=FakeRequests(FakeResponse(502))).is_running() is False
    assert _adapter(requests_module=FakeRequests(error=requests.ConnectionError("refused"))).is_running() is False


def test_get_version_reads_version_manifest():
    runtime = FakeRuntime(output="gitlab-ce 16.1.2\ngitlab-shell 14.23.0\n")

    assert _adapter(runtime).get_version("gitlab") == "16.1.2"


def test_restore_reconfigures_before_restoring():
    runtime = FakeRuntime()

    _adapter(runtime).restore("gitlab")

    assert runtime.calls == [
        ("exec", "gitlab", "gitlab-ctl", "reconfigure"),
        ("exec", "gitlab", "gitlab-rake", "gitlab:backup:restore", "force=yes"),
    ]
