import pytest

from updock.errors import ConfigurationError
from updock.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".updock.yml"
    config_file.write_text(
        "timeout: 120\nemail_recipients: ops@example.com\nsettings:\n  GITLAB_URL: https://git.example.com\n",
        encoding="utf-8",
    )

    loaded = ConfigLoader().load(str(config_file))

    assert loaded["timeout"] == 120
    assert loaded["email_recipients"] == "ops@example.com"
    assert loaded["settings"]["GITLAB_URL"] == "https://git.example.com"


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".updock.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_non_mapping_settings(tmp_path):
    config_file = tmp_path / ".updock.yml"
    config_file.write_text("settings: [a, b]\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="settings"):
        ConfigLoader().load(str(config_file))


def test_build_settings_overlays_config_on_environment():
    settings = ConfigLoader().build_settings(
        {"settings": {"GITLAB_HTTP_PORT": 8080, "GITLAB_URL": None}},
        environ={"GITLAB_HTTP_PORT": "80", "GITLAB_DATA": "/srv/data"},
    )

    assert settings["GITLAB_HTTP_PORT"] == "8080"
    assert settings["GITLAB_DATA"] == "/srv/data"
    assert settings["GITLAB_URL"] == ""
    with pytest.raises(TypeError):
        settings["GITLAB_DATA"] = "/tmp"


@pytest.mark.parametrize(
    "content, message",
    [
        ('verbose: "no"\n', "verbose"),
        ("timeout: -1\n", "timeout"),
        ("timeout: soon\n", "timeout"),
        ("smtp_port: abc\n", "smtp_port"),
        ("smtp_port: 70000\n", "smtp_port"),
        ("smtp_port: true\n", "smtp_port"),
    ],
)
def test_config_loader_rejects_invalid_values(tmp_path, content, message):
    config_file = tmp_path / ".updock.yml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=message):
        ConfigLoader().load(str(config_file))


def test_config_loader_accepts_typed_values(tmp_path):
    config_file = tmp_path / ".updock.yml"
    config_file.write_text("verbose: false\ntimeout: 0\nsmtp_port: 2525\n", encoding="utf-8")

    loaded = ConfigLoader().load(str(config_file))

    assert loaded == {"verbose": False, "timeout": 0, "smtp_port": 2525}
