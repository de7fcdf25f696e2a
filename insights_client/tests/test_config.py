import logging

import pytest

from insights_client import config as config_module
from insights_client.config import Config, ConfigParseError, parse_bool, parse_int


@pytest.fixture(autouse=True)
def no_kubeconfig(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    config_module.set_config(None)
    yield
    config_module.set_config(None)


def test_defaults():
    config = Config.load(environ={})

    assert config.service_port == ":3030"
    assert config.http_timeout == 180000
    assert config.use_mock is False
    assert config.ccx_server == "http://localhost:8080/api/v1/clusters"
    assert config.ccx_token == ""
    assert config.kube_config == ""
    assert config.poll_interval == 10
    assert config.request_interval == 3
    assert config.log_level == "INFO"


def test_environment_overrides():
    config = Config.load(environ={
        "SERVICE_PORT": "127.0.0.1:8443",
        "HTTP_TIMEOUT": "5000",
        "USE_MOCK": "true",
        "CCX_SERVER": "https://console.example.com/api/insights/v1/clusters",
        "CCX_TOKEN": "secret-token",
        "POLL_INTERVAL": "30",
        "REQUEST_INTERVAL": "1",
    })

    assert config.listen_address() == ("127.0.0.1", 8443)
    assert config.http_timeout_seconds == 5.0
    assert config.use_mock is True
    assert config.ccx_server.startswith("https://console.example.com")
    assert config.ccx_token == "secret-token"
    assert config.poll_interval == 30
    assert config.request_interval == 1


def test_values_already_set_are_kept_without_override():
    config = Config.load(environ={}, poll_interval=2, use_mock=True, ccx_server="http://ccx")

    assert config.poll_interval == 2
    assert config.use_mock is True
    assert config.ccx_server == "http://ccx"


def test_override_wins_over_value_already_set():
    config = Config.load(environ={"POLL_INTERVAL": "7"}, poll_interval=2)

    assert config.poll_interval == 7


def test_unparseable_int_keeps_default(caplog):
    with caplog.at_level(logging.ERROR, logger="insights_client.config"):
        config = Config.load(environ={"POLL_INTERVAL": "ten", "HTTP_TIMEOUT": "1.5"})

    assert config.poll_interval == 10
    assert config.http_timeout == 180000
    assert "POLL_INTERVAL" in caplog.text


def test_unparseable_values_keep_previous_value():
    config = Config.load(environ={"REQUEST_INTERVAL": "soon", "USE_MOCK": "yes"}, request_interval=9, use_mock=True)

    assert config.request_interval == 9
    assert config.use_mock is True


@pytest.mark.parametrize("value,expected", [("1", True), ("t", True), ("TRUE", True), ("0", False), ("False", False)])
def test_parse_bool(value, expected):
    assert parse_bool("USE_MOCK", value) is expected


def test_parse_errors():
    with pytest.raises(ConfigParseError):
        parse_bool("USE_MOCK", "yes")
    with pytest.raises(ConfigParseError):
        parse_int("POLL_INTERVAL", "10m")


def test_default_kubeconfig_used_when_present(tmp_path):
    kube_dir = tmp_path / ".kube"
    kube_dir.mkdir()
    (kube_dir / "config").write_text("apiVersion: v1\n")

    config = Config.load(environ={})

    assert config.kube_config == str(kube_dir / "config")


def test_redacted_masks_token():
    config = Config.load(environ={"CCX_TOKEN": "secret-token"})

    assert config.redacted()["ccx_token"] == "[REDACTED]"
    assert config.redacted()["ccx_server"] == config.ccx_server


def test_get_config_is_cached(monkeypatch):
    monkeypatch.setenv("POLL_INTERVAL", "15")

    first = config_module.get_config()

    assert first.poll_interval == 15
    assert config_module.get_config() is first
