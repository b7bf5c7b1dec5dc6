"""Tests for settings loading."""

import pytest
import yaml

from alertwire.config import Settings


def test_defaults(tmp_path) -> None:
    settings = Settings(_env_file=None, data_dir=tmp_path, app_url="https://alerts.example.com/")

    assert settings.webhook_callback_url == "https://alerts.example.com/api/webhooks/superfeedr"
    assert settings.alerts.tier_limits == {"FREE": 1, "PRO": 20}
    assert settings.alerts.blocked_categories == ["Sports"]
    assert settings.webhook_test_enabled is True


def test_test_endpoint_gate(tmp_path) -> None:
    production = Settings(_env_file=None, data_dir=tmp_path, environment="production")
    opted_in = Settings(_env_file=None, data_dir=tmp_path, environment="production", enable_webhook_test=True)

    assert production.webhook_test_enabled is False
    assert opted_in.webhook_test_enabled is True


def test_yaml_overlay_merges_sections(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text(
        yaml.safe_dump(
            {
                "alerts": {"tier_limits": {"FREE": 3, "PRO": -1}},
                "dispatch": {"max_concurrency": 4},
                "queries": {"use_llm": False},
            }
        )
    )
    settings = Settings(_env_file=None, data_dir=tmp_path)

    settings.load_yaml_config()

    assert settings.alerts.tier_limits == {"FREE": 3, "PRO": -1}
    assert settings.alerts.blocked_categories == ["Sports"]
    assert settings.dispatch.max_concurrency == 4
    assert settings.dispatch.sms_enabled is True
    assert settings.queries.use_llm is False


def test_missing_yaml_keeps_defaults(tmp_path) -> None:
    settings = Settings(_env_file=None, data_dir=tmp_path)

    settings.load_yaml_config()

    assert settings.dispatch.max_concurrency == 10


def test_invalid_yaml_raises(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text("alerts: [unclosed")
    settings = Settings(_env_file=None, data_dir=tmp_path)

    with pytest.raises(yaml.YAMLError):
        settings.load_yaml_config()


def test_nested_env_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("DISPATCH__MAX_CONCURRENCY", "3")
    monkeypatch.setenv("SUPERFEEDR_LOGIN", "alertbot")

    settings = Settings(_env_file=None, data_dir=tmp_path)

    assert settings.dispatch.max_concurrency == 3
    assert settings.superfeedr_login == "alertbot"
