from __future__ import annotations

import json
from pathlib import Path

import pytest

from slackshell.config import load_config, load_settings, parse_duration, redact_token
from slackshell.errors import ConfigurationError
from slackshell.relay.config import COMPLETION_MARKER, RelayConfig


def test_load_config_reads_tokens(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"slack-token": "xoxb-1-abc", "slack-app-token": "xapp-2"}), encoding="utf-8")

    config = load_config(path)

    assert config.slack_token == "xoxb-1-abc"  # noqa: S105
    assert config.slack_app_token == "xapp-2"  # noqa: S105


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="error while reading config file"):
        load_config(tmp_path / "missing.json")


@pytest.mark.parametrize("content", ["not json", "{}", '{"slack-token": ""}'])
def test_load_config_rejects_malformed_file(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError, match="error while parsing config file"):
        load_config(path)


def test_redact_token_masks_letters_and_digits() -> None:
    assert redact_token("xoxb-123-AbC") == "XXXX-XXX-XXX"


@pytest.mark.parametrize(
    ("value", "seconds"),
    [("5s", 5.0), ("250ms", 0.25), ("1m", 60.0), ("2.5", 2.5), ("1h", 3600.0)],
)
def test_parse_duration(value: str, seconds: float) -> None:
    assert parse_duration(value) == pytest.approx(seconds)


def test_parse_duration_rejects_garbage() -> None:
    with pytest.raises(ValueError, match="invalid duration"):
        parse_duration("soon")


def test_load_settings_reads_env_and_applies_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SLACK_SHELL_CHAR_LIMIT", "1200")
    monkeypatch.setenv("SLACK_SHELL_NO_STDERR", "true")

    settings = load_settings(wait=0.5, char_limit=None)

    assert settings.char_limit == 1200
    assert settings.no_stderr is True
    assert settings.wait == 0.5


def test_load_settings_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigurationError, match="invalid settings"):
        load_settings(char_limit=0)


def test_relay_config_refuses_suppressing_both_streams() -> None:
    with pytest.raises(ConfigurationError, match="stdout and stderr"):
        RelayConfig(capture_stdout=False, capture_stderr=False)


def test_relay_config_requires_room_for_completion_marker() -> None:
    with pytest.raises(ConfigurationError, match="fit the completion marker"):
        RelayConfig(char_limit=10)

    assert RelayConfig(char_limit=len(COMPLETION_MARKER)).char_limit == 17


def test_relay_config_from_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings(wait=2.0, char_limit=100, no_stdout=True)

    config = RelayConfig.from_settings(settings)

    assert config == RelayConfig(char_limit=100, poll_interval=2.0, capture_stdout=False, capture_stderr=True)
