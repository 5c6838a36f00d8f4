from __future__ import annotations

import pytest

from linkqueue.config.settings import SettingsError, load_settings


def _write(tmp_path, text: str):
    path = tmp_path / "settings.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_settings_reads_sections(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    path = _write(
        tmp_path,
        """
database_url: sqlite:///tmp/test.db
feed:
  url: http://example.com/rss
  title_filter: Assorted
  refresh_seconds: 600
buffer:
  access_token: secret
  services: twitter
web:
  port: 8000
""",
    )

    settings = load_settings(path)

    assert settings.database_url == "sqlite:///tmp/test.db"
    assert settings.feed.url == "http://example.com/rss"
    assert settings.feed.title_filter == "Assorted"
    assert settings.feed.refresh_seconds == 600
    assert settings.buffer.enabled
    assert settings.buffer.services == ["twitter"]
    assert settings.web.port == 8000


def test_defaults_apply_to_missing_sections(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("PORT", raising=False)

    settings = load_settings(_write(tmp_path, "request_timeout: 3\n"))

    assert settings.request_timeout == 3
    assert settings.feed.title_filter == "link"
    assert settings.buffer.enabled is False
    assert settings.buffer.services == ["facebook"]
    assert settings.web.port == 19870


def test_port_environment_variable_overrides_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PORT", ":9999")

    settings = load_settings(_write(tmp_path, "web:\n  port: 8000\n"))

    assert settings.web.port == 9999


def test_settings_path_from_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LINKQUEUE_SETTINGS", str(_write(tmp_path, "user_agent: custom/1.0\n")))

    assert load_settings().user_agent == "custom/1.0"


def test_invalid_settings_raise(tmp_path) -> None:
    with pytest.raises(SettingsError):
        load_settings(tmp_path / "missing.yaml")
    with pytest.raises(SettingsError):
        load_settings(_write(tmp_path, "- not\n- a mapping\n"))
    with pytest.raises(SettingsError):
        load_settings(_write(tmp_path, "feed: nope\n"))


@pytest.mark.parametrize(
    "text",
    [
        "feed:\n  refresh_seconds: hourly\n",
        "request_timeout: soon\n",
        "web:\n  port: http\n",
    ],
)
def test_non_numeric_values_raise_settings_error(tmp_path, monkeypatch, text: str) -> None:
    monkeypatch.delenv("PORT", raising=False)

    with pytest.raises(SettingsError):
        load_settings(_write(tmp_path, text))


def test_refresh_interval_is_loaded_as_written(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("PORT", raising=False)

    settings = load_settings(_write(tmp_path, "feed:\n  refresh_seconds: 5\n"))

    assert settings.feed.refresh_seconds == 5
