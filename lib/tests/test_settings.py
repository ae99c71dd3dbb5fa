from __future__ import annotations

import os
import stat

import pytest

from appwrite_client import Client, ClientSettings, SettingsError
from appwrite_client import settings as settings_mod


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (settings_mod.ENV_ENDPOINT, settings_mod.ENV_PROJECT, settings_mod.ENV_SELF_SIGNED):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path, text: str):
    path = tmp_path / "settings.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert settings_mod.load_settings(tmp_path / "nope.toml") == ClientSettings()


def test_load_settings_with_profile(tmp_path) -> None:
    path = _write(
        tmp_path,
        "\n".join(
            [
                'endpoint = "https://cloud.test/v1/"',
                'project = "default-project"',
                'locale = "en"',
                "",
                "[headers]",
                'X-Custom = "1"',
                "",
                "[profiles.dev]",
                'endpoint = "https://localhost/v1"',
                "self_signed = true",
                "timeout_s = 5",
                "",
            ]
        ),
    )

    base = settings_mod.load_settings(path)
    assert base.endpoint == "https://cloud.test/v1"
    assert base.project == "default-project"
    assert base.headers == {"x-custom": "1"}
    assert base.self_signed is False

    dev = settings_mod.load_settings(path, profile="dev")
    assert dev.endpoint == "https://localhost/v1"
    assert dev.project == "default-project"
    assert dev.self_signed is True
    assert dev.timeout_s == 5.0


def test_unknown_profile(tmp_path) -> None:
    path = _write(tmp_path, 'endpoint = "https://cloud.test/v1"\n')
    with pytest.raises(SettingsError):
        settings_mod.load_settings(path, profile="prod")


def test_invalid_toml(tmp_path) -> None:
    path = _write(tmp_path, "endpoint = \n")
    with pytest.raises(SettingsError):
        settings_mod.load_settings(path)


def test_env_overrides(tmp_path, monkeypatch) -> None:
    path = _write(tmp_path, 'endpoint = "https://cloud.test/v1"\nproject = "p1"\n')
    monkeypatch.setenv(settings_mod.ENV_ENDPOINT, "https://env.test/v1/")
    monkeypatch.setenv(settings_mod.ENV_PROJECT, "env-project")
    monkeypatch.setenv(settings_mod.ENV_SELF_SIGNED, "true")

    loaded = settings_mod.load_settings(path)
    assert loaded.endpoint == "https://env.test/v1"
    assert loaded.project == "env-project"
    assert loaded.self_signed is True


def test_save_settings_omits_empty_values(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(settings_mod, "user_config_dir", lambda _: str(tmp_path))
    path = settings_mod.save_settings(ClientSettings(endpoint="https://cloud.test/v1", locale="fr"))
    contents = tmp_path.joinpath("settings.toml").read_text(encoding="utf-8")

    assert path.endswith("settings.toml")
    assert "project =" not in contents
    assert "endpoint_realtime" not in contents
    assert 'locale = "fr"' in contents
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
    assert settings_mod.load_settings().locale == "fr"


def test_client_from_settings() -> None:
    cfg = ClientSettings(
        endpoint="https://cloud.test/v1",
        endpoint_realtime="wss://rt.test",
        project="p1",
        jwt="token",
        locale="de",
        headers={"x-custom": "1"},
    )
    client = Client.from_settings(cfg)

    assert client.endpoint == "https://cloud.test/v1"
    assert client.endpoint_realtime == "wss://rt.test"
    assert client.config == {"project": "p1", "jwt": "token", "locale": "de"}
    assert client.headers["x-custom"] == "1"
    assert client.self_signed is False
