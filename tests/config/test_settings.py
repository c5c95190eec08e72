"""Tests for FolkSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from folkstore.config.settings import FolkSettings


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = FolkSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.storage.basename == "folklore"
        assert settings.storage.transient is False
        assert settings.bootstrap.location == "data/init-data.json"
        assert settings.bootstrap.timeout_sec == 10.0
        assert settings.client.request_timeout_ms == 10_000
        assert settings.backend.greet_on_connect is True

    def test_frozen(self, tmp_path: Path) -> None:
        settings = FolkSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]


class TestDerivedPaths:
    def test_default_storage_dir(self, tmp_path: Path) -> None:
        assert FolkSettings.from_cli(root=tmp_path).storage_dir == tmp_path / ".folkstore"

    def test_relative_storage_dir(self, tmp_path: Path) -> None:
        (tmp_path / "folkstore.toml").write_text('[storage]\ndirectory = "var/db"\n')
        settings = FolkSettings.from_cli(root=tmp_path)
        assert settings.storage_dir == tmp_path / "var" / "db"

    def test_absolute_storage_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere"
        (tmp_path / "folkstore.toml").write_text(f'[storage]\ndirectory = "{target.as_posix()}"\n')
        assert FolkSettings.from_cli(root=tmp_path).storage_dir == target

    def test_bootstrap_path_resolves_against_root(self, tmp_path: Path) -> None:
        settings = FolkSettings.from_cli(root=tmp_path)
        assert settings.bootstrap_location == str(tmp_path / "data" / "init-data.json")

    def test_bootstrap_url_unchanged(self, tmp_path: Path) -> None:
        url = "https://folklore.example/init-data.json"
        (tmp_path / "folkstore.toml").write_text(f'[bootstrap]\nlocation = "{url}"\n')
        assert FolkSettings.from_cli(root=tmp_path).bootstrap_location == url


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "folkstore.toml").write_text(
            '[storage]\nbasename = "archive"\n[client]\nrequest_timeout_ms = 2500\n'
        )
        settings = FolkSettings.from_cli(root=tmp_path)
        assert settings.storage.basename == "archive"
        assert settings.client.request_timeout_ms == 2500
        assert settings.backend.greet_on_connect is True  # default preserved

    def test_sparse_override(self, tmp_path: Path) -> None:
        (tmp_path / "folkstore.toml").write_text("[storage]\ntransient = true\n")
        settings = FolkSettings.from_cli(root=tmp_path)
        assert settings.storage.transient is True
        assert settings.storage.basename == "folklore"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text("[backend]\ngreet_on_connect = false\n")
        settings = FolkSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.backend.greet_on_connect is False
        assert settings.config_path == custom

    def test_root_from_toml_location(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "folkstore.toml").write_text("")
        subdir = tmp_path / "sub" / "deep"
        subdir.mkdir(parents=True)
        monkeypatch.chdir(subdir)
        settings = FolkSettings.from_cli()
        assert settings.root == tmp_path.resolve()

    def test_root_from_config_beside_store(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        store_dir = tmp_path / ".folkstore"
        store_dir.mkdir()
        (store_dir / "folkstore.toml").write_text("[logging]\ntrace_messages = true\n")
        monkeypatch.chdir(tmp_path)
        settings = FolkSettings.from_cli()
        assert settings.root == tmp_path.resolve()
        assert settings.storage_dir == tmp_path.resolve() / ".folkstore"
        assert settings.logging.trace_messages is True

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "folkstore.toml").write_text("[storage\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            FolkSettings.from_cli(root=tmp_path)


class TestPriority:
    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = FolkSettings.from_cli(root=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True

    def test_cli_flags_override_toml(self, tmp_path: Path) -> None:
        (tmp_path / "folkstore.toml").write_text("verbose = true\n")
        settings = FolkSettings.from_cli(root=tmp_path, verbose=False)
        assert settings.verbose is False

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOLKSTORE_LOG_JSON", "true")
        assert FolkSettings.from_cli(root=tmp_path).log_json is True

    def test_nested_env_var_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "folkstore.toml").write_text("[client]\nrequest_timeout_ms = 2500\n")
        monkeypatch.setenv("FOLKSTORE_CLIENT__REQUEST_TIMEOUT_MS", "750")
        assert FolkSettings.from_cli(root=tmp_path).client.request_timeout_ms == 750
