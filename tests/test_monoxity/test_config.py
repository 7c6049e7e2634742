"""Tests for monoxity.config."""

from __future__ import annotations

import os
import pathlib

import pytest

from monoxity.config import StoreConfig, _load_dotenv, load_store_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # .env loading writes to os.environ; give each test a private copy.
    monkeypatch.setattr(os, "environ", dict(os.environ))
    for name in ("MONOXITY_TABLE", "MONOXITY_FILE_NAME", "MONOXITY_DIRECTORY"):
        monkeypatch.delenv(name, raising=False)


def _write_toml(root: pathlib.Path, body: str) -> None:
    (root / "config").mkdir()
    (root / "config" / "config.toml").write_text(body)


class TestStoreConfig:
    def test_defaults(self):
        cfg = StoreConfig()
        assert cfg.table == "monoxity"
        assert cfg.file_name == "monoxity"
        assert cfg.db_path == pathlib.Path("monoxity.db")

    def test_db_path(self, tmp_path):
        cfg = StoreConfig(file_name="app", directory=str(tmp_path))
        assert cfg.db_path == tmp_path / "app.db"


class TestLoadStoreConfig:
    def test_no_files_gives_defaults(self, tmp_path):
        assert load_store_config(tmp_path) == StoreConfig()

    def test_reads_toml_section(self, tmp_path):
        _write_toml(tmp_path, '[monoxity]\ntable = "users"\nfile_name = "app"\ndirectory = "data"\n')
        cfg = load_store_config(tmp_path)
        assert cfg == StoreConfig(table="users", file_name="app", directory="data")

    def test_partial_toml_section(self, tmp_path):
        _write_toml(tmp_path, '[monoxity]\ntable = "users"\n')
        cfg = load_store_config(tmp_path)
        assert cfg.table == "users"
        assert cfg.file_name == "monoxity"

    def test_missing_section(self, tmp_path):
        _write_toml(tmp_path, '[other]\nx = 1\n')
        assert load_store_config(tmp_path) == StoreConfig()

    def test_env_overrides_toml(self, tmp_path, monkeypatch):
        _write_toml(tmp_path, '[monoxity]\ntable = "users"\n')
        monkeypatch.setenv("MONOXITY_TABLE", "accounts")
        monkeypatch.setenv("MONOXITY_DIRECTORY", "/var/lib/app")
        cfg = load_store_config(tmp_path)
        assert cfg.table == "accounts"
        assert cfg.directory == "/var/lib/app"

    def test_dotenv_values_used(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text('MONOXITY_FILE_NAME="cache"\n')
        cfg = load_store_config(tmp_path)
        assert cfg.file_name == "cache"


class TestLoadDotenv:
    def test_parses_and_strips_quotes(self, tmp_path):
        (tmp_path / ".env").write_text(
            "# comment\n\nMONOXITY_TEST_A='one'\nnot a pair\nMONOXITY_TEST_B = two\n"
        )
        _load_dotenv(tmp_path)
        assert os.environ["MONOXITY_TEST_A"] == "one"
        assert os.environ["MONOXITY_TEST_B"] == "two"

    def test_does_not_override_existing(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MONOXITY_TABLE", "from_env")
        (tmp_path / ".env").write_text("MONOXITY_TABLE=from_file\n")
        _load_dotenv(tmp_path)
        assert os.environ["MONOXITY_TABLE"] == "from_env"
