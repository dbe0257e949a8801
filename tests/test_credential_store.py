"""Tests for the API key credential stores."""

import json
import os
import stat

import pytest

from topicbingo.services import (
    EnvCredentialStore,
    InMemoryCredentialStore,
    SettingsCredentialStore,
    StoreUnavailableError,
)


class TestInMemoryStore:
    def test_starts_empty(self):
        store = InMemoryCredentialStore()
        assert store.current_secret() is None
        assert store.has_saved_secret is False

    def test_save_trims(self):
        store = InMemoryCredentialStore()
        assert store.save("  sk-test \n") is True
        assert store.current_secret() == "sk-test"
        assert store.has_saved_secret

    def test_blank_secret_is_ignored(self):
        store = InMemoryCredentialStore("sk-old")
        assert store.save("   ") is False
        assert store.current_secret() == "sk-old"

    def test_clear(self):
        store = InMemoryCredentialStore("sk-old")
        store.clear()
        assert store.current_secret() is None


class TestSettingsStore:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "creds" / "credentials.json"
        SettingsCredentialStore(str(path)).save("sk-file")

        assert SettingsCredentialStore(str(path)).current_secret() == "sk-file"
        assert json.loads(path.read_text()) == {"openai": {"api_key": "sk-file"}}

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
    def test_file_is_private(self, tmp_path):
        path = tmp_path / "credentials.json"
        SettingsCredentialStore(str(path)).save("sk-file")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_services_are_separate(self, tmp_path):
        path = str(tmp_path / "credentials.json")
        SettingsCredentialStore(path, service="openai").save("sk-openai")
        SettingsCredentialStore(path, service="groq").save("gsk-groq")

        assert SettingsCredentialStore(path, service="openai").current_secret() == "sk-openai"
        assert SettingsCredentialStore(path, service="groq").current_secret() == "gsk-groq"

    def test_clear(self, tmp_path):
        store = SettingsCredentialStore(str(tmp_path / "credentials.json"))
        store.save("sk-file")
        store.clear()
        assert store.current_secret() is None

    def test_corrupt_file_reads_as_missing(self, tmp_path):
        path = tmp_path / "credentials.json"
        path.write_text("not json")
        assert SettingsCredentialStore(str(path)).current_secret() is None

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = SettingsCredentialStore(str(blocker / "credentials.json"))

        with pytest.raises(StoreUnavailableError):
            store.save("sk-file")
        assert store.has_saved_secret is False


class TestEnvStore:
    def test_reads_and_sets_variable(self, monkeypatch, tmp_path):
        monkeypatch.delenv("BINGO_TEST_KEY", raising=False)
        store = EnvCredentialStore("BINGO_TEST_KEY", env_file=str(tmp_path / "missing.env"))
        assert store.current_secret() is None

        monkeypatch.setenv("BINGO_TEST_KEY", "sk-env")
        assert store.current_secret() == "sk-env"

        store.save("sk-new")
        assert os.environ["BINGO_TEST_KEY"] == "sk-new"
        store.clear()
        assert store.current_secret() is None

    def test_loads_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.delenv("BINGO_DOTENV_KEY", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("BINGO_DOTENV_KEY=sk-dotenv\n")

        store = EnvCredentialStore("BINGO_DOTENV_KEY", env_file=str(env_file))
        try:
            assert store.current_secret() == "sk-dotenv"
        finally:
            os.environ.pop("BINGO_DOTENV_KEY", None)
