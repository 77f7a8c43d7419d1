"""Tests for API token storage."""

import json
import os
import stat

import pytest

from errors import AuthenticationRequiredError, ErrorKind
from utils.storage import TokenStorage

PERSONAL_TOKEN = "0123456789abcdef0123456789abcdef01234567"


class TestTokenStorage:
    def test_empty(self, storage):
        assert storage.load() is None
        assert storage.get_status()["has_token"] is False

    def test_save_and_load(self, storage):
        storage.save(PERSONAL_TOKEN)
        assert storage.load() == PERSONAL_TOKEN
        assert json.loads(storage.config_file.read_text()) == {"api_token": PERSONAL_TOKEN}

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_file_permissions(self, storage):
        storage.save(PERSONAL_TOKEN)
        assert stat.S_IMODE(storage.config_file.stat().st_mode) == 0o600
        assert stat.S_IMODE(storage.config_file.parent.stat().st_mode) == 0o700

    def test_save_keeps_other_settings(self, storage):
        storage.config_file.parent.mkdir(parents=True)
        storage.config_file.write_text(json.dumps({"default_project": "Inbox"}))

        storage.save(PERSONAL_TOKEN)
        storage.clear()

        assert json.loads(storage.config_file.read_text()) == {"default_project": "Inbox"}

    @pytest.mark.parametrize("token", ["", "   ", "short", "has a space in it"])
    def test_rejects_invalid_tokens(self, storage, token):
        with pytest.raises(ValueError):
            storage.save(token)
        assert not storage.config_file.exists()

    def test_env_var_wins(self, storage, monkeypatch):
        storage.save(PERSONAL_TOKEN)
        monkeypatch.setenv("TODOIST_API_TOKEN", "oauth-token-from-env")

        assert storage.load() == "oauth-token-from-env"
        status = storage.get_status()
        assert status["source"] == "environment"
        assert status["token_type"] == "oauth"

    def test_status_from_file(self, storage):
        storage.save(PERSONAL_TOKEN)
        status = storage.get_status()
        assert status == {
            "has_token": True,
            "source": "config_file",
            "token_type": "personal",
            "env_var": "TODOIST_API_TOKEN",
            "config_file": str(storage.config_file),
        }
        assert PERSONAL_TOKEN not in json.dumps(status)

    def test_unreadable_file_is_ignored(self, storage):
        storage.config_file.parent.mkdir(parents=True)
        storage.config_file.write_text("{not json")
        assert storage.load() is None

    def test_clear_without_file(self, storage):
        storage.clear()
        assert not storage.config_file.exists()

    def test_require(self, storage):
        with pytest.raises(AuthenticationRequiredError) as exc_info:
            storage.require()
        assert exc_info.value.kind is ErrorKind.AUTH_REQUIRED

        storage.save(PERSONAL_TOKEN)
        assert storage.require() == PERSONAL_TOKEN
