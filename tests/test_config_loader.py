"""Tests for the environment / .env configuration loader."""

from config import ConfigLoader, get_config_loader, reset_config_loader


class TestConfigLoader:
    def test_default_when_unset(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TD_TEST_VALUE", raising=False)
        loader = ConfigLoader(env_path=str(tmp_path / ".env"))
        assert loader.get("TD_TEST_VALUE", 180) == 180

    def test_type_coercion(self, tmp_path, monkeypatch):
        loader = ConfigLoader(env_path=str(tmp_path / ".env"))
        monkeypatch.setenv("TD_TEST_INT", "42")
        monkeypatch.setenv("TD_TEST_FLOAT", "2.5")
        monkeypatch.setenv("TD_TEST_BOOL", "yes")

        assert loader.get("TD_TEST_INT", 1) == 42
        assert loader.get("TD_TEST_FLOAT", 1.0) == 2.5
        assert loader.get("TD_TEST_BOOL", False) is True

    def test_bad_number_falls_back(self, tmp_path, monkeypatch):
        loader = ConfigLoader(env_path=str(tmp_path / ".env"))
        monkeypatch.setenv("TD_TEST_INT", "soon")
        assert loader.get("TD_TEST_INT", 180) == 180

    def test_home_expansion(self, tmp_path, monkeypatch):
        loader = ConfigLoader(env_path=str(tmp_path / ".env"))
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("TD_TEST_PATH", "~/td/config.json")
        assert loader.get("TD_TEST_PATH", "") == str(tmp_path / "td" / "config.json")

    def test_env_file_does_not_override_environment(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("TD_TEST_A=from-file\nTD_TEST_B=from-file\n")
        monkeypatch.setenv("TD_TEST_A", "from-shell")
        monkeypatch.delenv("TD_TEST_B", raising=False)

        loader = ConfigLoader(env_path=str(env_file))
        try:
            assert loader.get("TD_TEST_A", "") == "from-shell"
            assert loader.get("TD_TEST_B", "") == "from-file"
        finally:
            monkeypatch.delenv("TD_TEST_B", raising=False)

    def test_get_optional(self, tmp_path, monkeypatch):
        loader = ConfigLoader(env_path=str(tmp_path / ".env"))
        monkeypatch.setenv("TD_TEST_OPT", "  value  ")
        assert loader.get_optional("TD_TEST_OPT") == "value"
        monkeypatch.setenv("TD_TEST_OPT", "   ")
        assert loader.get_optional("TD_TEST_OPT") is None

    def test_process_instance(self):
        reset_config_loader()
        assert get_config_loader() is get_config_loader()
        first = get_config_loader()
        reset_config_loader()
        assert get_config_loader() is not first
