# =============================================================================
# tests/unit/test_settings.py
# Unit Tests for Settings Loading
# =============================================================================

import os
import pytest
from pathlib import Path


class TestLoadSettings:
    """Test defaults, TOML and environment overrides"""

    def test_defaults(self):
        from capture_core.config import load_settings

        settings = load_settings(environ={})

        assert settings.request_timeout == 10.0
        assert settings.sync_debounce_seconds == 0.5
        assert settings.db_path == Path("local_data") / "capture.db"

    def test_toml_section(self, tmp_path):
        from capture_core.config import load_settings

        secrets = tmp_path / "capture.toml"
        secrets.write_text(
            '[capture]\n'
            'api_base_url = "https://forms.example.org/api"\n'
            'request_timeout = 4\n'
            'db_path = "data/members.db"\n'
        )

        settings = load_settings(secrets_path=secrets, environ={})

        assert settings.api_base_url == "https://forms.example.org/api"
        assert settings.request_timeout == 4.0
        assert settings.db_path == Path("data/members.db")
        assert settings.api_host == "forms.example.org"
        assert settings.api_port == 443

    def test_environment_beats_toml(self, tmp_path):
        from capture_core.config import load_settings

        secrets = tmp_path / "capture.toml"
        secrets.write_text('[capture]\nlog_level = "WARNING"\n')

        settings = load_settings(secrets_path=secrets, environ={"CAPTURE_LOG_LEVEL": "DEBUG"})

        assert settings.log_level == "DEBUG"

    def test_missing_secrets_file_is_ignored(self, tmp_path):
        from capture_core.config import load_settings

        settings = load_settings(secrets_path=tmp_path / "absent.toml", environ={})
        assert settings.log_level == "INFO"

    def test_invalid_number_raises(self):
        from capture_core.config import load_settings
        from capture_core.errors import ConfigurationError

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(environ={"CAPTURE_REQUEST_TIMEOUT": "soon"})
        assert exc_info.value.details["config_key"] == "request_timeout"

    def test_negative_number_raises(self):
        from capture_core.config import load_settings
        from capture_core.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            load_settings(environ={"CAPTURE_SYNC_DEBOUNCE_SECONDS": "-1"})

    def test_broken_toml_raises(self, tmp_path):
        from capture_core.config import load_settings
        from capture_core.errors import ConfigurationError

        secrets = tmp_path / "capture.toml"
        secrets.write_text("[capture\nbroken")

        with pytest.raises(ConfigurationError):
            load_settings(secrets_path=secrets, environ={})

    def test_env_file_is_loaded(self, tmp_path):
        from capture_core.config import load_settings

        env_file = tmp_path / ".env"
        env_file.write_text("CAPTURE_API_BASE_URL=http://10.0.0.5:8080/api\n")
        os.environ.pop("CAPTURE_API_BASE_URL", None)

        try:
            settings = load_settings(env_file=env_file)
        finally:
            os.environ.pop("CAPTURE_API_BASE_URL", None)

        assert settings.api_host == "10.0.0.5"
        assert settings.api_port == 8080

    def test_api_config(self):
        from capture_core.config import Settings

        config = Settings(api_base_url="http://svc.test/api/", request_timeout=3.0).api_config()

        assert config.base_url == "http://svc.test/api"
        assert config.timeout == 3.0
