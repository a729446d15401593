import pytest
from pydantic import ValidationError

from quoteflow.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_delivery_mode(self) -> None:
        s = Settings()
        assert s.delivery_mode == "synchronous"

    def test_default_intake_limits(self) -> None:
        s = Settings()
        assert s.accepted_media_type == "application/pdf"
        assert s.max_file_size_bytes == 10 * 1024 * 1024
        assert s.max_files == 10

    def test_default_poll_interval(self) -> None:
        s = Settings()
        assert s.poll_interval_seconds == 10

    def test_default_ceilings(self) -> None:
        s = Settings()
        assert s.submit_timeout_seconds == 600
        assert s.poll_timeout_seconds == 600

    def test_default_report_store(self) -> None:
        s = Settings()
        assert s.report_store == "local"


class TestSettingsFromEnv:
    def test_loads_delivery_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DELIVERY_MODE", "callback")
        s = Settings()
        assert s.delivery_mode == "callback"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_upload_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("UPLOAD_URL", "https://relay.example.com/upload")
        s = Settings()
        assert s.upload_url == "https://relay.example.com/upload"

    def test_loads_poll_interval(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POLL_INTERVAL_SECONDS", "2.5")
        s = Settings()
        assert s.poll_interval_seconds == 2.5

    def test_loads_db_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "5433")
        s = Settings()
        assert s.db_port == 5433


class TestSettingsValidation:
    def test_unknown_delivery_mode_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DELIVERY_MODE", "websocket")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_max_files_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_FILES", "many")
        with pytest.raises(ValidationError):
            Settings()
