"""
Test suite for configuration management.

Verifies that config loading, validation, and environment-based settings work correctly.
"""

import pytest
from pydantic import ValidationError

from alert_review.config.settings import Config, load_config
from alert_review.utils.error_handling import FetchFailurePolicy


class TestConfiguration:
    """Test the configuration system."""

    def test_config_loads_defaults(self, clean_env):
        """Test that config loads with default values when no env vars are set."""
        config = Config()

        assert config.log_level == "INFO"
        assert config.report.title == "ALERT REVIEW"
        assert config.report.lookback_days == 100
        assert config.report.top_count == 5
        assert config.report.sources == ["email", "paging"]
        assert config.report.output == "doc"
        assert config.report.failure_policy is FetchFailurePolicy.RAISE
        assert config.cache.enabled is True
        assert config.cache.ttl_seconds == 21600
        assert config.victorops.base_url == "https://api.victorops.com"
        assert config.victorops.limit == 100
        assert config.google.source_sheet == "Alerts"

    def test_config_loads_from_env_vars(self, clean_env):
        """Test that config loads from environment variables."""
        clean_env.setenv("VICTOROPS_API_ID", "vo-id")
        clean_env.setenv("VICTOROPS_API_KEY", "vo-key")
        clean_env.setenv("GOOGLE_DOCUMENT_ID", "doc-123")
        clean_env.setenv("REPORT_TOP_COUNT", "10")
        clean_env.setenv("REPORT_FAILURE_POLICY", "degrade")
        clean_env.setenv("CACHE_BACKEND", "MEMORY")
        clean_env.setenv("CACHE_ENABLED", "false")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = Config()

        assert config.victorops.api_id == "vo-id"
        assert config.victorops.api_key == "vo-key"
        assert config.google.document_id == "doc-123"
        assert config.report.top_count == 10
        assert config.report.failure_policy is FetchFailurePolicy.DEGRADE
        assert config.cache.backend == "memory"
        assert config.cache.enabled is False
        assert config.log_level == "DEBUG"

    def test_sources_from_comma_separated_env(self, clean_env):
        clean_env.setenv("REPORT_SOURCES", "Paging, spreadsheet")

        assert Config().report.sources == ["paging", "spreadsheet"]

    def test_unknown_source_rejected(self, clean_env):
        clean_env.setenv("REPORT_SOURCES", "email,pager")

        with pytest.raises(ValidationError) as exc_info:
            Config()

        assert "pager" in str(exc_info.value)

    def test_empty_sources_rejected(self, clean_env):
        clean_env.setenv("REPORT_SOURCES", " , ")

        with pytest.raises(ValidationError):
            Config()

    def test_config_validates_log_level(self, clean_env):
        """Test that invalid log levels are rejected."""
        clean_env.setenv("LOG_LEVEL", "INVALID_LEVEL")

        with pytest.raises(ValidationError) as exc_info:
            Config()

        assert "log_level" in str(exc_info.value).lower()

    def test_config_validates_cache_backend(self, clean_env):
        clean_env.setenv("CACHE_BACKEND", "redis")

        with pytest.raises(ValidationError):
            Config()

    def test_config_validates_output(self, clean_env):
        clean_env.setenv("REPORT_OUTPUT", "pdf")

        with pytest.raises(ValidationError):
            Config()

    def test_config_validates_top_count(self, clean_env):
        clean_env.setenv("REPORT_TOP_COUNT", "0")

        with pytest.raises(ValidationError):
            Config()

    def test_gmail_query_uses_lookback(self, clean_env):
        clean_env.setenv("REPORT_LOOKBACK_DAYS", "30")

        assert Config().gmail_query == "(to:root OR from:root) AND newer_than:30d"

    def test_default_gmail_query(self, clean_env):
        assert Config().gmail_query == "(to:root OR from:root) AND newer_than:100d"


class TestRequiredSettings:
    """validate_required() checks what the selected sources and output need."""

    def test_paging_requires_victorops_credentials(self, clean_env):
        clean_env.setenv("GOOGLE_DOCUMENT_ID", "doc-123")

        with pytest.raises(ValueError) as exc_info:
            Config().validate_required()

        assert "VICTOROPS_API_ID" in str(exc_info.value)
        assert "VICTOROPS_API_KEY" in str(exc_info.value)

    def test_doc_output_requires_document_id(self, clean_env):
        clean_env.setenv("REPORT_SOURCES", "email")

        with pytest.raises(ValueError, match="GOOGLE_DOCUMENT_ID"):
            Config().validate_required()

    def test_spreadsheet_id_reported_once(self, clean_env):
        clean_env.setenv("REPORT_SOURCES", "spreadsheet")
        clean_env.setenv("REPORT_OUTPUT", "sheet")

        with pytest.raises(ValueError) as exc_info:
            Config().validate_required()

        assert str(exc_info.value).count("GOOGLE_SPREADSHEET_ID") == 1

    def test_complete_configuration_passes(self, clean_env):
        clean_env.setenv("VICTOROPS_API_ID", "vo-id")
        clean_env.setenv("VICTOROPS_API_KEY", "vo-key")
        clean_env.setenv("GOOGLE_DOCUMENT_ID", "doc-123")

        Config().validate_required()

    def test_email_only_needs_no_victorops(self, clean_env):
        clean_env.setenv("REPORT_SOURCES", "email")
        clean_env.setenv("GOOGLE_DOCUMENT_ID", "doc-123")

        Config().validate_required()


def forget_at_teardown(monkeypatch, *keys):
    # load_dotenv writes os.environ directly; registering the keys makes monkeypatch drop them afterwards
    for key in keys:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


class TestLoadConfig:

    def test_load_from_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("REPORT_TOP_COUNT=3\nGOOGLE_DOCUMENT_ID=from-file\n")
        forget_at_teardown(clean_env, "REPORT_TOP_COUNT", "GOOGLE_DOCUMENT_ID")

        config = load_config(str(env_file))

        assert config.report.top_count == 3
        assert config.google.document_id == "from-file"

    def test_environment_wins_over_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("REPORT_TOP_COUNT=3\n")
        clean_env.setenv("REPORT_TOP_COUNT", "8")

        assert load_config(str(env_file)).report.top_count == 8

    def test_missing_env_file_is_ignored(self, clean_env, tmp_path):
        assert load_config(str(tmp_path / "absent.env")).report.top_count == 5
