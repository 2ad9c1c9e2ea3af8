"""
Centralized Configuration Management for Alert Review

Uses Pydantic Settings for type-safe environment variable loading.
Secrets (VictorOps API id/key) and document identifiers must be provided via
environment variables or a .env file.

The Config object is built once by the entry point and passed to every
component that needs it.
"""

from typing import Annotated, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from alert_review.utils.error_handling import FetchFailurePolicy

VALID_SOURCES = ("email", "paging", "spreadsheet")
VALID_OUTPUTS = ("doc", "sheet")


class GoogleConfig(BaseSettings):
    """Google Workspace document identifiers."""

    document_id: str = Field(
        default="",
        description="Google Doc receiving the report (output=doc)"
    )
    spreadsheet_id: str = Field(
        default="",
        description="Spreadsheet holding the source tab and/or the report tab"
    )
    source_sheet: str = Field(
        default="Alerts",
        description="Tab with 'Service' / 'Number Of Alerts' columns"
    )
    report_sheet: str = Field(
        default="Report",
        description="Tab receiving the report (output=sheet)"
    )

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_",
        case_sensitive=False
    )


class GmailConfig(BaseSettings):
    """Gmail search configuration."""

    query: str = Field(
        default="(to:root OR from:root) AND newer_than:{period}",
        description="Gmail search query; {period} expands to '<lookback_days>d'"
    )
    user_id: str = Field(
        default="me",
        description="Gmail user id"
    )

    model_config = SettingsConfigDict(
        env_prefix="GMAIL_",
        case_sensitive=False
    )


class VictorOpsConfig(BaseSettings):
    """VictorOps / Splunk On-Call reporting API configuration."""

    api_id: str = Field(
        default="",
        description="X-VO-Api-Id header value"
    )
    api_key: str = Field(
        default="",
        description="X-VO-Api-Key header value"
    )
    base_url: str = Field(
        default="https://api.victorops.com",
        description="Reporting API base URL"
    )
    limit: int = Field(
        default=100,
        ge=1,
        description="Maximum incidents per request"
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="HTTP request timeout"
    )

    model_config = SettingsConfigDict(
        env_prefix="VICTOROPS_",
        case_sensitive=False
    )


class CacheConfig(BaseSettings):
    """Read-through cache configuration."""

    enabled: bool = Field(
        default=True,
        description="Disable to fetch every source on every run"
    )
    backend: str = Field(
        default="file",
        description="Cache backend: file or memory"
    )
    ttl_seconds: int = Field(
        default=21600,
        ge=1,
        description="Entry lifetime (6 hours)"
    )
    directory: str = Field(
        default=".cache/alert_review",
        description="Directory of the file backend"
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        valid_backends = ["file", "memory"]
        if v.lower() not in valid_backends:
            raise ValueError(f"backend must be one of {valid_backends}")
        return v.lower()

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False
    )


class ReportConfig(BaseSettings):
    """Report layout and behaviour."""

    title: str = Field(
        default="ALERT REVIEW",
        description="Report title"
    )
    subtitle: str = Field(
        default="",
        description="Report subtitle, e.g. the quarter under review"
    )
    lookback_days: int = Field(
        default=100,
        ge=1,
        description="Age limit of mails and incidents, in days"
    )
    top_count: int = Field(
        default=5,
        ge=1,
        description="Number of alerts listed per section"
    )
    failure_policy: FetchFailurePolicy = Field(
        default=FetchFailurePolicy.RAISE,
        description="raise: fail the pass when a source fails; degrade: render it empty"
    )
    output: str = Field(
        default="doc",
        description="Renderer: doc or sheet"
    )
    sources: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["email", "paging"],
        description="Sections to generate, in order"
    )

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: str) -> str:
        if v.lower() not in VALID_OUTPUTS:
            raise ValueError(f"output must be one of {list(VALID_OUTPUTS)}")
        return v.lower()

    @field_validator("sources", mode="before")
    @classmethod
    def validate_sources(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        sources = [str(item).strip().lower() for item in v if str(item).strip()]
        unknown = [s for s in sources if s not in VALID_SOURCES]
        if unknown:
            raise ValueError(f"unknown sources {unknown}; valid: {list(VALID_SOURCES)}")
        if not sources:
            raise ValueError("at least one source is required")
        return sources

    @property
    def period(self) -> str:
        return f"{self.lookback_days}d"

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        case_sensitive=False
    )


class Config(BaseSettings):
    """Main application configuration."""

    google: GoogleConfig = Field(default_factory=GoogleConfig)
    gmail: GmailConfig = Field(default_factory=GmailConfig)
    victorops: VictorOpsConfig = Field(default_factory=VictorOpsConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def gmail_query(self) -> str:
        return self.gmail.query.format(period=self.report.period)

    def validate_required(self) -> None:
        """Validate that the identifiers and secrets needed by the selected sources/output are set."""
        missing = []
        sources = self.report.sources

        if "paging" in sources:
            if not self.victorops.api_id:
                missing.append("VICTOROPS_API_ID")
            if not self.victorops.api_key:
                missing.append("VICTOROPS_API_KEY")
        if "spreadsheet" in sources and not self.google.spreadsheet_id:
            missing.append("GOOGLE_SPREADSHEET_ID")
        if self.report.output == "doc" and not self.google.document_id:
            missing.append("GOOGLE_DOCUMENT_ID")
        if self.report.output == "sheet" and not self.google.spreadsheet_id:
            missing.append("GOOGLE_SPREADSHEET_ID")

        if missing:
            names = ", ".join(dict.fromkeys(missing))
            raise ValueError(f"Missing required configuration: {names}")


def load_config(env_file: Optional[str] = ".env") -> Config:
    """
    Build the configuration from the environment.

    Args:
        env_file: Optional .env file merged into the environment first
            (existing variables win).

    Returns:
        A new Config instance. Not validated; call validate_required().
    """
    if env_file:
        load_dotenv(env_file, override=False)
    return Config()
