"""
Security Metrics Insights Engine - Configuration

Thresholds and collaborator settings using Pydantic Settings.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InsightsSettings(BaseSettings):
    """Insights engine thresholds."""

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_")

    # Metric catalog used when a request does not name metrics
    default_metric_numbers: list[int] = Field(
        default_factory=lambda: list(range(1, 12)),
        description="Metric numbers analysed by default"
    )

    # Trends
    mom_change_threshold: float = Field(default=5.0, description="Min |MoM %| to report")
    mom_warning_threshold: float = Field(default=20.0, description="|MoM %| that escalates to warning")
    rolling_3_threshold: float = Field(default=10.0, description="Min |deviation %| from 3-month average")
    rolling_3_warning_threshold: float = Field(default=20.0, description="3-month deviation warning level")
    rolling_6_threshold: float = Field(default=15.0, description="Min |deviation %| from 6-month average")
    leaderboard_size: int = Field(default=3, description="Metrics listed per leaderboard insight")
    leaderboard_warning_threshold: float = Field(
        default=10.0,
        description="Worst decline % that escalates the attention list"
    )

    # Anomalies
    zscore_threshold: float = Field(default=2.0, description="Z-score significance threshold")
    zscore_critical_threshold: float = Field(default=3.0, description="Z-score critical threshold")
    zscore_min_points: int = Field(default=6, description="Min points for z-score detection")
    iqr_multiplier: float = Field(default=1.5, description="IQR multiplier for outlier bounds")
    iqr_min_points: int = Field(default=4, description="Min points for IQR detection")

    # Milestones
    milestone_window: int = Field(default=12, description="Months considered for highs/lows")
    streak_min_length: int = Field(default=4, description="Min consecutive months for a streak")

    # Comparisons
    comparison_mom_threshold: float = Field(default=5.0, description="Min |MoM %| between periods")
    comparison_mom_warning_threshold: float = Field(default=20.0, description="MoM warning level")
    comparison_yoy_threshold: float = Field(default=10.0, description="Min |YoY %|")
    comparison_yoy_warning_threshold: float = Field(default=25.0, description="YoY warning level")

    # Forecasts
    forecast_window: int = Field(default=3, description="Moving average window")
    linear_forecast_min_points: int = Field(default=6, description="Min points for linear projection")
    linear_forecast_divergence: float = Field(
        default=5.0,
        description="Min absolute gap between linear and moving-average forecasts"
    )

    # Correlation
    correlation_threshold: float = Field(default=0.7, description="Min |r| to report")
    correlation_min_points: int = Field(default=12, description="Min aligned months")
    correlation_evidence_points: int = Field(default=6, description="Months shown as evidence")


class OllamaSettings(BaseSettings):
    """Ollama LLM configuration."""

    model_config = SettingsConfigDict(env_prefix="OLLAMA_")

    base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama API base URL"
    )
    model: str = Field(
        default="llama3.2:latest",
        description="Model used for insight enrichment"
    )
    timeout: float = Field(
        default=30.0,
        description="Request timeout in seconds"
    )
    max_retries: int = Field(
        default=2,
        description="Maximum retry attempts"
    )


class EnhancementSettings(BaseSettings):
    """AI enrichment configuration."""

    model_config = SettingsConfigDict(env_prefix="ENHANCEMENT_")

    enabled: bool = Field(default=False, description="Enable AI enrichment")
    max_priority: int = Field(default=3, description="Critical/warning insights to enrich")
    max_other: int = Field(default=2, description="Other insights to enrich")
    max_insights: int = Field(default=5, description="Hard cap on enriched insights")
    delay_seconds: float = Field(default=0.2, description="Pause between model calls")
    narrative_enabled: bool = Field(default=True, description="Append narrative insights")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Minimum log level")
    file_path: str = Field(
        default="logs/insights_{time:YYYY-MM-DD}.log",
        description="Rotating log file (empty disables file logging)"
    )
    rotation: str = Field(default="10 MB", description="Log file rotation")
    retention: str = Field(default="7 days", description="Log file retention")
    buffer_size: int = Field(default=1000, description="Entries kept in the in-memory log buffer")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Security Metrics Insights Engine"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Debug mode")

    # Nested settings
    insights: InsightsSettings = Field(default_factory=InsightsSettings)
    ollama: OllamaSettings = Field(default_factory=OllamaSettings)
    enhancement: EnhancementSettings = Field(default_factory=EnhancementSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
