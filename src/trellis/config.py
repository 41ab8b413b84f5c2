"""Engine configuration."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrellisSettings(BaseSettings):
    """Settings for running test plans.

    Loads from environment variables automatically:
        TRELLIS_TRACING_ENABLED, TRELLIS_TRACE_OUTPUT, TRELLIS_SERVICE_NAME,
        TRELLIS_VERBOSITY
    """

    tracing_enabled: bool = Field(default=False, description="Wrap every test in an OpenTelemetry span")
    trace_output: Path = Field(default=Path("traces.jsonl"), description="JSONL file receiving finished spans")
    service_name: str = Field(default="trellis", description="OpenTelemetry service.name resource attribute")
    verbosity: int = Field(default=0, description="Console reporter verbosity: -1 quiet, 0 compact, 1+ verbose")

    model_config = SettingsConfigDict(
        env_prefix="TRELLIS_",
        extra="ignore",
    )

    @field_validator("verbosity")
    @classmethod
    def validate_verbosity(cls, v: int) -> int:
        if v < -1:
            raise ValueError("Verbosity must be -1 or greater")
        return v


def load_settings(**overrides: object) -> TrellisSettings:
    """Build settings from the environment, with explicit overrides on top."""
    return TrellisSettings(**overrides)
