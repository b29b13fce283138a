"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from retrier.domain.config.output import OutputConfig
from retrier.domain.config.spec import RetrySpec


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        retry: Retry sequence parameters
        output: Console output configuration
    """

    retry: RetrySpec = Field(default_factory=RetrySpec)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "retry": {
                    "attempts": 3,
                    "backoff": False,
                    "consecutive": 0,
                    "invert": False,
                    "jitter": "0s",
                    "sleep": "5s",
                    "task_time": "0s",
                    "total_time": "1m",
                },
                "output": {
                    "quiet": False,
                    "verbose": False,
                },
            }
        },
    )
