"""Configuration models with Pydantic validation."""

from retrier.domain.config.app import AppConfig
from retrier.domain.config.output import OutputConfig
from retrier.domain.config.spec import RetrySpec

__all__ = [
    "AppConfig",
    "OutputConfig",
    "RetrySpec",
]
