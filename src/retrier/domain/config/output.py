"""Output configuration model."""

from pydantic import BaseModel


class OutputConfig(BaseModel):
    """Configuration for console output.

    Attributes:
        quiet: Silence the wrapped command and all retrier messages
        verbose: Enable DEBUG logging
    """

    quiet: bool = False
    verbose: bool = False
