"""Pydantic configuration models for cmdgraph.

For loading logic, see loader.py.
"""

from pydantic import BaseModel, Field, field_validator


class RouterConfig(BaseModel):
    """Configuration for the command router."""

    prefix: str = Field(default="?", description="Marker every command message starts with")
    unauthorized_message: str = Field(
        default="You do not have permission to run this command",
        description="Reply sent when a guard rejects a matched command",
    )

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Ensure the prefix is non-empty and contains no whitespace."""
        if not v or any(ch.isspace() for ch in v):
            raise ValueError(f"prefix must be non-empty and contain no whitespace, got {v!r}")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging system."""

    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    directory: str = Field(default="logs", description="Directory for log files")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB before rotation")
    backup_count: int = Field(default=5, description="Number of backup log files to keep")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid logging level: {v!r}")
        return level


class Config(BaseModel):
    """Root configuration for cmdgraph."""

    router: RouterConfig = Field(default_factory=RouterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
