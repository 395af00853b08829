"""Logging configuration of a mine-outlook run."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Where run and sweep messages go.

    Generation and replay log per-variable detail at ``DEBUG`` and run or
    sweep boundaries (seed, trial counts, timings) at ``INFO``. Setting
    ``capture_warnings`` also routes data-quality and configuration
    warnings into the same handlers.
    """

    enabled: bool = Field(default=True, description="Configure the package logger")
    logger_name: str = Field(default="mining_outlook", description="Logger to configure")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    console_output: bool = Field(default=True, description="Write to stdout")
    log_file: Optional[str] = Field(default=None, description="Also write to this file")
    file_mode: Literal["a", "w"] = Field(default="a", description="Append to or replace log_file")
    capture_warnings: bool = Field(default=False, description="Log warnings instead of printing")
    format: str = Field(default="%(asctime)s %(levelname)-8s %(name)s: %(message)s")
