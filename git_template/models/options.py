"""Options accepted by the iteration commands."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OutputFormat(str, Enum):
    """Presentation formats; never affect what gets computed."""
    DETAILED = "detailed"
    SUMMARY = "summary"
    JSON = "json"


class IterationOptions(BaseModel):
    """Options bag supplied by the CLI layer."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    force: bool = Field(False, description="Bypass the can_proceed gate before dispatch")
    detailed_comparison: bool = Field(True, description="Attach the full comparison to iteration results")
    format: OutputFormat = Field(OutputFormat.DETAILED, description="Output format: detailed, summary, json")
