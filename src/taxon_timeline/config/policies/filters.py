"""Change filter policy models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ChangeFilterPolicy(BaseModel):
    """Which changes a project excludes from recognized-name arithmetic."""

    ignore_error_changes: bool = Field(
        default=True,
        description="Drop changes typed as errors",
    )
    ignore_ignored_changes: bool = Field(
        default=True,
        description="Drop changes whose 'ignored' property is set to 'yes'",
    )
    skip_changes_unless_added_before: Optional[int] = Field(
        default=None,
        description="Keep only changes touching a cluster first seen before this year",
    )

    @field_validator("skip_changes_unless_added_before")
    @classmethod
    def _positive_year(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("skip_changes_unless_added_before must be a positive year")
        return value
