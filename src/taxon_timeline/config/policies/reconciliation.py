"""Policies governing recognized-name propagation and reversion detection."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


class RecognitionPolicy(BaseModel):
    """Where dataset rows keep their names and how checklist drift is reported."""

    name_columns: List[str] = Field(default_factory=lambda: ["scientificName"])
    genus_column: str = Field(default="genus")
    specific_epithet_column: str = Field(default="specificEpithet")
    log_checklist_mismatches: bool = Field(default=True)

    @field_validator("name_columns")
    @classmethod
    def _strip_columns(cls, value: List[str]) -> List[str]:
        cleaned = [column.strip() for column in value if column and column.strip()]
        return cleaned


class ReversionPolicy(BaseModel):
    """Thresholds for matching a lump or split against later changes."""

    min_shared_clusters: int = Field(default=2, ge=1)
    include_repeats: bool = Field(
        default=True,
        description="Also report changes of the same type repeating the transformation",
    )
