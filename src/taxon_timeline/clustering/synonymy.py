"""Direct synonymy assertions between two names."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..entities import Dataset, Name
from .cluster import NameCluster


@dataclass(frozen=True)
class Synonymy:
    """States that ``from_name`` and ``to_name`` denote the same entity in ``dataset``."""

    from_name: Name
    to_name: Name
    dataset: Dataset
    note: Optional[str] = field(default=None, compare=False)

    def as_cluster(self) -> NameCluster:
        return NameCluster(self.dataset, [self.from_name, self.to_name])

    def __str__(self) -> str:
        return f"{self.from_name} = {self.to_name} ({self.dataset.citation})"


__all__ = ["Synonymy"]
