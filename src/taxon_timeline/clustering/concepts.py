"""Taxon concepts: time-bounded segments of a name cluster."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Optional, Set

from ..entities import Change, Dataset, Name
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..timeline.project import Project
    from .cluster import NameCluster

_LOGGER = get_logger(module=__name__)


@dataclass(eq=False)
class TaxonConcept:
    """The names of one cluster between two lump/split boundaries."""

    cluster: "NameCluster"
    names: Set[Name] = field(default_factory=set)
    found_in: Set[Dataset] = field(default_factory=set)
    starts_with: List[Change] = field(default_factory=list)
    ends_with: List[Change] = field(default_factory=list)

    def add_names(self, dataset: Dataset, names: Iterable[Name]) -> None:
        self.found_in.add(dataset)
        self.names.update(names)

    def found_in_sorted(self) -> List[Dataset]:
        return sorted(self.found_in, key=lambda dataset: dataset.sort_key())

    @property
    def first_dataset(self) -> Optional[Dataset]:
        ordered = self.found_in_sorted()
        return ordered[0] if ordered else None

    @property
    def last_dataset(self) -> Optional[Dataset]:
        ordered = self.found_in_sorted()
        return ordered[-1] if ordered else None

    @property
    def name(self) -> Name:
        binomials = sorted(name for name in self.names if name.has_specific_epithet)
        if self.cluster.name in self.names or not binomials:
            return self.cluster.name
        return binomials[0]

    @property
    def date_range(self) -> str:
        ordered = self.found_in_sorted()
        if not ordered:
            return "No timepoints"
        first, last = ordered[0].date, ordered[-1].date
        if first == last:
            return str(first)
        return f"{first} to {last}"

    def is_ongoing(self, project: "Project") -> bool:
        """Still open and holding a name the project's last dataset recognizes."""

        if self.ends_with:
            return False
        last = project.last_dataset
        if last is None:
            return False
        recognized = project.recognized_names(last)
        return any(name in recognized for name in self.names)

    def __str__(self) -> str:
        return f"{self.name} ({self.date_range})"


def segment_cluster(cluster: "NameCluster", project: "Project") -> List[TaxonConcept]:
    """Split a cluster's timeline into concepts at every lump or split.

    A concept opens on the first accepted change that brings a member name
    into a dataset; datasets before that point are not covered. Each lump or
    split touching the cluster closes the current concept and opens the next
    one, and both record the same boundary changes.
    """

    concepts: List[TaxonConcept] = []
    current: Optional[TaxonConcept] = None

    for dataset in cluster.found_in_sorted():
        changes = dataset.changes(project)
        if current is None:
            opening = [change for change in changes if cluster.contains_any(change.to_names)]
            if not opening:
                _LOGGER.debug(
                    "No opening change for cluster in dataset",
                    cluster=str(cluster.name),
                    dataset=dataset.name,
                )
                continue
            current = TaxonConcept(cluster=cluster, starts_with=opening)

        touching = [change for change in changes if cluster.contains_any(change.all_names)]
        referenced = {name for name in dataset.row_names if name in cluster}
        for change in touching:
            referenced.update(name for name in change.all_names if name in cluster)
        current.add_names(dataset, referenced)

        boundary = [change for change in touching if change.type.is_lump_or_split]
        if boundary:
            current.ends_with = list(boundary)
            concepts.append(current)
            current = TaxonConcept(cluster=cluster, starts_with=list(boundary))
            current.add_names(dataset, referenced)

    if current is not None:
        concepts.append(current)
    return concepts


__all__ = ["TaxonConcept", "segment_cluster"]
