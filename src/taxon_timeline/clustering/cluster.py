"""Name clusters: groups of names connected by synonymy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Set
from uuid import UUID, uuid4

from ..entities import ChangeType, Dataset, Name
from .concepts import TaxonConcept, segment_cluster

if TYPE_CHECKING:
    from ..timeline.project import Project


class NameCluster:
    """A set of names considered to denote one underlying taxonomic entity.

    Besides its members the cluster remembers every dataset it was found in
    and, per dataset, the binomial that dataset used for it.
    """

    def __init__(self, dataset: Optional[Dataset] = None, names: Iterable[Name] = ()) -> None:
        self.id: UUID = uuid4()
        self._names: Set[Name] = set()
        self._found_in: Set[Dataset] = set()
        self._binomial_by_dataset: Dict[Dataset, Name] = {}
        self.has_superspecific_names = False
        for name in names:
            self.add_name(name, dataset)

    # -- membership ------------------------------------------------------
    def add_name(self, name: Name, dataset: Optional[Dataset] = None) -> None:
        """Record ``name`` (and its binomial) as seen in ``dataset``."""

        if not name.has_specific_epithet and not name.has_infraspecific_epithets:
            self.has_superspecific_names = True
        self._names.add(name)
        binomial = name.as_binomial()
        if binomial is not None:
            self._names.add(binomial)
        if dataset is not None:
            self._found_in.add(dataset)
            if binomial is not None:
                self._binomial_by_dataset[dataset] = binomial

    def add_names(self, names: Iterable[Name], dataset: Optional[Dataset] = None) -> None:
        for name in names:
            self.add_name(name, dataset)

    def add_all(self, other: "NameCluster") -> None:
        """Absorb another cluster's names, datasets and binomial map."""

        self._names.update(other._names)
        self._found_in.update(other._found_in)
        self._binomial_by_dataset.update(other._binomial_by_dataset)
        self.has_superspecific_names = self.has_superspecific_names or other.has_superspecific_names

    @property
    def names(self) -> Set[Name]:
        return set(self._names)

    @property
    def found_in(self) -> Set[Dataset]:
        return set(self._found_in)

    @property
    def binomial_by_dataset(self) -> Dict[Dataset, Name]:
        return dict(self._binomial_by_dataset)

    def contains(self, name: Name) -> bool:
        return name in self._names

    def contains_any(self, names: Iterable[Name]) -> bool:
        return any(name in self._names for name in names)

    def binomials(self) -> Set[Name]:
        return {name for name in self._names if name.has_specific_epithet and not name.has_infraspecific_epithets}

    # -- timeline --------------------------------------------------------
    def found_in_sorted(self) -> List[Dataset]:
        return sorted(self._found_in, key=lambda dataset: dataset.sort_key())

    @property
    def earliest_dataset(self) -> Optional[Dataset]:
        ordered = self.found_in_sorted()
        return ordered[0] if ordered else None

    @property
    def latest_dataset(self) -> Optional[Dataset]:
        ordered = self.found_in_sorted()
        return ordered[-1] if ordered else None

    @property
    def name(self) -> Name:
        """Binomial used by the most recent dataset, else the first member by sort order."""

        for dataset in reversed(self.found_in_sorted()):
            binomial = self._binomial_by_dataset.get(dataset)
            if binomial is not None:
                return binomial
        return min(self._names)

    @property
    def date_range(self) -> str:
        ordered = self.found_in_sorted()
        if not ordered:
            return "No timepoints"
        first, last = ordered[0].date, ordered[-1].date
        if first == last:
            return str(first)
        return f"{first} to {last}"

    def is_polytypic(self, project: "Project") -> bool:
        """True when a member is infraspecific or a member was ever part of a lump."""

        if any(name.has_infraspecific_epithets for name in self._names):
            return True
        for dataset in self._found_in:
            for change in dataset.changes(project, ChangeType.LUMP):
                if self.contains_any(change.all_names):
                    return True
        return False

    def taxon_concepts(self, project: "Project") -> List[TaxonConcept]:
        return segment_cluster(self, project)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[Name]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __str__(self) -> str:
        return f"{self.name} ({', '.join(str(name) for name in sorted(self._names))})"

    def __repr__(self) -> str:
        return f"NameCluster(id={self.id}, names={sorted(str(name) for name in self._names)})"


__all__ = ["NameCluster"]
