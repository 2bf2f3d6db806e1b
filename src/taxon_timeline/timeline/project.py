"""Projects: ordered dataset chains with clustering and reversion queries."""

from __future__ import annotations

from collections import Counter
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..clustering import NameCluster, NameClusterManager, Synonymy, TaxonConcept
from ..config.settings import Settings, get_settings
from ..entities import (
    Change,
    ChangeType,
    Dataset,
    DatasetKind,
    DatasetRow,
    ModificationMarker,
    Name,
    NameRegistry,
    SimplifiedDate,
)
from ..utils.logging import get_logger, log_timing, logging_context
from .filters import ChangeFilterChain, build_change_filter
from .reversions import ReversionDetector


class DatasetChainError(ValueError):
    """Raised when a dataset cannot join (or is missing from) a project's chain."""


class Project:
    """A chronologically ordered chain of datasets and everything derived from it.

    Appending a dataset links it to its predecessor, registers every name it
    references with the cluster manager and threads its renames in as
    synonymies. Any later edit to a dataset or one of its changes invalidates
    recognized names, implicit changes and clusters wholesale; they are
    rebuilt on the next query.
    """

    def __init__(
        self,
        name: str = "Untitled project",
        *,
        settings: Optional[Settings] = None,
        registry: Optional[NameRegistry] = None,
        change_filter: Optional[ChangeFilterChain] = None,
    ) -> None:
        self.name = name
        self.settings = settings or get_settings()
        self.policies = self.settings.policies
        self.registry = registry or NameRegistry()
        self.last_modified = ModificationMarker()
        self._logger = get_logger(module=__name__, project=name)

        self._datasets: List[Dataset] = []
        self._synonymies: List[Synonymy] = []
        self._manager = NameClusterManager()
        self._manager_stale = False
        self._recognized: Dict[Dataset, FrozenSet[Name]] = {}

        self.change_filter = change_filter or build_change_filter(self.policies.change_filters, self)
        self.reversions = ReversionDetector(self, self.policies.reversions)

    # -- names and datasets ---------------------------------------------
    def get_name(self, text: str) -> Name:
        """Interned name for whitespace-separated ``text``."""

        name = self.registry.from_full_name(text)
        if name is None:
            raise ValueError("Cannot build a name from empty text")
        return name

    def get_names(self, texts: Iterable[str]) -> List[Name]:
        return [self.get_name(text) for text in texts]

    def new_dataset(
        self,
        name: str,
        date: SimplifiedDate | str,
        kind: DatasetKind = DatasetKind.REVISION,
        rows: Optional[Iterable[DatasetRow]] = None,
    ) -> Dataset:
        """Create a dataset sharing this project's name registry; it is not appended."""

        return Dataset(
            name,
            date,
            kind,
            registry=self.registry,
            recognition=self.policies.recognition,
            rows=rows,
        )

    def add_dataset(self, dataset: Dataset) -> Dataset:
        """Append ``dataset`` to the end of the chain."""

        if dataset in self._datasets:
            raise DatasetChainError(f"{dataset} is already part of project '{self.name}'")
        if dataset.registry is not self.registry:
            raise DatasetChainError(f"{dataset} was built against a different name registry")
        if dataset.project is not None and dataset.project is not self:
            raise DatasetChainError(f"{dataset} already belongs to another project")

        previous = self.last_dataset
        dataset.index = len(self._datasets)
        dataset.set_previous_dataset(self, previous)
        self._datasets.append(dataset)

        with logging_context(project=self.name, dataset=dataset.name):
            if self._manager_stale:
                self._rebuild_clusters()
            else:
                self._register_dataset(self._manager, dataset)
            # New synonymies can move a cluster's earliest dataset and change earlier filter decisions.
            self._invalidate_derived()
            recognized = self.recognized_names(dataset)

        dataset.last_modified.subscribe(self._on_dataset_modified)
        self.last_modified.mark()
        self._logger.info(
            "Added dataset",
            dataset=dataset.name,
            kind=dataset.kind.value,
            recognized=len(recognized),
            referenced=len(dataset.referenced_names),
            clusters=len(self._manager),
        )
        return dataset

    @property
    def datasets(self) -> Tuple[Dataset, ...]:
        return tuple(self._datasets)

    @property
    def first_dataset(self) -> Optional[Dataset]:
        return self._datasets[0] if self._datasets else None

    @property
    def last_dataset(self) -> Optional[Dataset]:
        return self._datasets[-1] if self._datasets else None

    def checklists(self) -> List[Dataset]:
        return [dataset for dataset in self._datasets if dataset.is_checklist]

    @property
    def datasets_by_name(self) -> Dict[str, Dataset]:
        return {dataset.name: dataset for dataset in self._datasets}

    def get_dataset(self, name: str) -> Dataset:
        for dataset in self._datasets:
            if dataset.name == name:
                return dataset
        raise DatasetChainError(f"No dataset named '{name}' in project '{self.name}'")

    @property
    def names(self) -> Set[Name]:
        """Every name referenced by any dataset."""

        collected: Set[Name] = set()
        for dataset in self._datasets:
            collected.update(dataset.referenced_names)
        return collected

    @property
    def binomial_names(self) -> Set[Name]:
        binomials = (name.as_binomial() for name in self.names)
        return {binomial for binomial in binomials if binomial is not None}

    @property
    def change_types(self) -> Dict[ChangeType, int]:
        return dict(Counter(change.type for change in self.changes()))

    # -- changes ---------------------------------------------------------
    def changes(self, change_type: Optional[ChangeType] = None) -> List[Change]:
        """Accepted changes of every dataset, in chain order."""

        collected: List[Change] = []
        for dataset in self._datasets:
            collected.extend(dataset.changes(self, change_type))
        return collected

    def lumps_and_splits(self) -> List[Change]:
        return [change for change in self.changes() if change.type.is_lump_or_split]

    # -- recognized names ----------------------------------------------
    def recognized_names(self, dataset: Dataset) -> FrozenSet[Name]:
        """Names current as of ``dataset``, computed forward from the chain start."""

        cached = self._recognized.get(dataset)
        if cached is not None:
            return cached
        if dataset.project is not self or dataset.index is None:
            raise DatasetChainError(f"{dataset} is not part of project '{self.name}'")
        for earlier in self._datasets[: dataset.index + 1]:
            if earlier not in self._recognized:
                self._recognized[earlier] = earlier.compute_recognized_names(self)
        return self._recognized[dataset]

    # -- clusters --------------------------------------------------------
    @property
    def name_cluster_manager(self) -> NameClusterManager:
        if self._manager_stale:
            self._rebuild_clusters()
        return self._manager

    def add_synonymy(self, synonymy: Synonymy) -> NameCluster:
        """Assert that two names denote the same entity, outside of any change."""

        self._synonymies.append(synonymy)
        return self.name_cluster_manager.add_cluster(synonymy.as_cluster())

    def species_clusters(self) -> List[NameCluster]:
        return self.name_cluster_manager.species_clusters()

    def cluster_for(self, name: Name) -> NameCluster:
        return self.name_cluster_manager.require_cluster(name)

    def clusters_for(self, names: Iterable[Name]) -> List[NameCluster]:
        return self.name_cluster_manager.require_clusters(names)

    def taxon_concepts(self, cluster: NameCluster) -> List[TaxonConcept]:
        return cluster.taxon_concepts(self)

    def _register_dataset(self, manager: NameClusterManager, dataset: Dataset) -> None:
        for name in sorted(dataset.referenced_names):
            manager.add_cluster(NameCluster(dataset, [name]))
        for change in dataset.changes(self, ChangeType.RENAME):
            for from_name in sorted(change.from_names):
                for to_name in sorted(change.to_names):
                    synonymy = Synonymy(from_name, to_name, dataset, note=change.note)
                    manager.add_cluster(synonymy.as_cluster())

    def _rebuild_clusters(self) -> None:
        with log_timing("rebuild_clusters", logger_=self._logger):
            self._manager = NameClusterManager()
            self._manager_stale = False
            for dataset in self._datasets:
                self._register_dataset(self._manager, dataset)
            for synonymy in self._synonymies:
                self._manager.add_cluster(synonymy.as_cluster())

    def _invalidate_derived(self) -> None:
        self._recognized.clear()
        for dataset in self._datasets:
            dataset.invalidate_implicit_changes()
        self.change_filter.reset()

    def _on_dataset_modified(self) -> None:
        self._invalidate_derived()
        self._manager_stale = True
        self.last_modified.mark()

    # -- reversions ------------------------------------------------------
    def changes_reversing(self, change: Change) -> List[Change]:
        return self.reversions.changes_reversing(change)

    def changes_perfectly_reversing(self, change: Change) -> List[Change]:
        return self.reversions.changes_perfectly_reversing(change)

    def perfectly_reversing_summary(self, change: Change) -> str:
        return self.reversions.perfectly_reversing_summary(change)

    def __str__(self) -> str:
        return f"Project {self.name} ({len(self._datasets)} datasets)"


__all__ = ["DatasetChainError", "Project"]
