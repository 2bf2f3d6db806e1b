"""Registry partitioning every known name into exactly one cluster."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional
from uuid import UUID

from ..entities import Name
from ..utils.logging import get_logger
from .cluster import NameCluster

_LOGGER = get_logger(module=__name__)


class UnregisteredNameError(LookupError):
    """Raised when a name that should have a cluster was never registered."""

    def __init__(self, name: Name) -> None:
        super().__init__(f"Name '{name}' is not registered with any name cluster")
        self.name = name


class NameClusterManager:
    """Maps every registered name to the single cluster that holds it."""

    def __init__(self) -> None:
        self._by_name: Dict[Name, NameCluster] = {}
        self._clusters: Dict[UUID, NameCluster] = {}

    def add_cluster(self, candidate: NameCluster) -> NameCluster:
        """Register ``candidate``, merging it with every cluster it overlaps.

        The merged cluster is assembled completely before the registry is
        touched, so a failure part-way leaves the manager unchanged.
        """

        overlapping: List[NameCluster] = []
        for name in sorted(candidate.names):
            existing = self._by_name.get(name)
            if existing is not None and existing not in overlapping:
                overlapping.append(existing)

        if not overlapping:
            self._commit(candidate, absorbed=())
            return candidate

        merged = NameCluster()
        for cluster in overlapping:
            merged.add_all(cluster)
        merged.add_all(candidate)

        self._commit(merged, absorbed=overlapping)
        if len(overlapping) > 1:
            _LOGGER.debug(
                "Merged name clusters",
                winner=str(merged.name),
                absorbed=[str(cluster.name) for cluster in overlapping],
                size=len(merged),
            )
        return merged

    def _commit(self, cluster: NameCluster, absorbed: Iterable[NameCluster]) -> None:
        for old in absorbed:
            self._clusters.pop(old.id, None)
        self._clusters[cluster.id] = cluster
        for name in cluster.names:
            self._by_name[name] = cluster

    def get_cluster(self, name: Name) -> Optional[NameCluster]:
        return self._by_name.get(name)

    def get_clusters(self, names: Iterable[Name]) -> List[Optional[NameCluster]]:
        """Clusters for ``names`` in sorted name order; ``None`` marks an unregistered name."""

        return [self._by_name.get(name) for name in sorted(names)]

    def require_cluster(self, name: Name) -> NameCluster:
        cluster = self._by_name.get(name)
        if cluster is None:
            raise UnregisteredNameError(name)
        return cluster

    def require_clusters(self, names: Iterable[Name]) -> List[NameCluster]:
        return [self.require_cluster(name) for name in sorted(names)]

    @property
    def clusters(self) -> List[NameCluster]:
        return list(self._clusters.values())

    def species_clusters(self) -> List[NameCluster]:
        """Clusters made up only of binomial or lower-rank names."""

        return [cluster for cluster in self._clusters.values() if not cluster.has_superspecific_names]

    def partition(self) -> List[frozenset]:
        """Member sets of every cluster, independent of cluster identity."""

        return sorted(
            (frozenset(cluster.names) for cluster in self._clusters.values()),
            key=lambda members: sorted(members),
        )

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[NameCluster]:
        return iter(list(self._clusters.values()))

    def __len__(self) -> int:
        return len(self._clusters)


__all__ = ["NameClusterManager", "UnregisteredNameError"]
