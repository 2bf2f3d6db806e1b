"""Detection of lumps and splits that undo or repeat one another."""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, List, Tuple

from ..clustering import NameCluster
from ..config.policies import ReversionPolicy
from ..entities import Change
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .project import Project

_LOGGER = get_logger(module=__name__)

ClusterSides = Tuple[FrozenSet[NameCluster], FrozenSet[NameCluster]]


class ReversionDetector:
    """Compares changes at the level of name clusters rather than names.

    Two changes interact when they share at least ``min_shared_clusters``
    clusters on the relevant sides: an inverse change (a lump against a
    split) whose ``from`` overlaps our ``to`` or whose ``to`` overlaps our
    ``from``, or, when repeats are included, a change of the same type whose
    ``from`` or ``to`` overlaps ours.
    """

    def __init__(self, project: "Project", policy: ReversionPolicy) -> None:
        self._project = project
        self.policy = policy

    def cluster_sides(self, change: Change) -> ClusterSides:
        """Clusters of ``change``'s from and to names; unregistered names raise."""

        manager = self._project.name_cluster_manager
        return (
            frozenset(manager.require_clusters(change.from_names)),
            frozenset(manager.require_clusters(change.to_names)),
        )

    def changes_reversing(self, change: Change) -> List[Change]:
        """Lumps and splits that partially reverse or repeat ``change``, in chain order."""

        threshold = self.policy.min_shared_clusters
        source_from, source_to = self.cluster_sides(change)
        inverse = change.type.invert()

        matches: List[Change] = []
        for candidate in self._project.lumps_and_splits():
            if candidate is change:
                continue
            candidate_from, candidate_to = self.cluster_sides(candidate)
            if candidate.type is inverse and candidate.type is not change.type:
                if (
                    len(candidate_from & source_to) >= threshold
                    or len(candidate_to & source_from) >= threshold
                ):
                    matches.append(candidate)
            elif self.policy.include_repeats and candidate.type is change.type:
                if (
                    len(candidate_from & source_from) >= threshold
                    or len(candidate_to & source_to) >= threshold
                ):
                    matches.append(candidate)
        _LOGGER.debug("Reversion search", change=str(change), matches=len(matches))
        return matches

    def changes_perfectly_reversing(self, change: Change) -> List[Change]:
        """Exact undoes of ``change`` plus, when enabled, exact repeats."""

        source_from, source_to = self.cluster_sides(change)
        perfect: List[Change] = []
        for candidate in self.changes_reversing(change):
            candidate_from, candidate_to = self.cluster_sides(candidate)
            if candidate.type is change.type.invert() and candidate.type is not change.type:
                if candidate_from == source_to and candidate_to == source_from:
                    perfect.append(candidate)
            elif candidate_from == source_from and candidate_to == source_to:
                perfect.append(candidate)
        return perfect

    def perfectly_reversing_summary(self, change: Change) -> str:
        """Trajectory such as ``split (1935) -> lump (1960) [starting with change id ...]``.

        Empty when nothing perfectly reverses ``change``.
        """

        matched = self.changes_perfectly_reversing(change)
        if not matched:
            return ""
        sequence = sorted([*matched, change], key=lambda item: item.dataset.sort_key())
        trajectory = " -> ".join(
            f"{item.type} ({item.dataset.date.year_as_string})" for item in sequence
        )
        return f"{trajectory} [starting with change id {sequence[0].id}]"


__all__ = ["ReversionDetector"]
