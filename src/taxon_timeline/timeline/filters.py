"""Change filters deciding which changes a project analyses."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Set
from uuid import UUID

from ..config.policies import ChangeFilterPolicy
from ..entities import IGNORED_PROPERTY, Change, ChangeType
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .project import Project

_LOGGER = get_logger(module=__name__)


class ChangeFilter:
    """Base predicate; subclasses implement :meth:`accepts`."""

    short_name = "filter"
    description = "Accept every change"

    def __init__(self, active: bool = True) -> None:
        self.active = active
        self._filtered: Set[UUID] = set()
        self._filtered_counts: Counter[ChangeType] = Counter()

    def test(self, change: Change) -> bool:
        if not self.active:
            return True
        if self.accepts(change):
            return True
        if change.id not in self._filtered:
            self._filtered.add(change.id)
            self._filtered_counts[change.type] += 1
        return False

    def accepts(self, change: Change) -> bool:
        raise NotImplementedError

    @property
    def filtered_counts(self) -> Dict[ChangeType, int]:
        return dict(self._filtered_counts)

    def summary(self) -> str:
        total = sum(self._filtered_counts.values())
        if not total:
            return f"{self.short_name}: nothing filtered"
        by_type = ", ".join(
            f"{count} {change_type}" for change_type, count in self._filtered_counts.most_common()
        )
        return f"{self.short_name}: {total} filtered ({by_type})"

    def reset(self) -> None:
        self._filtered.clear()
        self._filtered_counts.clear()


class IgnoreErrorChangeType(ChangeFilter):
    short_name = "ignore_errors"
    description = "Ignore changes typed as errors"

    def accepts(self, change: Change) -> bool:
        return change.type is not ChangeType.ERROR


class IgnoreIgnoredChanges(ChangeFilter):
    short_name = "ignore_ignored"
    description = "Ignore changes marked ignored"

    def accepts(self, change: Change) -> bool:
        return not change.is_property_set(IGNORED_PROPERTY)


class SkipChangesUnlessAddedBefore(ChangeFilter):
    """Keep a change only if one of its clusters was first seen before ``year``."""

    short_name = "skip_unless_added_before"

    def __init__(self, project: "Project", year: int, active: bool = True) -> None:
        super().__init__(active=active)
        self._project = project
        self.year = year
        self.description = f"Skip changes unless their names were added before {year}"

    def accepts(self, change: Change) -> bool:
        manager = self._project.name_cluster_manager
        for cluster in manager.require_clusters(change.all_names):
            earliest = cluster.earliest_dataset
            if earliest is not None and 0 < earliest.date.year < self.year:
                return True
        return False


class ChangeFilterChain:
    """Applies filters in order; a change must pass every active filter."""

    def __init__(self, filters: Iterable[ChangeFilter] = ()) -> None:
        self._filters: List[ChangeFilter] = list(filters)

    def add(self, change_filter: ChangeFilter) -> None:
        self._filters.append(change_filter)

    def test(self, change: Change) -> bool:
        return all(change_filter.test(change) for change_filter in self._filters)

    __call__ = test

    def summary(self) -> Dict[str, str]:
        return {change_filter.short_name: change_filter.summary() for change_filter in self._filters}

    def reset(self) -> None:
        for change_filter in self._filters:
            change_filter.reset()

    def __iter__(self) -> Iterator[ChangeFilter]:
        return iter(self._filters)

    def __len__(self) -> int:
        return len(self._filters)


def build_change_filter(policy: ChangeFilterPolicy, project: "Project") -> ChangeFilterChain:
    """Assemble the filter chain configured by ``policy``."""

    chain = ChangeFilterChain()
    if policy.ignore_error_changes:
        chain.add(IgnoreErrorChangeType())
    if policy.ignore_ignored_changes:
        chain.add(IgnoreIgnoredChanges())
    if policy.skip_changes_unless_added_before is not None:
        chain.add(SkipChangesUnlessAddedBefore(project, policy.skip_changes_unless_added_before))
    _LOGGER.debug("Built change filter chain", filters=[change_filter.short_name for change_filter in chain])
    return chain


__all__ = [
    "ChangeFilter",
    "ChangeFilterChain",
    "IgnoreErrorChangeType",
    "IgnoreIgnoredChanges",
    "SkipChangesUnlessAddedBefore",
    "build_change_filter",
]
