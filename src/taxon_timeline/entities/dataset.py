"""Datasets: chronologically ordered checklists and revisions."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    assert_never,
)

from ..config.policies import RecognitionPolicy
from ..utils.logging import get_logger
from .change import Change
from .core import ChangeType, ModificationMarker, Name, NameRegistry, SimplifiedDate

if TYPE_CHECKING:
    from ..timeline.project import Project

_LOGGER = get_logger(module=__name__)

DatasetRow = Mapping[str, str]


class DatasetKind(str, Enum):
    """Checklists list every recognized name; revisions only assert changes."""

    CHECKLIST = "checklist"
    REVISION = "revision"


class Dataset:
    """One node in a project's chronological chain of datasets."""

    def __init__(
        self,
        name: str,
        date: SimplifiedDate | str,
        kind: DatasetKind = DatasetKind.REVISION,
        *,
        registry: NameRegistry,
        recognition: Optional[RecognitionPolicy] = None,
        rows: Optional[Iterable[DatasetRow]] = None,
    ) -> None:
        self.name = name
        self.date = date if isinstance(date, SimplifiedDate) else SimplifiedDate.parse(date)
        self.kind = DatasetKind(kind)
        self.registry = registry
        self.index: Optional[int] = None
        self.last_modified = ModificationMarker()

        policy = recognition or RecognitionPolicy()
        self._name_columns: Tuple[str, ...] = tuple(policy.name_columns)
        self._genus_column = policy.genus_column
        self._specific_epithet_column = policy.specific_epithet_column
        self._log_mismatches = policy.log_checklist_mismatches

        self._rows: List[Dict[str, str]] = [dict(row) for row in rows or ()]
        self._names_by_row: Optional[List[FrozenSet[Name]]] = None
        self._row_names: Optional[FrozenSet[Name]] = None

        self._project: Optional["Project"] = None
        self._previous: Optional["Dataset"] = None
        self._explicit: List[Change] = []
        self._implicit: Optional[List[Change]] = None

    # -- chain -----------------------------------------------------------
    @property
    def is_checklist(self) -> bool:
        return self.kind is DatasetKind.CHECKLIST

    @property
    def previous(self) -> Optional["Dataset"]:
        return self._previous

    @property
    def project(self) -> Optional["Project"]:
        return self._project

    def set_previous_dataset(self, project: Optional["Project"], previous: Optional["Dataset"]) -> None:
        """Link this dataset into a chain; implicit changes are derived afresh."""

        self._project = project
        self._previous = previous
        self.invalidate_implicit_changes()

    def sort_key(self) -> Tuple[object, int]:
        return (self.date.as_date(), -1 if self.index is None else self.index)

    # -- rows ------------------------------------------------------------
    @property
    def rows(self) -> Tuple[Dict[str, str], ...]:
        return tuple(dict(row) for row in self._rows)

    @property
    def name_columns(self) -> Tuple[str, ...]:
        return self._name_columns

    def set_name_columns(self, columns: Sequence[str]) -> None:
        self._name_columns = tuple(columns)
        self._rows_changed()

    def add_row(self, row: DatasetRow) -> None:
        self._rows.append(dict(row))
        self._rows_changed()

    def set_rows(self, rows: Iterable[DatasetRow]) -> None:
        self._rows = [dict(row) for row in rows]
        self._rows_changed()

    def _rows_changed(self) -> None:
        self._names_by_row = None
        self._row_names = None
        self.invalidate_implicit_changes()
        self.last_modified.mark()

    def _extract_row_names(self, row: Mapping[str, str]) -> FrozenSet[Name]:
        names: Set[Name] = set()
        for column in self._name_columns:
            value = (row.get(column) or "").strip()
            if value:
                parsed = self.registry.from_full_name(value)
                if parsed is not None:
                    names.add(parsed)
        if not names:
            genus = (row.get(self._genus_column) or "").strip()
            epithet = (row.get(self._specific_epithet_column) or "").strip()
            if genus:
                names.add(self.registry.get(genus, epithet or None))
        return frozenset(names)

    @property
    def names_by_row(self) -> List[FrozenSet[Name]]:
        if self._names_by_row is None:
            self._names_by_row = [self._extract_row_names(row) for row in self._rows]
            _LOGGER.debug(
                "Extracted row names",
                dataset=self.name,
                rows=len(self._rows),
                columns=list(self._name_columns),
            )
        return self._names_by_row

    @property
    def row_names(self) -> FrozenSet[Name]:
        if self._row_names is None:
            collected: Set[Name] = set()
            for names in self.names_by_row:
                collected.update(names)
            self._row_names = frozenset(collected)
        return self._row_names

    def rows_without_names(self) -> List[Dict[str, str]]:
        return [dict(row) for row, names in zip(self._rows, self.names_by_row) if not names]

    @property
    def referenced_names(self) -> FrozenSet[Name]:
        """Names in rows plus every name an explicit change mentions."""

        names: Set[Name] = set(self.row_names)
        for change in self._explicit:
            names.update(change.all_names)
        return frozenset(names)

    # -- changes ---------------------------------------------------------
    def add_change(
        self,
        change_type: ChangeType | str,
        from_names: Iterable[Name] = (),
        to_names: Iterable[Name] = (),
        **kwargs,
    ) -> Change:
        """Create an explicit change owned by this dataset."""

        change = Change(self, change_type, from_names, to_names, **kwargs)
        self._explicit.append(change)
        self.invalidate_implicit_changes()
        self.last_modified.mark()
        return change

    def remove_change(self, change: Change) -> None:
        self._explicit.remove(change)
        self.invalidate_implicit_changes()
        self.last_modified.mark()

    @property
    def explicit_changes(self) -> List[Change]:
        return list(self._explicit)

    @property
    def implicit_changes(self) -> List[Change]:
        if self._implicit is None:
            self._implicit = self._derive_implicit_changes()
        return list(self._implicit)

    def invalidate_implicit_changes(self) -> None:
        self._implicit = None

    def all_changes(self) -> List[Change]:
        return self.explicit_changes + self.implicit_changes

    def changes(self, project: "Project", change_type: Optional[ChangeType] = None) -> List[Change]:
        """Explicit and implicit changes accepted by the project's filter."""

        accepted = [change for change in self.all_changes() if project.change_filter.test(change)]
        if change_type is not None:
            accepted = [change for change in accepted if change.type is change_type]
        return accepted

    def on_change_modified(self, change: Change) -> None:
        """React to an edit of ``change``; edited implicit changes become explicit."""

        if change not in self._explicit:
            self._explicit.append(change)
            _LOGGER.debug("Promoted change to explicit", dataset=self.name, change=str(change))
        self.invalidate_implicit_changes()
        self.last_modified.mark()

    def _derive_implicit_changes(self) -> List[Change]:
        match self.kind:
            case DatasetKind.CHECKLIST:
                return self._checklist_implicit_changes()
            case DatasetKind.REVISION:
                return []
            case _:
                assert_never(self.kind)

    def _checklist_implicit_changes(self) -> List[Change]:
        previous_names = self._previous_recognized_names()
        explained_additions: Set[Name] = set()
        explained_deletions: Set[Name] = set()
        for change in self._explicit:
            explained_additions.update(change.to_names)
            explained_deletions.update(change.from_names)

        rows = self.row_names
        additions = sorted(rows - previous_names - explained_additions)
        deletions = sorted(previous_names - rows - explained_deletions)

        implicit = [Change(self, ChangeType.ADDITION, (), [name]) for name in additions]
        implicit.extend(Change(self, ChangeType.DELETION, [name], ()) for name in deletions)
        return implicit

    def _previous_recognized_names(self) -> FrozenSet[Name]:
        if self._previous is None:
            return frozenset()
        if self._project is None:
            raise RuntimeError(f"{self} is linked to a previous dataset without a project")
        return self._project.recognized_names(self._previous)

    # -- recognized names -----------------------------------------------
    def compute_recognized_names(self, project: "Project") -> FrozenSet[Name]:
        """Carry the previous dataset's names forward through this dataset's changes.

        A name that is both added and deleted here (the retained side of a lump
        or split) stays recognized. Checklists are cross-checked against their
        rows; a disagreement is logged and the computed set is still returned.
        """

        previous = (
            project.recognized_names(self._previous) if self._previous is not None else frozenset()
        )
        added: Set[Name] = set()
        deleted: Set[Name] = set()
        for change in self.changes(project):
            added.update(change.to_names)
            deleted.update(change.from_names)

        recognized = frozenset((previous | added) - (deleted - added))

        match self.kind:
            case DatasetKind.CHECKLIST:
                self._check_against_rows(recognized, previous, added, deleted)
            case DatasetKind.REVISION:
                pass
            case _:
                assert_never(self.kind)
        return recognized

    def _check_against_rows(
        self,
        recognized: FrozenSet[Name],
        previous: FrozenSet[Name],
        added: Set[Name],
        deleted: Set[Name],
    ) -> None:
        rows = self.row_names
        if recognized == rows or not self._log_mismatches:
            return
        _LOGGER.warning(
            "Recognized names disagree with checklist rows",
            dataset=self.name,
            extra_names=sorted(str(name) for name in recognized - rows),
            missing_names=sorted(str(name) for name in rows - recognized),
            previous_count=len(previous),
            added_count=len(added),
            deleted_count=len(deleted),
            retained_count=len(added & deleted),
            recognized_count=len(recognized),
            row_count=len(rows),
        )

    # -- summaries -------------------------------------------------------
    def name_count_summary(self, project: "Project") -> str:
        return f"{len(project.recognized_names(self))} ({len(self.referenced_names)} in this dataset)"

    def binomial_count_summary(self, project: "Project") -> str:
        recognized = {name.binomial_name for name in project.recognized_names(self)}
        referenced = {name.binomial_name for name in self.referenced_names}
        return f"{len(recognized)} ({len(referenced)} in this dataset)"

    def explicit_changes_count_summary(self, project: "Project") -> str:
        explicit = [change for change in self._explicit if project.change_filter.test(change)]
        if not explicit:
            return "None"
        return f"{len(explicit)} ({_count_by_type(explicit)})"

    def implicit_changes_count_summary(self, project: "Project") -> str:
        implicit = [change for change in self.implicit_changes if project.change_filter.test(change)]
        if not implicit:
            return "None"
        return f"{len(implicit)} implicit changes ({_count_by_type(implicit)})"

    @property
    def citation(self) -> str:
        return f"{self.name} ({self.date})"

    def __str__(self) -> str:
        prefix = "Checklist" if self.is_checklist else "Dataset"
        return f"{prefix} {self.citation}"

    def __repr__(self) -> str:
        return f"Dataset(name={self.name!r}, date={self.date}, kind={self.kind.value})"


def _count_by_type(changes: Sequence[Change]) -> str:
    counts = Counter(change.type for change in changes)
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return ", ".join(f"{count} {change_type}" for change_type, count in ordered)


__all__ = ["Dataset", "DatasetKind", "DatasetRow"]
