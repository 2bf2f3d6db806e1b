"""Taxonomic change records scoped to a single dataset."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, Mapping, Optional
from uuid import UUID, uuid4

from .core import ChangeType, ModificationMarker, Name

if TYPE_CHECKING:
    from .dataset import Dataset

IGNORED_PROPERTY = "ignored"


class Change:
    """An asserted or inferred event linking ``from`` names to ``to`` names.

    Every edit bumps :attr:`last_modified` and notifies the owning dataset so
    that its implicit changes and the project's caches stay current.
    """

    def __init__(
        self,
        dataset: "Dataset",
        change_type: ChangeType | str,
        from_names: Iterable[Name] = (),
        to_names: Iterable[Name] = (),
        *,
        note: Optional[str] = None,
        properties: Optional[Mapping[str, str]] = None,
        citations: Optional[Iterable[str]] = None,
        change_id: Optional[UUID] = None,
    ) -> None:
        self.id: UUID = change_id or uuid4()
        self._dataset = dataset
        self._type = _coerce_type(change_type)
        self._from: FrozenSet[Name] = frozenset(from_names)
        self._to: FrozenSet[Name] = frozenset(to_names)
        self._note = note
        self._properties: Dict[str, str] = dict(properties or {})
        self._citations: List[str] = list(citations or [])
        self.last_modified = ModificationMarker()

    @property
    def dataset(self) -> "Dataset":
        return self._dataset

    @property
    def type(self) -> ChangeType:
        return self._type

    @type.setter
    def type(self, value: ChangeType | str) -> None:
        self._type = _coerce_type(value)
        self._modified()

    @property
    def from_names(self) -> FrozenSet[Name]:
        return self._from

    @from_names.setter
    def from_names(self, names: Iterable[Name]) -> None:
        self._from = frozenset(names)
        self._modified()

    @property
    def to_names(self) -> FrozenSet[Name]:
        return self._to

    @to_names.setter
    def to_names(self, names: Iterable[Name]) -> None:
        self._to = frozenset(names)
        self._modified()

    @property
    def note(self) -> Optional[str]:
        return self._note

    @note.setter
    def note(self, value: Optional[str]) -> None:
        self._note = value
        self._modified()

    @property
    def properties(self) -> Mapping[str, str]:
        return dict(self._properties)

    def set_property(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self._properties.pop(key, None)
        else:
            self._properties[key] = value
        self._modified()

    def is_property_set(self, key: str) -> bool:
        return self._properties.get(key, "").strip().lower() == "yes"

    @property
    def citations(self) -> List[str]:
        return list(self._citations)

    def add_citation(self, citation: str) -> None:
        self._citations.append(citation)
        self._modified()

    @property
    def all_names(self) -> FrozenSet[Name]:
        return self._from | self._to

    def _modified(self) -> None:
        self.last_modified.mark()
        self._dataset.on_change_modified(self)

    def __str__(self) -> str:
        if self._type is ChangeType.ADDITION:
            return f"added {_join(self._to)}"
        if self._type is ChangeType.DELETION:
            return f"deleted {_join(self._from)}"
        annotation = str(self._type)
        if self._note:
            annotation = f"{annotation}, {self._note}"
        return f"{_join(self._from)} -> {_join(self._to)} [{annotation}]"

    def __repr__(self) -> str:
        return f"Change(id={self.id}, {self})"


def _coerce_type(value: ChangeType | str) -> ChangeType:
    if isinstance(value, ChangeType):
        return value
    return ChangeType.parse(value)


def _join(names: Iterable[Name]) -> str:
    return " + ".join(str(name) for name in sorted(names))


__all__ = ["Change", "IGNORED_PROPERTY"]
