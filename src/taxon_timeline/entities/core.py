"""Core value types: interned scientific names, partial dates and change types."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from functools import total_ordering
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

SEPARATOR = " "
GENUS_SP = "sp"

_SPECIFIC_EPITHET_PATTERN = re.compile(r"^[a-z\-]+$")
_PLACEHOLDER_EPITHETS = frozenset(
    {"sp", "spp", "sp.", "spp.", "af", "af.", "aff", "aff.", "cf", "cf."}
)


def is_valid_specific_epithet(value: str) -> bool:
    """Return True when ``value`` can stand as the second part of a binomial."""

    return bool(_SPECIFIC_EPITHET_PATTERN.match(value)) and value.lower() not in _PLACEHOLDER_EPITHETS


@dataclass(frozen=True)
class InfraspecificEpithet:
    """One infraspecific component, optionally qualified by a rank ("var. tigris")."""

    value: str
    rank: Optional[str] = None

    def __str__(self) -> str:
        if self.rank:
            return f"{self.rank}{SEPARATOR}{self.value}"
        return self.value


def infraspecific_from_tokens(tokens: Sequence[str]) -> Tuple[InfraspecificEpithet, ...]:
    """Pair tokens as (rank, value); a trailing unpaired token becomes a bare value."""

    epithets: List[InfraspecificEpithet] = [
        InfraspecificEpithet(rank=tokens[index], value=tokens[index + 1])
        for index in range(0, len(tokens) - 1, 2)
    ]
    if len(tokens) % 2 == 1:
        epithets.append(InfraspecificEpithet(value=tokens[-1]))
    return tuple(epithets)


@total_ordering
@dataclass(frozen=True, eq=False)
class Name:
    """A parsed scientific name.

    Names compare and hash by their canonical full name. Obtain them from a
    :class:`NameRegistry` so that identical text yields the identical object
    and binomial/genus reductions resolve through the same table.
    """

    genus: str
    specific_epithet: Optional[str] = None
    infraspecific_epithets: Tuple[InfraspecificEpithet, ...] = ()
    registry: Optional["NameRegistry"] = field(default=None, repr=False)
    full_name: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.genus or not self.genus.strip():
            raise ValueError("Name requires a non-empty genus")
        object.__setattr__(self, "full_name", self._compose_full_name())

    def _compose_full_name(self) -> str:
        if self.specific_epithet is None:
            if not self.infraspecific_epithets:
                return self.genus
            return SEPARATOR.join([self.genus, GENUS_SP, self.infraspecific_string])
        if not self.infraspecific_epithets:
            return f"{self.genus}{SEPARATOR}{self.specific_epithet}"
        return SEPARATOR.join([self.genus, self.specific_epithet, self.infraspecific_string])

    @property
    def infraspecific_string(self) -> str:
        return SEPARATOR.join(str(epithet) for epithet in self.infraspecific_epithets)

    @property
    def binomial_name(self) -> Optional[str]:
        if self.specific_epithet is None:
            return None
        return f"{self.genus}{SEPARATOR}{self.specific_epithet}"

    @property
    def has_specific_epithet(self) -> bool:
        return self.specific_epithet is not None

    @property
    def has_infraspecific_epithets(self) -> bool:
        return bool(self.infraspecific_epithets)

    @property
    def has_subspecific_epithet(self) -> bool:
        return self.specific_epithet is not None and bool(self.infraspecific_epithets)

    def as_binomial(self) -> Optional["Name"]:
        """Reduce to the binomial, or ``None`` for names without a specific epithet."""

        if self.specific_epithet is None:
            return None
        if not self.infraspecific_epithets:
            return self
        if self.registry is not None:
            return self.registry.get(self.genus, self.specific_epithet)
        return Name(self.genus, self.specific_epithet)

    def as_genus(self) -> "Name":
        if self.specific_epithet is None and not self.infraspecific_epithets:
            return self
        if self.registry is not None:
            return self.registry.get(self.genus)
        return Name(self.genus)

    def _sort_key(self) -> Tuple[str, str]:
        return (self.full_name.lower(), self.full_name)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Name):
            return NotImplemented
        return self.full_name == other.full_name

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Name):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self.full_name)

    def __str__(self) -> str:
        return self.full_name


class NameRegistry:
    """Intern table mapping canonical full names to :class:`Name` objects."""

    def __init__(self) -> None:
        self._by_full_name: Dict[str, Name] = {}

    def __len__(self) -> int:
        return len(self._by_full_name)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Name):
            return self._by_full_name.get(item.full_name) is item
        if isinstance(item, str):
            return item in self._by_full_name
        return False

    def __iter__(self) -> Iterator[Name]:
        return iter(sorted(self._by_full_name.values()))

    def get(
        self,
        genus: str,
        specific_epithet: Optional[str] = None,
        infraspecific: Optional[str | Sequence[str]] = None,
    ) -> Name:
        """Return the interned name for the given components."""

        genus = genus.strip()
        tokens: List[str] = []
        if isinstance(infraspecific, str):
            tokens = infraspecific.split()
        elif infraspecific:
            tokens = [token for token in infraspecific if token]

        epithet: Optional[str] = specific_epithet.strip() if specific_epithet else None
        if epithet and not is_valid_specific_epithet(epithet):
            if epithet.lower() not in _PLACEHOLDER_EPITHETS:
                tokens = [epithet, *tokens]
            epithet = None

        candidate = Name(
            genus=genus,
            specific_epithet=epithet or None,
            infraspecific_epithets=infraspecific_from_tokens(tokens) if tokens else (),
            registry=self,
        )
        return self._by_full_name.setdefault(candidate.full_name, candidate)

    def from_full_name(self, text: str) -> Optional[Name]:
        """Split whitespace-delimited text into genus, epithet and the rest."""

        components = text.split()
        if not components:
            return None
        if len(components) == 1:
            return self.get(components[0])
        return self.get(components[0], components[1], components[2:])


_DATE_FORMATS: Tuple[Tuple[str, Tuple[bool, bool]], ...] = (
    ("%B %d, %Y", (True, True)),
    ("%b %d, %Y", (True, True)),
    ("%b %Y", (True, False)),
    ("%B %Y", (True, False)),
    ("%Y-%m-%d", (True, True)),
    ("%Y-%m", (True, False)),
    ("%Y", (False, False)),
)


class SimplifiedDate(BaseModel):
    """A date that may only be known to the year or month; zero means unset."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(default=0, ge=0)
    month: int = Field(default=0, ge=0, le=12)
    day: int = Field(default=0, ge=0, le=31)

    @model_validator(mode="after")
    def _check_calendar(self) -> "SimplifiedDate":
        if self.day and not self.month:
            raise ValueError("A day requires a month")
        if self.year and self.month and self.day:
            date(self.year, self.month, self.day)
        return self

    @classmethod
    def parse(cls, text: str) -> "SimplifiedDate":
        """Parse the date layouts used in dataset citations."""

        cleaned = " ".join(text.split())
        for fmt, (has_month, has_day) in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(cleaned, fmt)
            except ValueError:
                continue
            return cls(
                year=parsed.year,
                month=parsed.month if has_month else 0,
                day=parsed.day if has_day else 0,
            )
        raise ValueError(f"Unrecognised date: {text!r}")

    def as_date(self) -> date:
        """First calendar day of the period; the unset date maps to ``date.min``."""

        if not self.year:
            return date.min
        return date(self.year, self.month or 1, self.day or 1)

    @property
    def year_as_string(self) -> str:
        return str(self.year) if self.year else "(none)"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SimplifiedDate):
            return NotImplemented
        return self.as_date() < other.as_date()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SimplifiedDate):
            return NotImplemented
        return self.as_date() <= other.as_date()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SimplifiedDate):
            return NotImplemented
        return self.as_date() > other.as_date()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SimplifiedDate):
            return NotImplemented
        return self.as_date() >= other.as_date()

    def __str__(self) -> str:
        if not self.year:
            return "(none)"
        if not self.month:
            return str(self.year)
        if not self.day:
            return self.as_date().strftime("%B %Y")
        value = self.as_date()
        return f"{value.strftime('%B')} {value.day}, {value.year}"


class ChangeType(str, Enum):
    """Kinds of taxonomic event a change can record."""

    ADDITION = "added"
    DELETION = "deleted"
    RENAME = "rename"
    LUMP = "lump"
    SPLIT = "split"
    COMPLEX = "complex"
    ERROR = "error"

    def invert(self) -> "ChangeType":
        return _INVERSES.get(self, self)

    @property
    def is_lump_or_split(self) -> bool:
        return self in (ChangeType.LUMP, ChangeType.SPLIT)

    @classmethod
    def parse(cls, text: str) -> "ChangeType":
        key = text.strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown change type: {text!r}")

    def __str__(self) -> str:
        return self.value


_INVERSES: Dict[ChangeType, ChangeType] = {
    ChangeType.ADDITION: ChangeType.DELETION,
    ChangeType.DELETION: ChangeType.ADDITION,
    ChangeType.LUMP: ChangeType.SPLIT,
    ChangeType.SPLIT: ChangeType.LUMP,
}


class ModificationMarker:
    """Monotonic edit counter that notifies subscribers on every mark."""

    def __init__(self) -> None:
        self.revision = 0
        self.modified_at: Optional[datetime] = None
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def mark(self) -> None:
        self.revision += 1
        self.modified_at = datetime.now()
        for callback in list(self._listeners):
            callback()


__all__ = [
    "ChangeType",
    "InfraspecificEpithet",
    "ModificationMarker",
    "Name",
    "NameRegistry",
    "SimplifiedDate",
    "infraspecific_from_tokens",
    "is_valid_specific_epithet",
]
