"""Domain entities: names, changes and datasets."""

from .change import IGNORED_PROPERTY, Change
from .core import (
    ChangeType,
    InfraspecificEpithet,
    ModificationMarker,
    Name,
    NameRegistry,
    SimplifiedDate,
    is_valid_specific_epithet,
)
from .dataset import Dataset, DatasetKind, DatasetRow

__all__ = [
    "Change",
    "ChangeType",
    "Dataset",
    "DatasetKind",
    "DatasetRow",
    "IGNORED_PROPERTY",
    "InfraspecificEpithet",
    "ModificationMarker",
    "Name",
    "NameRegistry",
    "SimplifiedDate",
    "is_valid_specific_epithet",
]
