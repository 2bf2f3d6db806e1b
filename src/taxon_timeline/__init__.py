"""Top-level package for tracking scientific names across dataset timelines."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("taxon-timeline")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.1.0"

from .clustering import NameCluster, NameClusterManager, Synonymy, TaxonConcept, UnregisteredNameError
from .config.settings import Settings, get_settings
from .entities import (
    Change,
    ChangeType,
    Dataset,
    DatasetKind,
    Name,
    NameRegistry,
    SimplifiedDate,
)
from .timeline import DatasetChainError, Project

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "Change",
    "ChangeType",
    "Dataset",
    "DatasetChainError",
    "DatasetKind",
    "Name",
    "NameCluster",
    "NameClusterManager",
    "NameRegistry",
    "Project",
    "SimplifiedDate",
    "Synonymy",
    "TaxonConcept",
    "UnregisteredNameError",
]
