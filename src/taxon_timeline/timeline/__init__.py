"""Dataset chains, change filters, reversion detection and summary reports."""

from .filters import (
    ChangeFilter,
    ChangeFilterChain,
    IgnoreErrorChangeType,
    IgnoreIgnoredChanges,
    SkipChangesUnlessAddedBefore,
    build_change_filter,
)
from .project import DatasetChainError, Project
from .reports import (
    DatasetSummaryRow,
    NameClusterRow,
    ReversionRow,
    TaxonConceptRow,
    dataset_summary_report,
    lumps_and_splits_report,
    name_cluster_report,
    taxon_concept_report,
)
from .reversions import ReversionDetector

__all__ = [
    "ChangeFilter",
    "ChangeFilterChain",
    "DatasetChainError",
    "DatasetSummaryRow",
    "IgnoreErrorChangeType",
    "IgnoreIgnoredChanges",
    "NameClusterRow",
    "Project",
    "ReversionDetector",
    "ReversionRow",
    "SkipChangesUnlessAddedBefore",
    "TaxonConceptRow",
    "build_change_filter",
    "dataset_summary_report",
    "lumps_and_splits_report",
    "name_cluster_report",
    "taxon_concept_report",
]
