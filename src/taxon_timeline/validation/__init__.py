"""Project consistency validation."""

from .checks import (
    ChangeValidator,
    DatasetValidator,
    NameClusterValidator,
    ProjectValidator,
    ValidationReport,
)

__all__ = [
    "ChangeValidator",
    "DatasetValidator",
    "NameClusterValidator",
    "ProjectValidator",
    "ValidationReport",
]
