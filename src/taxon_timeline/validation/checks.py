"""Consistency checks over a project's changes, datasets and clusters."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Sequence, Set

from ..entities import Change, ChangeType, Dataset, Name
from ..timeline.project import Project
from ..utils.logging import get_logger

_LOGGER = get_logger(module=__name__)

ERROR = "error"
WARNING = "warning"


def _violation(code: str, severity: str, target: object, dataset: Dataset | None, detail: str) -> dict:
    return {
        "code": code,
        "severity": severity,
        "target": str(target),
        "dataset": dataset.citation if dataset is not None else None,
        "detail": detail,
    }


@dataclass(slots=True)
class ValidationReport:
    """Structured validation output for reports and downstream tooling."""

    passed: bool
    violations: List[dict] = field(default_factory=list)
    stats: dict = field(default_factory=dict)
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def codes(self) -> Set[str]:
        return {violation["code"] for violation in self.violations}

    def errors(self) -> List[dict]:
        return [violation for violation in self.violations if violation["severity"] == ERROR]

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "violations": list(self.violations),
            "stats": dict(self.stats),
            "generated_at": self.generated_at,
        }


class ChangeValidator:
    """Checks individual changes for shape and cluster consistency."""

    name = "changes"

    def validate(self, project: Project) -> List[dict]:
        violations: List[dict] = []
        for change in project.changes():
            violations.extend(self.check_shape(change))
            violations.extend(self.check_previously_recognized(project, change))
            violations.extend(self.check_clusters(project, change, "from", change.from_names))
            violations.extend(self.check_clusters(project, change, "to", change.to_names))
        return violations

    def check_shape(self, change: Change) -> List[dict]:
        from_count, to_count = len(change.from_names), len(change.to_names)
        if change.type is ChangeType.ADDITION and (from_count or not to_count):
            return [_violation("incorrect-addition", ERROR, change, change.dataset, "additions need only 'to' names")]
        if change.type is ChangeType.DELETION and (to_count or not from_count):
            return [_violation("incorrect-deletion", ERROR, change, change.dataset, "deletions need only 'from' names")]
        if change.type is ChangeType.LUMP and not from_count > to_count:
            return [_violation("incorrect-lump", ERROR, change, change.dataset, "a lump must have more 'from' than 'to' names")]
        if change.type is ChangeType.SPLIT and not from_count < to_count:
            return [_violation("incorrect-split", ERROR, change, change.dataset, "a split must have fewer 'from' than 'to' names")]
        return []

    def check_previously_recognized(self, project: Project, change: Change) -> List[dict]:
        previous = change.dataset.previous
        if previous is None:
            return []
        recognized = project.recognized_names(previous)
        missing = sorted(name for name in change.from_names if name not in recognized)
        if not missing:
            return []
        return [
            _violation(
                "from-not-previously-recognized",
                ERROR,
                change,
                change.dataset,
                f"not recognized in {previous.citation}: {', '.join(str(name) for name in missing)}",
            )
        ]

    def check_clusters(self, project: Project, change: Change, side: str, names: Iterable[Name]) -> List[dict]:
        violations: List[dict] = []
        manager = project.name_cluster_manager
        seen: Dict[object, Name] = {}
        for name in sorted(names):
            cluster = manager.get_cluster(name)
            if cluster is None:
                violations.append(
                    _violation("missing-name-cluster", ERROR, change, change.dataset, f"'{name}' has no name cluster")
                )
                continue
            if cluster.id in seen:
                violations.append(
                    _violation(
                        "repeated-name-cluster",
                        ERROR,
                        change,
                        change.dataset,
                        f"cluster repeats in '{side}': first as {seen[cluster.id]}, then as {name}",
                    )
                )
            seen[cluster.id] = name
        return violations


class DatasetValidator:
    """Checks that each dataset's changes are coherent with its neighbours."""

    name = "datasets"

    def validate(self, project: Project) -> List[dict]:
        violations: List[dict] = []
        for dataset in project.datasets:
            violations.extend(self.check_changes_have_effect(project, dataset))
            violations.extend(self.check_contradictions(project, dataset))
            violations.extend(self.check_rows_have_names(dataset))
        return violations

    def check_changes_have_effect(self, project: Project, dataset: Dataset) -> List[dict]:
        previous = dataset.previous
        if previous is None:
            return []
        before = project.recognized_names(previous)
        after = project.recognized_names(dataset)
        added = after - before
        deleted = before - after

        violations: List[dict] = []
        for change in dataset.changes(project):
            for name in sorted(change.to_names - change.from_names):
                if name not in added:
                    violations.append(
                        _violation(
                            "addition-without-effect",
                            ERROR,
                            change,
                            dataset,
                            f"'{name}' added but already recognized",
                        )
                    )
            for name in sorted(change.from_names - change.to_names):
                if name not in deleted:
                    violations.append(
                        _violation(
                            "deletion-without-effect",
                            ERROR,
                            change,
                            dataset,
                            f"'{name}' deleted but still recognized",
                        )
                    )
        return violations

    def check_contradictions(self, project: Project, dataset: Dataset) -> List[dict]:
        added: Set[Name] = set()
        deleted: Set[Name] = set()
        violations: List[dict] = []
        for change in dataset.changes(project):
            adds = change.to_names - change.from_names
            deletes = change.from_names - change.to_names
            for name in sorted(adds & added):
                violations.append(_violation("added-twice", ERROR, change, dataset, f"'{name}' added more than once"))
            for name in sorted(deletes & deleted):
                violations.append(_violation("deleted-twice", ERROR, change, dataset, f"'{name}' deleted more than once"))
            for name in sorted((adds & deleted) | (deletes & added)):
                violations.append(
                    _violation("added-and-deleted", ERROR, change, dataset, f"'{name}' both added and deleted")
                )
            added.update(adds)
            deleted.update(deletes)
        return violations

    def check_rows_have_names(self, dataset: Dataset) -> List[dict]:
        return [
            _violation("row-without-name", WARNING, row, dataset, "row has no scientific name and is excluded")
            for row in dataset.rows_without_names()
        ]


class NameClusterValidator:
    """Checks the cluster partition itself."""

    name = "clusters"

    def validate(self, project: Project) -> List[dict]:
        violations: List[dict] = []
        owners: Dict[Name, object] = {}
        for cluster in project.name_cluster_manager.clusters:
            for name in cluster.names:
                if name in owners and owners[name] is not cluster:
                    violations.append(
                        _violation("name-in-multiple-clusters", ERROR, name, None, f"'{name}' is in more than one cluster")
                    )
                owners[name] = cluster
            binomials = cluster.binomials()
            if len(binomials) > 1:
                violations.append(
                    _violation(
                        "multiple-binomials",
                        WARNING,
                        cluster.name,
                        None,
                        f"cluster holds {len(binomials)} binomials: {', '.join(str(name) for name in sorted(binomials))}",
                    )
                )
        return violations


class ProjectValidator:
    """Runs every validator and folds the results into one report."""

    def __init__(self, validators: Sequence[object] | None = None) -> None:
        self._validators = list(validators) if validators is not None else [
            ChangeValidator(),
            DatasetValidator(),
            NameClusterValidator(),
        ]

    def run(self, project: Project) -> ValidationReport:
        violations: List[dict] = []
        for validator in self._validators:
            violations.extend(validator.validate(project))

        by_code = Counter(violation["code"] for violation in violations)
        stats = {
            "datasets": len(project.datasets),
            "changes": len(project.changes()),
            "clusters": len(project.name_cluster_manager),
            "by_code": dict(by_code),
        }
        passed = not any(violation["severity"] == ERROR for violation in violations)
        _LOGGER.info(
            "Project validation completed",
            project=project.name,
            passed=passed,
            violations=len(violations),
        )
        return ValidationReport(passed=passed, violations=violations, stats=stats)


__all__ = [
    "ChangeValidator",
    "DatasetValidator",
    "NameClusterValidator",
    "ProjectValidator",
    "ValidationReport",
]
