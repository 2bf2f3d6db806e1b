"""Row models summarising a project for tables and exports."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..entities import Change, Dataset
from .project import Project


class _Row(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReversionRow(_Row):
    """One lump or split with everything that reverses it."""

    change_id: str
    type: str
    from_names: str = Field(..., description="Names on the 'from' side joined with ' + '")
    to_names: str
    dataset: str
    year: str
    change: str
    reversions: List[str] = Field(default_factory=list)
    reversion_count: int = 0
    reverts_a_previous_change: bool = False
    reverts_a_later_change: bool = False
    perfect_reversions: List[str] = Field(default_factory=list)
    perfect_reversions_summary: str = ""
    perfect_reversion_count: int = 0
    perfectly_reverts_a_previous_change: bool = False
    perfectly_reverts_a_later_change: bool = False


class TaxonConceptRow(_Row):
    cluster: str
    concept: str
    names: List[str]
    date_range: str
    found_in: List[str]
    starts_with: List[str]
    ends_with: List[str]
    is_ongoing: bool
    is_polytypic: bool


class NameClusterRow(_Row):
    name: str
    names: List[str]
    binomials: List[str]
    found_in: List[str]
    date_range: str
    is_polytypic: bool
    taxon_concept_count: int


class DatasetSummaryRow(_Row):
    name: str
    date: str
    kind: str
    row_count: int
    recognized_count: int
    name_count_summary: str
    binomial_count_summary: str
    explicit_changes_summary: str
    implicit_changes_summary: str


def _joined(names) -> str:
    return " + ".join(str(name) for name in sorted(names))


def _earlier(first: Dataset, second: Dataset) -> bool:
    return first.sort_key() < second.sort_key()


def reversion_row(project: Project, change: Change) -> ReversionRow:
    reversions = project.changes_reversing(change)
    perfect = project.changes_perfectly_reversing(change)
    return ReversionRow(
        change_id=str(change.id),
        type=str(change.type),
        from_names=_joined(change.from_names),
        to_names=_joined(change.to_names),
        dataset=change.dataset.citation,
        year=change.dataset.date.year_as_string,
        change=str(change),
        reversions=[f"{other} ({other.dataset.citation})" for other in reversions],
        reversion_count=len(reversions),
        reverts_a_previous_change=any(_earlier(other.dataset, change.dataset) for other in reversions),
        reverts_a_later_change=any(_earlier(change.dataset, other.dataset) for other in reversions),
        perfect_reversions=[f"{other} ({other.dataset.citation})" for other in perfect],
        perfect_reversions_summary=project.perfectly_reversing_summary(change),
        perfect_reversion_count=len(perfect),
        perfectly_reverts_a_previous_change=any(_earlier(other.dataset, change.dataset) for other in perfect),
        perfectly_reverts_a_later_change=any(_earlier(change.dataset, other.dataset) for other in perfect),
    )


def lumps_and_splits_report(project: Project) -> List[ReversionRow]:
    return [reversion_row(project, change) for change in project.lumps_and_splits()]


def taxon_concept_report(project: Project) -> List[TaxonConceptRow]:
    rows: List[TaxonConceptRow] = []
    for cluster in sorted(project.species_clusters(), key=lambda item: item.name):
        polytypic = cluster.is_polytypic(project)
        for concept in cluster.taxon_concepts(project):
            rows.append(
                TaxonConceptRow(
                    cluster=str(cluster.name),
                    concept=str(concept.name),
                    names=[str(name) for name in sorted(concept.names)],
                    date_range=concept.date_range,
                    found_in=[dataset.citation for dataset in concept.found_in_sorted()],
                    starts_with=[str(change) for change in concept.starts_with],
                    ends_with=[str(change) for change in concept.ends_with],
                    is_ongoing=concept.is_ongoing(project),
                    is_polytypic=polytypic,
                )
            )
    return rows


def name_cluster_report(project: Project) -> List[NameClusterRow]:
    rows: List[NameClusterRow] = []
    for cluster in sorted(project.name_cluster_manager.clusters, key=lambda item: item.name):
        rows.append(
            NameClusterRow(
                name=str(cluster.name),
                names=[str(name) for name in cluster],
                binomials=[str(name) for name in sorted(cluster.binomials())],
                found_in=[dataset.citation for dataset in cluster.found_in_sorted()],
                date_range=cluster.date_range,
                is_polytypic=cluster.is_polytypic(project),
                taxon_concept_count=len(cluster.taxon_concepts(project)),
            )
        )
    return rows


def dataset_summary_report(project: Project) -> List[DatasetSummaryRow]:
    return [
        DatasetSummaryRow(
            name=dataset.name,
            date=str(dataset.date),
            kind=dataset.kind.value,
            row_count=len(dataset.rows),
            recognized_count=len(project.recognized_names(dataset)),
            name_count_summary=dataset.name_count_summary(project),
            binomial_count_summary=dataset.binomial_count_summary(project),
            explicit_changes_summary=dataset.explicit_changes_count_summary(project),
            implicit_changes_summary=dataset.implicit_changes_count_summary(project),
        )
        for dataset in project.datasets
    ]


__all__ = [
    "DatasetSummaryRow",
    "NameClusterRow",
    "ReversionRow",
    "TaxonConceptRow",
    "dataset_summary_report",
    "lumps_and_splits_report",
    "name_cluster_report",
    "reversion_row",
    "taxon_concept_report",
]
