"""End-to-end scenario: geese, platypuses and hawks across six decades of revisions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import pytest

from taxon_timeline.entities import Change, ChangeType, DatasetKind, Name
from taxon_timeline.timeline import (
    Project,
    dataset_summary_report,
    lumps_and_splits_report,
    name_cluster_report,
    taxon_concept_report,
)


@dataclass
class Timeline:
    project: Project
    names: Dict[str, Name]
    changes: Dict[str, Change]


@pytest.fixture
def timeline() -> Timeline:
    project = Project("North American checklist")
    names = {
        key: project.get_name(text)
        for key, text in {
            "canadensis": "Branta canadensis",
            "hutchinsii": "Branta hutchinsii",
            "canadensis_hutchinsii": "Branta canadensis hutchinsii",
            "platypus": "Platypus anatinus",
            "anatinus": "Ornithorhynchus anatinus",
            "paradoxus": "Ornithorhynchus paradoxus",
            "jamaicensis": "Buteo jamaicensis",
            "harlani": "Buteo harlani",
        }.items()
    }
    n = names
    changes: Dict[str, Change] = {}

    d1930 = project.add_dataset(project.new_dataset("AOU 1930", "1930"))
    d1930.add_change(ChangeType.ADDITION, [], [n["canadensis"], n["hutchinsii"], n["platypus"], n["jamaicensis"]])

    d1935 = project.add_dataset(project.new_dataset("Delacour 1935", "1935"))
    changes["goose_lump"] = d1935.add_change(
        ChangeType.LUMP, [n["canadensis"], n["hutchinsii"]], [n["canadensis"], n["canadensis_hutchinsii"]]
    )
    changes["hawk_split"] = d1935.add_change(
        ChangeType.SPLIT, [n["jamaicensis"]], [n["harlani"], n["jamaicensis"]]
    )
    changes["hawk_pair_lump"] = d1935.add_change(
        ChangeType.LUMP, [n["harlani"], n["jamaicensis"]], [n["harlani"]]
    )

    project.add_dataset(
        project.new_dataset("Peters 1940", "1940", rows=[{"scientificName": "Branta canadensis hutchinsii"}])
    )

    d1950 = project.add_dataset(project.new_dataset("AOU 1950", "1950"))
    d1950.add_change(ChangeType.ADDITION, [], [n["paradoxus"]])
    changes["platypus_rename"] = d1950.add_change(
        ChangeType.RENAME, [n["platypus"]], [n["anatinus"]], note="generic name preoccupied"
    )
    d1950.add_change(ChangeType.DELETION, [n["canadensis_hutchinsii"]], [])
    changes["goose_error"] = d1950.add_change(
        ChangeType.ERROR, [n["canadensis"]], [n["canadensis"], n["hutchinsii"]]
    )

    d1960 = project.add_dataset(project.new_dataset("AOU 1960", "1960"))
    changes["platypus_lump"] = d1960.add_change(
        ChangeType.LUMP, [n["paradoxus"], n["anatinus"]], [n["anatinus"]]
    )
    changes["goose_split"] = d1960.add_change(
        ChangeType.SPLIT, [n["canadensis"]], [n["canadensis"], n["hutchinsii"]]
    )
    changes["hawk_lump"] = d1960.add_change(
        ChangeType.LUMP, [n["harlani"], n["jamaicensis"]], [n["jamaicensis"]]
    )

    project.add_dataset(
        project.new_dataset(
            "Checklist 1970",
            "1970",
            DatasetKind.CHECKLIST,
            rows=[
                {"scientificName": "Branta canadensis"},
                {"scientificName": "Branta hutchinsii"},
                {"scientificName": "Ornithorhynchus anatinus"},
                {"scientificName": "Buteo jamaicensis"},
            ],
        )
    )
    return Timeline(project=project, names=names, changes=changes)


def _texts(names) -> set:
    return {str(name) for name in names}


def test_recognized_names_through_the_chain(timeline: Timeline) -> None:
    project = timeline.project
    by_year = {dataset.date.year_as_string: project.recognized_names(dataset) for dataset in project.datasets}

    assert _texts(by_year["1930"]) == {
        "Branta canadensis",
        "Branta hutchinsii",
        "Platypus anatinus",
        "Buteo jamaicensis",
    }
    assert _texts(by_year["1935"]) == {
        "Branta canadensis",
        "Branta canadensis hutchinsii",
        "Platypus anatinus",
        "Buteo jamaicensis",
        "Buteo harlani",
    }
    assert by_year["1940"] == by_year["1935"]
    assert _texts(by_year["1950"]) == {
        "Branta canadensis",
        "Ornithorhynchus anatinus",
        "Ornithorhynchus paradoxus",
        "Buteo jamaicensis",
        "Buteo harlani",
    }
    assert _texts(by_year["1970"]) == {
        "Branta canadensis",
        "Branta hutchinsii",
        "Ornithorhynchus anatinus",
        "Buteo jamaicensis",
    }
    assert project.last_dataset.implicit_changes == []


def test_error_changes_are_excluded(timeline: Timeline) -> None:
    project = timeline.project
    assert timeline.changes["goose_error"] not in project.changes()
    assert ChangeType.ERROR not in project.change_types
    assert project.change_types[ChangeType.LUMP] == 4


def test_rename_joins_clusters(timeline: Timeline) -> None:
    project = timeline.project
    n = timeline.names
    cluster = project.cluster_for(n["platypus"])
    assert cluster is project.cluster_for(n["anatinus"])
    assert cluster.name is n["anatinus"]
    assert cluster.date_range == "1930 to 1970"
    assert project.cluster_for(n["canadensis_hutchinsii"]) is project.cluster_for(n["canadensis"])
    assert project.cluster_for(n["hutchinsii"]) is not project.cluster_for(n["canadensis"])
    assert len(project.species_clusters()) == 6


def test_hawk_split_reversions(timeline: Timeline) -> None:
    project = timeline.project
    split = timeline.changes["hawk_split"]

    assert project.changes_reversing(split) == [
        timeline.changes["hawk_pair_lump"],
        timeline.changes["hawk_lump"],
    ]
    assert project.changes_perfectly_reversing(split) == [timeline.changes["hawk_lump"]]
    assert project.perfectly_reversing_summary(split) == (
        f"split (1935) -> lump (1960) [starting with change id {split.id}]"
    )


def test_goose_cluster_taxon_concepts(timeline: Timeline) -> None:
    project = timeline.project
    n = timeline.names
    cluster = project.cluster_for(n["canadensis"])
    concepts = project.taxon_concepts(cluster)

    assert [[dataset.date.year_as_string for dataset in concept.found_in_sorted()] for concept in concepts] == [
        ["1930", "1935"],
        ["1935", "1940", "1950", "1960"],
        ["1960", "1970"],
    ]
    assert [_texts(concept.names) for concept in concepts] == [
        {"Branta canadensis", "Branta canadensis hutchinsii"},
        {"Branta canadensis", "Branta canadensis hutchinsii"},
        {"Branta canadensis"},
    ]
    assert concepts[0].ends_with == [timeline.changes["goose_lump"]]
    assert concepts[1].starts_with == [timeline.changes["goose_lump"]]
    assert concepts[1].ends_with == [timeline.changes["goose_split"]]
    assert concepts[2].starts_with == [timeline.changes["goose_split"]]
    assert [concept.is_ongoing(project) for concept in concepts] == [False, False, True]
    assert cluster.is_polytypic(project)


def test_reports(timeline: Timeline) -> None:
    project = timeline.project
    split = timeline.changes["hawk_split"]

    rows = {row.change_id: row for row in lumps_and_splits_report(project)}
    assert len(rows) == 6
    row = rows[str(split.id)]
    assert row.type == "split"
    assert row.from_names == "Buteo jamaicensis"
    assert row.to_names == "Buteo harlani + Buteo jamaicensis"
    assert row.reversion_count == 2
    assert row.perfect_reversion_count == 1
    assert row.reverts_a_later_change is True
    assert row.reverts_a_previous_change is False
    assert row.perfectly_reverts_a_later_change is True
    assert row.perfect_reversions_summary.startswith("split (1935) -> lump (1960)")

    clusters = {row.name: row for row in name_cluster_report(project)}
    assert clusters["Ornithorhynchus anatinus"].names == ["Ornithorhynchus anatinus", "Platypus anatinus"]
    assert clusters["Ornithorhynchus anatinus"].taxon_concept_count == 2
    assert clusters["Branta canadensis"].taxon_concept_count == 3

    concept_rows = [row for row in taxon_concept_report(project) if row.cluster == "Branta canadensis"]
    assert [row.is_ongoing for row in concept_rows] == [False, False, True]
    assert all(row.is_polytypic for row in concept_rows)

    summaries = {row.name: row for row in dataset_summary_report(project)}
    assert summaries["Checklist 1970"].recognized_count == 4
    assert summaries["Checklist 1970"].implicit_changes_summary == "None"
    assert summaries["AOU 1950"].explicit_changes_summary == "3 (1 added, 1 rename, 1 deleted)"
    assert summaries["Peters 1940"].row_count == 1
