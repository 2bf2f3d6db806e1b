"""Unit tests for taxon_timeline.entities."""

from __future__ import annotations

import pytest

from taxon_timeline.entities import (
    ChangeType,
    Dataset,
    DatasetKind,
    NameRegistry,
    SimplifiedDate,
    is_valid_specific_epithet,
)


def _dataset(registry: NameRegistry, kind: DatasetKind = DatasetKind.REVISION) -> Dataset:
    return Dataset("Test dataset", "1950", kind, registry=registry)


def test_registry_interns_identical_text() -> None:
    registry = NameRegistry()
    first = registry.from_full_name("Branta canadensis")
    second = registry.get("Branta", "canadensis")
    assert first is second
    assert len(registry) == 1
    assert "Branta canadensis" in registry


def test_separate_registries_do_not_share_objects() -> None:
    left = NameRegistry().from_full_name("Buteo jamaicensis")
    right = NameRegistry().from_full_name("Buteo jamaicensis")
    assert left is not right
    assert left == right
    assert hash(left) == hash(right)


def test_full_name_forms() -> None:
    registry = NameRegistry()
    assert registry.get("Branta").full_name == "Branta"
    assert registry.get("Branta", "canadensis").full_name == "Branta canadensis"
    trinomial = registry.from_full_name("Branta canadensis hutchinsii")
    assert trinomial.full_name == "Branta canadensis hutchinsii"
    assert trinomial.infraspecific_epithets[0].value == "hutchinsii"
    assert trinomial.infraspecific_epithets[0].rank is None
    ranked = registry.from_full_name("Panthera tigris var tigris")
    assert ranked.infraspecific_epithets[0].rank == "var"
    assert ranked.full_name == "Panthera tigris var tigris"


def test_placeholder_epithets_make_genus_only_names() -> None:
    registry = NameRegistry()
    name = registry.from_full_name("Branta sp.")
    assert name.specific_epithet is None
    assert name.full_name == "Branta"
    assert not name.has_specific_epithet
    assert not is_valid_specific_epithet("cf")
    assert not is_valid_specific_epithet("Canadensis")
    assert is_valid_specific_epithet("novae-hollandiae")


def test_invalid_epithet_moves_to_infraspecific_part() -> None:
    registry = NameRegistry()
    name = registry.get("Branta", "Canadensis")
    assert name.specific_epithet is None
    assert name.full_name == "Branta sp Canadensis"
    assert name.as_binomial() is None


def test_reductions_resolve_through_registry() -> None:
    registry = NameRegistry()
    trinomial = registry.from_full_name("Branta canadensis hutchinsii")
    binomial = trinomial.as_binomial()
    assert binomial is registry.get("Branta", "canadensis")
    assert binomial.as_binomial() is binomial
    assert trinomial.as_genus() is registry.get("Branta")
    assert trinomial.has_subspecific_epithet
    assert not binomial.has_subspecific_epithet


def test_names_sort_case_insensitively() -> None:
    registry = NameRegistry()
    names = [registry.from_full_name(text) for text in ("buteo harlani", "Branta canadensis", "Buteo jamaicensis")]
    assert [str(name) for name in sorted(names)] == [
        "Branta canadensis",
        "buteo harlani",
        "Buteo jamaicensis",
    ]


def test_empty_text_has_no_name() -> None:
    registry = NameRegistry()
    assert registry.from_full_name("   ") is None
    with pytest.raises(ValueError):
        registry.get("   ")


def test_change_type_inverse() -> None:
    assert ChangeType.ADDITION.invert() is ChangeType.DELETION
    assert ChangeType.DELETION.invert() is ChangeType.ADDITION
    assert ChangeType.LUMP.invert() is ChangeType.SPLIT
    assert ChangeType.SPLIT.invert() is ChangeType.LUMP
    for change_type in (ChangeType.RENAME, ChangeType.COMPLEX, ChangeType.ERROR):
        assert change_type.invert() is change_type


def test_change_type_parse() -> None:
    assert ChangeType.parse("added") is ChangeType.ADDITION
    assert ChangeType.parse(" Lump ") is ChangeType.LUMP
    assert ChangeType.parse("deletion") is ChangeType.DELETION
    with pytest.raises(ValueError):
        ChangeType.parse("merge")


@pytest.mark.parametrize(
    ("text", "expected", "rendered"),
    [
        ("2017", (2017, 0, 0), "2017"),
        ("2009-04", (2009, 4, 0), "April 2009"),
        ("April 2009", (2009, 4, 0), "April 2009"),
        ("Oct 2017", (2017, 10, 0), "October 2017"),
        ("October 3, 2017", (2017, 10, 3), "October 3, 2017"),
        ("2017-10-3", (2017, 10, 3), "October 3, 2017"),
    ],
)
def test_simplified_date_parse(text: str, expected: tuple, rendered: str) -> None:
    parsed = SimplifiedDate.parse(text)
    assert (parsed.year, parsed.month, parsed.day) == expected
    assert str(parsed) == rendered


def test_simplified_date_ordering_and_empty() -> None:
    assert str(SimplifiedDate()) == "(none)"
    assert SimplifiedDate(year=1930) < SimplifiedDate(year=1935)
    assert SimplifiedDate(year=1935, month=2) > SimplifiedDate(year=1935)
    assert SimplifiedDate() < SimplifiedDate(year=1900)
    with pytest.raises(ValueError):
        SimplifiedDate.parse("sometime in 1930")
    with pytest.raises(ValueError):
        SimplifiedDate(year=2017, month=2, day=30)


def test_change_rendering_and_properties() -> None:
    registry = NameRegistry()
    dataset = _dataset(registry)
    canadensis = registry.from_full_name("Branta canadensis")
    hutchinsii = registry.from_full_name("Branta hutchinsii")

    addition = dataset.add_change(ChangeType.ADDITION, [], [hutchinsii, canadensis])
    assert str(addition) == "added Branta canadensis + Branta hutchinsii"

    deletion = dataset.add_change("deleted", [hutchinsii], [])
    assert str(deletion) == "deleted Branta hutchinsii"

    lump = dataset.add_change(ChangeType.LUMP, [canadensis, hutchinsii], [canadensis], note="AOU 1950")
    assert str(lump) == "Branta canadensis + Branta hutchinsii -> Branta canadensis [lump, AOU 1950]"
    assert lump.all_names == {canadensis, hutchinsii}

    lump.set_property("ignored", "Yes")
    assert lump.is_property_set("ignored")
    lump.set_property("ignored", None)
    assert not lump.is_property_set("ignored")


def test_change_edits_mark_dataset_modified() -> None:
    registry = NameRegistry()
    dataset = _dataset(registry)
    name = registry.from_full_name("Platypus anatinus")
    change = dataset.add_change(ChangeType.ADDITION, [], [name])

    dataset_revision = dataset.last_modified.revision
    change_revision = change.last_modified.revision
    change.note = "checked"

    assert change.last_modified.revision == change_revision + 1
    assert dataset.last_modified.revision == dataset_revision + 1
    assert dataset.explicit_changes == [change]


def test_dataset_row_names_are_memoised_and_reset() -> None:
    registry = NameRegistry()
    dataset = Dataset(
        "Checklist",
        "1940",
        DatasetKind.CHECKLIST,
        registry=registry,
        rows=[{"scientificName": "Branta canadensis hutchinsii"}, {"genus": "Buteo", "specificEpithet": "harlani"}],
    )
    first = dataset.row_names
    assert {str(name) for name in first} == {"Branta canadensis hutchinsii", "Buteo harlani"}
    assert dataset.row_names is first

    dataset.add_row({"scientificName": ""})
    assert dataset.row_names is not first
    assert len(dataset.rows_without_names()) == 1

    dataset.set_name_columns(["acceptedName"])
    assert {str(name) for name in dataset.row_names} == {"Buteo harlani"}


def test_dataset_rendering() -> None:
    registry = NameRegistry()
    checklist = Dataset("AOU", "1931", DatasetKind.CHECKLIST, registry=registry)
    revision = Dataset("Delacour", "May 1951", registry=registry)
    assert str(checklist) == "Checklist AOU (1931)"
    assert str(revision) == "Dataset Delacour (May 1951)"
    assert revision.citation == "Delacour (May 1951)"
