"""
Unit tests for UniqueTypedCollection.

Tests key uniqueness, type enforcement, all-or-nothing bulk operations and
restartable iteration.
"""

import pytest

from microplate.collection import UniqueTypedCollection
from microplate.exceptions import InvalidTypeError
from microplate.well import Well


@pytest.fixture
def wells():
    return UniqueTypedCollection(Well)


# ============================================================================
# Add Tests
# ============================================================================


def test_add_same_key_twice(wells):
    """Adding a second member with an existing key should return False and keep size."""
    assert wells.add(Well("A1", [1.0])) is True
    assert wells.add(Well("A1", [2.0])) is False

    assert wells.size() == 1
    assert wells.get("A1").data == [1.0]


def test_add_rejects_wrong_type(wells):
    """add should raise InvalidTypeError for members of another type."""
    with pytest.raises(InvalidTypeError, match="Well"):
        wells.add("A1")


def test_add_all_is_all_or_nothing(wells):
    """add_all should add nothing when any member has the wrong type."""
    with pytest.raises(InvalidTypeError):
        wells.add_all([Well("A1"), Well("B2"), 42])

    assert wells.is_empty()


def test_add_all_reports_change(wells):
    """add_all should return True only when something new was stored."""
    assert wells.add_all([Well("A1"), Well("B2")]) is True
    assert wells.add_all([Well("A1")]) is False
    assert len(wells) == 2


def test_add_all_rejects_non_iterable(wells):
    """add_all should raise InvalidTypeError for a non-iterable or a string."""
    with pytest.raises(InvalidTypeError):
        wells.add_all(42)
    with pytest.raises(InvalidTypeError):
        wells.add_all("A1")


def test_constructor_requires_class():
    """The declared type must be a class."""
    with pytest.raises(InvalidTypeError):
        UniqueTypedCollection("Well")


# ============================================================================
# Remove / Retain Tests
# ============================================================================


def test_remove_by_member_or_key(wells):
    """remove should accept a member or its string key."""
    wells.add_all([Well("A1"), Well("B2")])

    assert wells.remove(Well("A1", [9.0])) is True
    assert wells.remove("B2") is True
    assert wells.remove("C3") is False
    assert wells.is_empty()


def test_remove_all_validates_first(wells):
    """remove_all should not remove anything when a key has the wrong type."""
    wells.add_all([Well("A1"), Well("B2")])

    with pytest.raises(InvalidTypeError):
        wells.remove_all(["A1", 3.5])

    assert wells.size() == 2


def test_retain_single(wells):
    """retain should keep only the given member."""
    wells.add_all([Well("A1"), Well("B2")])

    assert wells.retain("B2") is True
    assert wells.keys() == ["B2"]

    assert wells.retain("Z9") is False
    assert wells.is_empty()


def test_retain_all(wells):
    """retain_all should keep only listed members."""
    wells.add_all([Well("A1"), Well("B2"), Well("C3")])

    assert wells.retain_all(["A1", Well("C3"), "D4"]) is True
    assert sorted(wells.keys()) == ["A1", "C3"]


def test_clear(wells):
    """clear should empty the collection."""
    wells.add_all([Well("A1"), Well("B2")])
    wells.clear()

    assert wells.size() == 0


# ============================================================================
# Lookup Tests
# ============================================================================


def test_contains_and_contains_all(wells):
    """contains/contains_all should match by key."""
    wells.add_all([Well("A1"), Well("B2")])

    assert wells.contains("A1")
    assert wells.contains(Well("B2"))
    assert not wells.contains("C3")
    assert wells.contains_all(["A1", "B2"])
    assert not wells.contains_all(["A1", "C3"])


def test_dunder_contains_ignores_other_types(wells):
    """The in operator should return False rather than raise for other types."""
    wells.add(Well("A1"))

    assert "A1" in wells
    assert 42 not in wells


def test_iteration_is_restartable(wells):
    """Iterating twice should yield the same members."""
    wells.add_all([Well("A1"), Well("B2")])

    first = [str(well) for well in wells]
    second = [str(well) for well in wells]

    assert first == second == ["A1", "B2"]


def test_iteration_survives_mutation(wells):
    """Mutating during iteration should not break the iterator."""
    wells.add_all([Well("A1"), Well("B2")])

    for well in wells:
        wells.remove(well)

    assert wells.is_empty()


def test_string_collection():
    """A collection of str stores raw keys."""
    keys = UniqueTypedCollection(str)

    assert keys.add("A1") is True
    assert keys.add("A1") is False
    assert keys.to_list() == ["A1"]
