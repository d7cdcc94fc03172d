"""
Unit tests for the Pydantic document models.

Tests required keys, coordinate constraints and index normalisation.
"""

import pytest
from pydantic import ValidationError

from microplate.models import (
    DOCUMENT_MODELS,
    PlateDocument,
    StackDocument,
    WellDocument,
    WellGroupDocument,
    WellRecord,
    WellSetDocument,
)


# ============================================================================
# WellRecord Tests
# ============================================================================


def test_well_record_valid():
    """WellRecord should accept non-negative rows and positive columns."""
    record = WellRecord(row=0, column=1, data=[1, 2.5])

    assert record.data == [1.0, 2.5]


def test_well_record_rejects_bad_coordinates():
    """WellRecord should reject negative rows and zero columns."""
    with pytest.raises(ValidationError):
        WellRecord(row=-1, column=1, data=[])
    with pytest.raises(ValidationError):
        WellRecord(row=0, column=0, data=[])


def test_well_record_requires_all_keys():
    """Every key of the condensed schema is required."""
    with pytest.raises(ValidationError):
        WellRecord(row=0, column=1)


def test_well_record_rejects_extra_keys():
    """Unknown keys should be rejected."""
    with pytest.raises(ValidationError):
        WellRecord(row=0, column=1, data=[], note="x")


# ============================================================================
# Document Tests
# ============================================================================


def test_well_document_normalizes_index():
    """WellDocument should store the canonical index."""
    document = WellDocument(type="Well", index="b02", row=1, column=2, data=[])

    assert document.index == "B2"


def test_well_document_rejects_malformed_index():
    """A malformed index should surface as a ValidationError."""
    with pytest.raises(ValidationError):
        WellDocument(type="Well", index="2B", row=1, column=2, data=[])


def test_well_document_type_literal():
    """The type tag must match the model."""
    with pytest.raises(ValidationError):
        WellDocument(type="Plate", index="A1", row=0, column=1, data=[])


def test_well_group_document():
    """WellGroupDocument should normalise member indices."""
    document = WellGroupDocument(type="WellGroup", label="G", wells=["a1", "B2"])

    assert document.wells == ["A1", "B2"]


def test_well_set_document_keys():
    """WellSetDocument should normalise well keys."""
    document = WellSetDocument.model_validate(
        {"type": "WellSet", "label": "S", "wells": {"a1": {"row": 0, "column": 1, "data": [1]}}}
    )

    assert list(document.wells) == ["A1"]


def test_plate_document_requires_positive_bounds():
    """Plate rows and columns must be > 0."""
    base = {"type": "Plate", "label": "P", "descriptor": "x", "groups": {}, "wells": {}}

    assert PlateDocument.model_validate({**base, "rows": 8, "columns": 12}).rows == 8
    with pytest.raises(ValidationError):
        PlateDocument.model_validate({**base, "rows": 0, "columns": 12})


def test_stack_document_nested_plates():
    """StackDocument should validate nested plate records."""
    document = StackDocument.model_validate(
        {
            "type": "Stack",
            "label": "S",
            "rows": 2,
            "columns": 3,
            "descriptor": "6-Well",
            "plates": {"P": {"label": "P", "groups": {"G": ["a1"]}, "wells": {}}},
        }
    )

    assert document.plates["P"].groups == {"G": ["A1"]}


def test_document_models_registry():
    """Every entity kind should have a document model."""
    assert set(DOCUMENT_MODELS) == {"Well", "WellGroup", "WellSet", "Plate", "Stack"}


# ============================================================================
# Strict Typing Tests
# ============================================================================


@pytest.mark.parametrize(
    "record",
    [
        {"row": "0", "column": 1, "data": []},
        {"row": 0, "column": 1.0, "data": []},
        {"row": True, "column": 1, "data": []},
        {"row": 0, "column": 1, "data": [True]},
        {"row": 0, "column": 1, "data": ["2.5"]},
    ],
)
def test_well_record_rejects_coercible_values(record):
    """Strings, floats and booleans should not be coerced into coordinates or readings."""
    with pytest.raises(ValidationError):
        WellRecord.model_validate(record)


def test_plate_document_rejects_string_bounds():
    """Plate bounds given as strings should be rejected."""
    with pytest.raises(ValidationError):
        PlateDocument.model_validate(
            {"type": "Plate", "label": "P", "descriptor": "x", "groups": {}, "wells": {}, "rows": "8", "columns": 12}
        )
