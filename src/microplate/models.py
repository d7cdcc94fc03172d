"""
Document models for Microplate using Pydantic.

This module defines the condensed serialized form of every entity kind. The
models only describe and validate document structure; ``io.py`` converts
between documents and live entities. Coordinates, bounds and readings are
strict: strings and booleans are rejected instead of being coerced.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

from microplate.indexing import normalize_index


# ============================================================================
# Well Records
# ============================================================================


class WellRecord(BaseModel):
    """
    A well inside a WellSet, Plate or Stack document, keyed by its index.

    The index itself is the enclosing mapping key, so it is not repeated here.
    """

    model_config = ConfigDict(extra="forbid")

    row: StrictInt = Field(..., ge=0, description="Zero-based row")
    column: StrictInt = Field(..., ge=1, description="One-based column")
    data: list[StrictInt | StrictFloat] = Field(..., description="Ordered well readings")


def _normalize_keys(wells: dict[str, WellRecord]) -> dict[str, WellRecord]:
    return {normalize_index(index): record for index, record in wells.items()}


# ============================================================================
# Documents
# ============================================================================


class WellDocument(BaseModel):
    """A single well."""

    type: Literal["Well"]
    index: str = Field(..., description="Well index, e.g. B12")
    row: StrictInt = Field(..., ge=0)
    column: StrictInt = Field(..., ge=1)
    data: list[StrictInt | StrictFloat]

    @field_validator("index")
    @classmethod
    def canonical_index(cls, v: str) -> str:
        """Normalise the index to upper-case canonical form."""
        return normalize_index(v)

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [{"type": "Well", "index": "B2", "row": 1, "column": 2, "data": [1.5, 2.0]}]
        },
    )


class WellGroupDocument(BaseModel):
    """A labelled set of well indices."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["WellGroup"]
    label: str
    wells: list[str]

    @field_validator("wells")
    @classmethod
    def canonical_indices(cls, v: list[str]) -> list[str]:
        return [normalize_index(index) for index in v]


class WellSetDocument(BaseModel):
    """A labelled set of wells."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["WellSet"]
    label: str
    wells: dict[str, WellRecord]

    @field_validator("wells")
    @classmethod
    def canonical_wells(cls, v: dict[str, WellRecord]) -> dict[str, WellRecord]:
        return _normalize_keys(v)


class PlateRecord(BaseModel):
    """A plate nested inside a Stack document (bounds come from the stack)."""

    model_config = ConfigDict(extra="forbid")

    label: str
    groups: dict[str, list[str]]
    wells: dict[str, WellRecord]

    @field_validator("groups")
    @classmethod
    def canonical_groups(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        return {label: [normalize_index(index) for index in indices] for label, indices in v.items()}

    @field_validator("wells")
    @classmethod
    def canonical_wells(cls, v: dict[str, WellRecord]) -> dict[str, WellRecord]:
        return _normalize_keys(v)


class PlateDocument(PlateRecord):
    """A plate with its bounds and descriptor."""

    type: Literal["Plate"]
    rows: StrictInt = Field(..., gt=0)
    columns: StrictInt = Field(..., gt=0)
    descriptor: str


class StackDocument(BaseModel):
    """A stack of same-sized plates keyed by plate label."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["Stack"]
    label: str
    rows: StrictInt = Field(..., gt=0)
    columns: StrictInt = Field(..., gt=0)
    descriptor: str
    plates: dict[str, PlateRecord]


# Document type tag -> model
DOCUMENT_MODELS: dict[str, type[BaseModel]] = {
    "Well": WellDocument,
    "WellGroup": WellGroupDocument,
    "WellSet": WellSetDocument,
    "Plate": PlateDocument,
    "Stack": StackDocument,
}
