"""
Unit tests for I/O operations.

Tests JSON and XML documents for every entity kind, malformed input,
DataFrame conversion, spreadsheet loading and Excel export.
"""

import json
from io import BytesIO

import pandas as pd
import pytest

from microplate.descriptive import Mean
from microplate.dispatch import StatisticsDispatcher
from microplate.exceptions import BoundsError, FormatError, InvalidTypeError
from microplate.io import (
    dataframe_to_well_set,
    descriptor,
    export_to_excel,
    from_json,
    from_xml,
    load_spreadsheet,
    results_to_dataframe,
    to_json,
    to_xml,
    wells_to_dataframe,
)
from microplate.plate import Plate, PlateType
from microplate.stack import Stack
from microplate.well import Well
from microplate.wellgroup import WellGroup
from microplate.wellset import WellSet


@pytest.fixture
def plate():
    plate = Plate(
        PlateType.NINETY_SIX,
        [Well("A1", [1.0, 2.0]), Well("B2", [3.5]), Well("H12", [])],
        "Assay",
    )
    plate.add_groups([WellGroup(["A1", "B2"], "Controls"), WellGroup(["H12"], "Blank")])
    return plate


@pytest.fixture
def stack(plate):
    other = Plate(PlateType.NINETY_SIX, [Well("C3", [7.0])], "Second")
    return Stack([plate, other], "Run")


def assert_same_plate(actual: Plate, expected: Plate):
    assert actual.label == expected.label
    assert (actual.rows, actual.columns) == (expected.rows, expected.columns)
    assert [(well.index, well.data) for well in actual] == [(well.index, well.data) for well in expected]
    assert actual.groups_to_dict() == expected.groups_to_dict()


# ============================================================================
# JSON Tests
# ============================================================================


def test_well_json():
    """A well should serialize to the condensed schema and parse back."""
    well = Well("B12", [1.5, 2])
    data = json.loads(to_json(well))

    assert data == {"type": "Well", "index": "B12", "row": 1, "column": 12, "data": [1.5, 2]}
    assert from_json(to_json(well)) == well


def test_well_group_json():
    """A well group should keep its label and members."""
    group = WellGroup(["C1", "A2"], "Controls")
    parsed = from_json(to_json(group))

    assert isinstance(parsed, WellGroup)
    assert parsed == group


def test_well_set_json():
    """A well set should keep its label and wells."""
    well_set = WellSet([Well("A1", [1.0]), Well("B1", [])], "S")
    parsed = from_json(to_json(well_set, indent=2))

    assert parsed == well_set


def test_plate_json(plate):
    """A plate should keep bounds, wells and groups."""
    data = json.loads(to_json(plate))
    parsed = from_json(to_json(plate))

    assert data["descriptor"] == "96-Well"
    assert data["groups"] == {"Blank": ["H12"], "Controls": ["A1", "B2"]}
    assert_same_plate(parsed, plate)


def test_stack_json(stack):
    """A stack should keep its plates."""
    parsed = from_json(to_json(stack))

    assert isinstance(parsed, Stack)
    assert (parsed.label, parsed.rows, parsed.columns) == ("Run", 8, 12)
    for actual, expected in zip(parsed.to_list(), stack.to_list()):
        assert_same_plate(actual, expected)


def test_from_json_unknown_type():
    """Unknown or missing type tags should raise FormatError."""
    with pytest.raises(FormatError, match="Unknown or missing document type"):
        from_json('{"type": "Beaker"}')
    with pytest.raises(FormatError, match="Unknown or missing document type"):
        from_json('{"label": "x"}')
    with pytest.raises(FormatError):
        from_json("[1, 2]")


def test_from_json_malformed():
    """Invalid JSON and schema violations should raise FormatError."""
    with pytest.raises(FormatError, match="Invalid JSON"):
        from_json("{not json")
    with pytest.raises(FormatError, match="Invalid Well document"):
        from_json('{"type": "Well", "index": "A1", "row": 0, "column": 1}')
    with pytest.raises(FormatError):
        from_json('{"type": "Well", "index": "A2", "row": 0, "column": 1, "data": []}')


def test_from_json_rejects_coercible_values():
    """Wrongly typed values should raise FormatError instead of being converted."""
    text = json.dumps({"type": "Well", "index": "A1", "row": "0", "column": 1.0, "data": [True, "2.5"]})

    with pytest.raises(FormatError, match="Invalid Well document"):
        from_json(text)


def test_from_json_out_of_bounds_well():
    """A plate document with an off-plate well should raise BoundsError."""
    text = json.dumps(
        {
            "type": "Plate",
            "label": "P",
            "rows": 2,
            "columns": 3,
            "descriptor": "6-Well",
            "groups": {},
            "wells": {"C1": {"row": 2, "column": 1, "data": []}},
        }
    )

    with pytest.raises(BoundsError):
        from_json(text)


def test_to_json_rejects_other_objects():
    """Only entities can be serialized."""
    with pytest.raises(InvalidTypeError):
        to_json({"type": "Well"})


def test_descriptor_reexported():
    """io.descriptor should describe standard and custom plates."""
    assert descriptor(0, 2, 3) == "6-Well"
    assert descriptor(-1, 3, 3) == "Custom Plate 3x3"


# ============================================================================
# XML Tests
# ============================================================================


def test_well_xml():
    """A well should use the WELL/INDEX/ROW/COLUMN/DATA/VALUE tags."""
    text = to_xml(Well("A2", [1.5]))

    assert text.startswith("<WELL>")
    assert "<INDEX>A2</INDEX>" in text
    assert "<VALUE>1.5</VALUE>" in text
    assert from_xml(text) == Well("A2", [1.5])


def test_well_group_and_set_xml():
    """Groups and sets should parse back from their XML form."""
    group = WellGroup(["B1", "A1"], "G")
    well_set = WellSet([Well("A1", [1.0, 2.0])], "S")

    assert from_xml(to_xml(group)) == group
    assert from_xml(to_xml(well_set)) == well_set


def test_plate_xml(plate):
    """A plate should round-trip through XML."""
    text = to_xml(plate)

    assert "<DESCRIPTOR>96-Well</DESCRIPTOR>" in text
    assert "<WELLGROUPS>" in text
    assert_same_plate(from_xml(text), plate)


def test_stack_xml(stack):
    """A stack should round-trip through XML."""
    parsed = from_xml(to_xml(stack))

    assert parsed.label == "Run"
    assert [p.label for p in parsed.to_list()] == ["Assay", "Second"]
    for actual, expected in zip(parsed.to_list(), stack.to_list()):
        assert_same_plate(actual, expected)


def test_xml_preserves_label_whitespace():
    """Leading and trailing spaces in labels should survive XML."""
    group = WellGroup(["A1"], "  padded ")
    well_set = WellSet([Well("A1", [1.0])], " S")

    assert from_xml(to_xml(group)).label == "  padded "
    assert from_xml(to_xml(well_set)).label == " S"


def test_from_xml_errors():
    """Malformed XML, unknown roots and missing sections should raise FormatError."""
    with pytest.raises(FormatError, match="Invalid XML"):
        from_xml("<WELL>")
    with pytest.raises(FormatError, match="Unknown or missing document type"):
        from_xml("<BEAKER/>")
    with pytest.raises(FormatError, match="Expected <DATA> section is missing"):
        from_xml("<WELL><INDEX>A1</INDEX><ROW>0</ROW><COLUMN>1</COLUMN></WELL>")
    with pytest.raises(FormatError, match="Malformed <ROW>"):
        from_xml("<WELL><INDEX>A1</INDEX><ROW>x</ROW><COLUMN>1</COLUMN><DATA/></WELL>")


# ============================================================================
# DataFrame Tests
# ============================================================================


def test_wells_to_dataframe_plate(plate):
    """A plate should flatten to one row per value."""
    df = wells_to_dataframe(plate)

    assert list(df.columns) == ["stack", "plate", "index", "row", "column", "position", "value"]
    assert len(df) == 3
    assert df["index"].tolist() == ["A1", "A1", "B2"]
    assert df["position"].tolist() == [0, 1, 0]
    assert df["plate"].unique().tolist() == ["Assay"]


def test_wells_to_dataframe_stack(stack):
    """Stack rows should carry stack and plate labels."""
    df = wells_to_dataframe(stack)

    assert set(df["stack"]) == {"Run"}
    assert df[df["plate"] == "Second"]["value"].tolist() == [7.0]


def test_wells_to_dataframe_rejects_groups():
    """Groups hold no data and cannot be tabulated."""
    with pytest.raises(InvalidTypeError):
        wells_to_dataframe(WellGroup(["A1"]))


def test_results_to_dataframe_nested(stack):
    """Stack results should flatten to one row per well."""
    df = results_to_dataframe(StatisticsDispatcher(Mean()).stacks(stack))

    assert list(df.columns) == ["stack", "plate", "well", "result"]
    assert len(df) == 4
    row = df[(df["plate"] == "Assay") & (df["well"] == "A1")].iloc[0]
    assert row["result"] == pytest.approx(1.5)


def test_results_to_dataframe_aggregated():
    """Aggregated well results should list the contributing wells."""
    results = StatisticsDispatcher(Mean()).wells_aggregated([Well("A1", [1]), Well("B2", [2])])
    df = results_to_dataframe(results)

    assert df.to_dict(orient="records") == [{"well": "A1,B2", "result": 1.5}]


def test_results_to_dataframe_rejects_bad_records():
    """Records without a result should raise FormatError."""
    with pytest.raises(FormatError):
        results_to_dataframe([{"well": "A1"}])


# ============================================================================
# Spreadsheet Tests
# ============================================================================


def test_load_spreadsheet_csv(tmp_path):
    """A CSV well table should load with normalised column names."""
    path = tmp_path / "wells.csv"
    path.write_text("Index,Position,Value\nA1,1,2.0\nA1,0,1.0\nB2,0,5.0\n")

    df = load_spreadsheet(path)
    well_set = dataframe_to_well_set(df, "Loaded")

    assert well_set.label == "Loaded"
    assert well_set.get("A1").data == [1.0, 2.0]
    assert well_set.get("B2").data == [5.0]


def test_load_spreadsheet_missing_columns(tmp_path):
    """Tables without index/value columns should raise FormatError."""
    path = tmp_path / "bad.csv"
    path.write_text("well,reading\nA1,1.0\n")

    with pytest.raises(FormatError, match="Missing required columns"):
        load_spreadsheet(path)


def test_load_spreadsheet_file_not_found():
    """load_spreadsheet should raise FileNotFoundError for a missing file."""
    with pytest.raises(FileNotFoundError):
        load_spreadsheet("nonexistent_wells.csv")


def test_export_to_excel_bytes(plate):
    """export_to_excel should return a workbook with Wells, Results and Metadata sheets."""
    results = StatisticsDispatcher(Mean()).plates(plate)
    content = export_to_excel(plate, results)

    assert isinstance(content, bytes)
    sheets = pd.read_excel(BytesIO(content), sheet_name=None)
    assert set(sheets) == {"Wells", "Results", "Metadata"}
    assert len(sheets["Wells"]) == 3
    metadata = dict(zip(sheets["Metadata"]["Parameter"], sheets["Metadata"]["Value"]))
    assert metadata["Descriptor"] == "96-Well"


def test_export_to_excel_file_round_trip(tmp_path, plate):
    """An exported Wells sheet should load back into the same wells."""
    path = tmp_path / "plate.xlsx"

    assert export_to_excel(plate, output_path=path) is None

    well_set = dataframe_to_well_set(load_spreadsheet(path))
    assert well_set.get("A1").data == [1.0, 2.0]
    assert well_set.get("B2").data == [3.5]
