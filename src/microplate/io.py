"""
Input/Output operations for Microplate.

This module handles:
- Condensed JSON and XML documents for every entity kind
- Long-format pandas tables of well data and statistics results
- Reading well tables from CSV/Excel and exporting them to Excel

Every parser funnels through the Pydantic document models, so JSON and XML
input is validated the same way.
"""

import json
import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd
from pydantic import ValidationError

from microplate import __version__
from microplate.config import (
    ERROR_MISSING_TAG,
    ERROR_UNKNOWN_DOCUMENT,
    RESULT_LEVELS,
    RESULT_TAG,
    WELL_TAG,
    WELLS_TAG,
)
from microplate.exceptions import FormatError, InvalidTypeError
from microplate.models import (
    DOCUMENT_MODELS,
    PlateDocument,
    PlateRecord,
    StackDocument,
    WellDocument,
    WellGroupDocument,
    WellRecord,
    WellSetDocument,
)
from microplate.plate import Plate, descriptor
from microplate.stack import Stack
from microplate.validation import is_sequence
from microplate.well import Well
from microplate.wellgroup import WellGroup
from microplate.wellset import WellSet

logger = logging.getLogger(__name__)

__all__ = [
    "descriptor",
    "to_json",
    "from_json",
    "to_xml",
    "from_xml",
    "wells_to_dataframe",
    "results_to_dataframe",
    "load_spreadsheet",
    "dataframe_to_well_set",
    "export_to_excel",
]

ENTITY_TYPES = (Well, WellGroup, WellSet, Plate, Stack)


# ============================================================================
# Documents -> Entities
# ============================================================================


def _check_entity(entity: Any) -> None:
    if not isinstance(entity, ENTITY_TYPES):
        raise InvalidTypeError(
            f"Expected a Well, WellGroup, WellSet, Plate or Stack, got {type(entity).__name__}"
        )


def _wells_from_records(records: dict[str, WellRecord]) -> list[Well]:
    wells = []
    for index, record in records.items():
        well = Well(record.row, record.column, record.data)
        if well.index != index:
            raise FormatError(f"Well key {index!r} does not match its coordinates {well.index!r}")
        wells.append(well)
    return wells


def _plate_from_record(record: PlateRecord, rows: int, columns: int) -> Plate:
    plate = Plate(rows, columns, _wells_from_records(record.wells), record.label)
    plate.add_groups([WellGroup(indices, label) for label, indices in record.groups.items()])
    return plate


def from_document(data: Any) -> Well | WellGroup | WellSet | Plate | Stack:
    """
    Build an entity from a parsed condensed document.

    Args:
        data: Dictionary with a ``type`` key naming the entity kind

    Returns:
        The reconstructed entity

    Raises:
        FormatError: If the type is unknown/missing or the document is malformed
    """
    if not isinstance(data, dict):
        raise FormatError(ERROR_UNKNOWN_DOCUMENT.format(value=type(data).__name__))

    type_tag = data.get("type")
    model = DOCUMENT_MODELS.get(type_tag) if isinstance(type_tag, str) else None
    if model is None:
        raise FormatError(ERROR_UNKNOWN_DOCUMENT.format(value=data.get("type")))

    try:
        document = model.model_validate(data)
    except ValidationError as e:
        raise FormatError(f"Invalid {data['type']} document: {e}") from e

    if isinstance(document, WellDocument):
        well = Well(document.row, document.column, document.data)
        if well.index != document.index:
            raise FormatError(f"Well index {document.index!r} does not match its coordinates {well.index!r}")
        return well
    if isinstance(document, WellGroupDocument):
        return WellGroup(document.wells, document.label)
    if isinstance(document, WellSetDocument):
        return WellSet(_wells_from_records(document.wells), document.label)
    if isinstance(document, PlateDocument):
        return _plate_from_record(document, document.rows, document.columns)

    stack = Stack(document.rows, document.columns, document.label)
    stack.add([_plate_from_record(record, document.rows, document.columns) for record in document.plates.values()])
    return stack


# ============================================================================
# JSON
# ============================================================================


def to_json(entity: Any, indent: int | None = None) -> str:
    """
    Serialize an entity to its condensed JSON document.

    Args:
        entity: Well, WellGroup, WellSet, Plate or Stack
        indent: Optional pretty-print indentation

    Returns:
        JSON text
    """
    _check_entity(entity)
    return json.dumps(entity.to_dict(), indent=indent)


def from_json(text: str) -> Well | WellGroup | WellSet | Plate | Stack:
    """
    Parse a condensed JSON document.

    Raises:
        FormatError: If the text is not JSON, the type is unknown or the document is malformed
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid JSON document: {e}") from e
    return from_document(data)


# ============================================================================
# XML
# ============================================================================


def _add_text(parent: ET.Element, tag: str, value: Any) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = str(value)
    return child


def _well_element(parent: ET.Element, well: Well) -> None:
    element = ET.SubElement(parent, "WELL")
    _add_text(element, "INDEX", well.index)
    _add_text(element, "ROW", well.row)
    _add_text(element, "COLUMN", well.column)
    data = ET.SubElement(element, "DATA")
    for value in well.data:
        _add_text(data, "VALUE", value)


def _group_element(parent: ET.Element, label: str, indices: list[str]) -> None:
    element = ET.SubElement(parent, "WELLGROUP")
    _add_text(element, "LABEL", label)
    wells = ET.SubElement(element, "WELLS")
    for index in indices:
        _add_text(wells, "INDEX", index)


def _plate_element(parent: ET.Element, plate: Plate) -> None:
    element = ET.SubElement(parent, "PLATE")
    _add_text(element, "LABEL", plate.label)
    _add_text(element, "ROWS", plate.rows)
    _add_text(element, "COLUMNS", plate.columns)
    _add_text(element, "DESCRIPTOR", plate.descriptor)
    groups = ET.SubElement(element, "WELLGROUPS")
    for label, indices in plate.groups_to_dict().items():
        _group_element(groups, label, indices)
    wells = ET.SubElement(element, "WELLS")
    for well in plate.to_list():
        _well_element(wells, well)


def to_xml(entity: Any) -> str:
    """Serialize an entity to its condensed XML document."""
    _check_entity(entity)
    root = ET.Element("ROOT")

    if isinstance(entity, Well):
        _well_element(root, entity)
    elif isinstance(entity, WellGroup):
        _group_element(root, entity.label, entity.to_list())
    elif isinstance(entity, WellSet):
        element = ET.SubElement(root, "WELLSET")
        _add_text(element, "LABEL", entity.label)
        wells = ET.SubElement(element, "WELLS")
        for well in entity.to_list():
            _well_element(wells, well)
    elif isinstance(entity, Plate):
        _plate_element(root, entity)
    else:
        element = ET.SubElement(root, "STACK")
        _add_text(element, "LABEL", entity.label)
        _add_text(element, "ROWS", entity.rows)
        _add_text(element, "COLUMNS", entity.columns)
        _add_text(element, "DESCRIPTOR", entity.descriptor)
        plates = ET.SubElement(element, "PLATES")
        for plate in entity.to_list():
            _plate_element(plates, plate)

    document = root[0]
    ET.indent(document, space="   ")
    return ET.tostring(document, encoding="unicode")


def _section(element: ET.Element, tag: str) -> ET.Element:
    child = element.find(tag)
    if child is None:
        raise FormatError(ERROR_MISSING_TAG.format(tag=tag))
    return child


def _text(element: ET.Element, tag: str) -> str:
    return (_section(element, tag).text or "").strip()


def _label(element: ET.Element) -> str:
    return _section(element, "LABEL").text or ""


def _number(element: ET.Element, tag: str, cast: type) -> Any:
    text = _text(element, tag)
    try:
        return cast(text)
    except ValueError as e:
        raise FormatError(f"Malformed <{tag}> value: {text!r}") from e


def _well_fields(element: ET.Element) -> dict:
    values = []
    for value in _section(element, "DATA").findall("VALUE"):
        try:
            values.append(float((value.text or "").strip()))
        except ValueError as e:
            raise FormatError(f"Malformed <VALUE> value: {value.text!r}") from e
    return {
        "row": _number(element, "ROW", int),
        "column": _number(element, "COLUMN", int),
        "data": values,
    }


def _wells_section(element: ET.Element) -> dict:
    return {_text(well, "INDEX"): _well_fields(well) for well in _section(element, "WELLS").findall("WELL")}


def _groups_section(element: ET.Element) -> dict:
    groups = {}
    for group in _section(element, "WELLGROUPS").findall("WELLGROUP"):
        groups[_label(group)] = [
            (index.text or "").strip() for index in _section(group, "WELLS").findall("INDEX")
        ]
    return groups


def _plate_fields(element: ET.Element) -> dict:
    return {
        "label": _label(element),
        "groups": _groups_section(element),
        "wells": _wells_section(element),
    }


def from_xml(text: str) -> Well | WellGroup | WellSet | Plate | Stack:
    """
    Parse a condensed XML document.

    Raises:
        FormatError: If the text is not XML, the root tag is unknown or a section is missing/malformed
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise FormatError(f"Invalid XML document: {e}") from e

    if root.tag == "WELL":
        data = {"type": "Well", "index": _text(root, "INDEX"), **_well_fields(root)}
    elif root.tag == "WELLGROUP":
        data = {
            "type": "WellGroup",
            "label": _label(root),
            "wells": [(index.text or "").strip() for index in _section(root, "WELLS").findall("INDEX")],
        }
    elif root.tag == "WELLSET":
        data = {"type": "WellSet", "label": _label(root), "wells": _wells_section(root)}
    elif root.tag == "PLATE":
        data = {
            "type": "Plate",
            "rows": _number(root, "ROWS", int),
            "columns": _number(root, "COLUMNS", int),
            "descriptor": _text(root, "DESCRIPTOR"),
            **_plate_fields(root),
        }
    elif root.tag == "STACK":
        data = {
            "type": "Stack",
            "label": _label(root),
            "rows": _number(root, "ROWS", int),
            "columns": _number(root, "COLUMNS", int),
            "descriptor": _text(root, "DESCRIPTOR"),
            "plates": {},
        }
        for plate in _section(root, "PLATES").findall("PLATE"):
            fields = _plate_fields(plate)
            data["plates"][fields["label"]] = fields
    else:
        raise FormatError(ERROR_UNKNOWN_DOCUMENT.format(value=root.tag))

    return from_document(data)


# ============================================================================
# DataFrames
# ============================================================================


WELL_TABLE_COLUMNS = ["stack", "plate", "index", "row", "column", "position", "value"]


def wells_to_dataframe(entity: Any) -> pd.DataFrame:
    """
    Flatten well data into a long table, one row per value.

    Args:
        entity: Well, list of wells, WellSet, Plate or Stack

    Returns:
        DataFrame with columns stack, plate, index, row, column, position, value
        (stack/plate are None where the entity has no such level)
    """
    if isinstance(entity, Stack):
        sources = [(entity.label, plate.label, plate.to_list()) for plate in entity.to_list()]
    elif isinstance(entity, Plate):
        sources = [(None, entity.label, entity.to_list())]
    elif isinstance(entity, WellSet):
        sources = [(None, None, entity.to_list())]
    elif isinstance(entity, Well):
        sources = [(None, None, [entity])]
    elif is_sequence(entity) and all(isinstance(item, Well) for item in entity):
        sources = [(None, None, list(entity))]
    else:
        raise InvalidTypeError(f"Cannot tabulate wells of {type(entity).__name__}")

    records = []
    for stack_label, plate_label, wells in sources:
        for well in wells:
            for position, value in enumerate(well.data):
                records.append(
                    {
                        "stack": stack_label,
                        "plate": plate_label,
                        "index": well.index,
                        "row": well.row,
                        "column": well.column,
                        "position": position,
                        "value": value,
                    }
                )
    return pd.DataFrame(records, columns=WELL_TABLE_COLUMNS)


def _flatten_results(records: Any, context: dict, rows: list[dict]) -> None:
    if isinstance(records, dict):
        records = [records]
    for record in records:
        if not isinstance(record, dict) or RESULT_TAG not in record:
            raise FormatError(f"Not a statistics result record: {record!r}")

        row = dict(context)
        for tag in RESULT_LEVELS:
            if tag in record:
                row[tag] = record[tag]
        if WELLS_TAG in record:
            row[WELL_TAG] = ",".join(record[WELLS_TAG])

        result = record[RESULT_TAG]
        if isinstance(result, list) and all(isinstance(item, dict) for item in result):
            _flatten_results(result, row, rows)
        else:
            row[RESULT_TAG] = result
            rows.append(row)


def results_to_dataframe(results: Any) -> pd.DataFrame:
    """
    Flatten a dispatcher result tree into one row per leaf result.

    Args:
        results: Output of any StatisticsDispatcher entry point

    Returns:
        DataFrame with one column per hierarchy level present (stack, plate,
        set, well) plus a result column

    Raises:
        FormatError: If a record has no result
    """
    rows: list[dict] = []
    _flatten_results(results, {}, rows)
    levels = [tag for tag in RESULT_LEVELS if any(tag in row for row in rows)]
    return pd.DataFrame(rows, columns=levels + [RESULT_TAG])


# ============================================================================
# Spreadsheets
# ============================================================================


def load_spreadsheet(file_path_or_bytes: str | Path | bytes | BinaryIO) -> pd.DataFrame:
    """
    Load a long-format well table from CSV or Excel.

    Args:
        file_path_or_bytes: Path to a .csv/.xlsx file, Excel bytes, or file-like object

    Returns:
        DataFrame with at least ``index`` and ``value`` columns

    Raises:
        FileNotFoundError: If file path doesn't exist
        FormatError: If the file cannot be read or required columns are missing
    """
    try:
        if isinstance(file_path_or_bytes, (str, Path)):
            file_path = Path(file_path_or_bytes)
            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")
            if file_path.suffix.lower() == ".csv":
                df = pd.read_csv(file_path)
            else:
                df = pd.read_excel(file_path)
        elif isinstance(file_path_or_bytes, bytes):
            df = pd.read_excel(BytesIO(file_path_or_bytes))
        else:
            df = pd.read_excel(file_path_or_bytes)
    except FileNotFoundError:
        raise
    except Exception as e:
        raise FormatError(f"Error reading well table: {e}") from e

    df.columns = [str(column).strip().lower() for column in df.columns]
    missing = [column for column in ("index", "value") if column not in df.columns]
    if missing:
        raise FormatError(f"Missing required columns: {missing}")
    return df


def dataframe_to_well_set(df: pd.DataFrame, label: str | None = None) -> WellSet:
    """
    Rebuild wells from a long-format table.

    Rows are grouped by ``index``; values keep their ``position`` order when
    that column is present, otherwise table order. Rows with a missing value
    are skipped.
    """
    if "position" in df.columns:
        df = df.sort_values(["index", "position"], kind="stable")

    wells = []
    for index, rows in df.groupby("index", sort=False):
        values = [float(value) for value in rows["value"] if pd.notna(value)]
        wells.append(Well(str(index), values))

    well_set = WellSet(wells)
    if label is not None:
        well_set.set_label(label)
    logger.info("Loaded %d well(s) from table with %d row(s)", well_set.size(), len(df))
    return well_set


def export_to_excel(
    entity: Any,
    results: Any = None,
    output_path: str | Path | None = None,
) -> bytes | None:
    """
    Export well data (and optionally statistics results) to an Excel workbook.

    Args:
        entity: WellSet, Plate or Stack whose wells are written to the Wells sheet
        results: Optional dispatcher output written to the Results sheet
        output_path: Optional path to save file (if None, returns bytes)

    Returns:
        Bytes of Excel file if output_path is None, otherwise None
    """
    wells_df = wells_to_dataframe(entity)

    if output_path is None:
        buffer = BytesIO()
        writer_target = buffer
    else:
        writer_target = Path(output_path)

    with pd.ExcelWriter(writer_target, engine="openpyxl") as writer:
        wells_df.to_excel(writer, sheet_name="Wells", index=False, freeze_panes=(1, 0))

        if results is not None:
            results_df = results_to_dataframe(results)
            results_df[RESULT_TAG] = results_df[RESULT_TAG].map(
                lambda value: ", ".join(str(item) for item in value) if isinstance(value, list) else value
            )
            results_df.to_excel(writer, sheet_name="Results", index=False, freeze_panes=(1, 0))

        metadata = _create_metadata_dict(entity)
        metadata_df = pd.DataFrame(list(metadata.items()), columns=["Parameter", "Value"])
        metadata_df.to_excel(writer, sheet_name="Metadata", index=False, freeze_panes=(1, 0))

        for sheet_name in writer.sheets:
            _auto_adjust_column_widths(writer.sheets[sheet_name])

    if output_path is None:
        buffer.seek(0)
        return buffer.getvalue()
    return None


def _create_metadata_dict(entity: Any) -> dict[str, str]:
    metadata = {
        "Generated At": datetime.now().isoformat(),
        "Package": "microplate",
        "Version": __version__,
        "Entity": type(entity).__name__,
    }
    label = getattr(entity, "label", None)
    if label is not None:
        metadata["Label"] = label
    if isinstance(entity, (Plate, Stack)):
        metadata["Descriptor"] = entity.descriptor
    return metadata


def _auto_adjust_column_widths(worksheet) -> None:
    """Size each openpyxl worksheet column to its longest value (capped at 50)."""
    for column in worksheet.columns:
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)
