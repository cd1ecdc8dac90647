"""Decoding and fixed-width rendering of server-side Table responses."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Literal, Mapping, Sequence

from rich.cells import cell_len, set_cell_size

from KubeTabs.core.exceptions import DecodeError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellValue:
    """A single table cell: either a string or a number."""

    kind: Literal["string", "number"]
    value: str | int | float

    @classmethod
    def string(cls, value: str) -> CellValue:
        return cls("string", value)

    @classmethod
    def number(cls, value: int | float) -> CellValue:
        return cls("number", value)

    @classmethod
    def from_wire(cls, raw: Any) -> CellValue:
        # An unset printer column arrives as null.
        if raw is None:
            return cls.string("")
        # bool is an int subclass but not a JSON number.
        if isinstance(raw, bool):
            return cls.string("true" if raw else "false")
        if isinstance(raw, str):
            return cls.string(raw)
        if isinstance(raw, (int, float)):
            return cls.number(raw)
        raise DecodeError(f"Unsupported cell value: {raw!r}")

    def display(self) -> str:
        if self.kind == "string":
            return str(self.value)
        if isinstance(self.value, float) and self.value.is_integer():
            if abs(self.value) < 1e16:
                return str(int(self.value))
        return repr(self.value)


@dataclass(frozen=True)
class ColumnDefinition:
    name: str
    type: str
    description: str
    format: str
    priority: int


@dataclass(frozen=True)
class TableRow:
    cells: tuple[CellValue, ...]

    def display_cells(self) -> list[str]:
        return [cell.display() for cell in self.cells]


@dataclass(frozen=True)
class ResourceTable:
    column_definitions: tuple[ColumnDefinition, ...]
    rows: tuple[TableRow, ...]

    @property
    def headers(self) -> list[str]:
        return [column.name for column in self.column_definitions]


@dataclass(frozen=True)
class RenderedTable:
    """A header line and rows of cells, each padded to its column width."""

    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    widths: tuple[int, ...]

    def lines(self, separator: str = "  ") -> list[str]:
        return [separator.join(self.header)] + [separator.join(row) for row in self.rows]


def _decode_column(raw: Mapping[str, Any]) -> ColumnDefinition:
    priority = raw["priority"]
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise DecodeError(f"Column priority must be an integer, got {priority!r}")
    return ColumnDefinition(
        name=str(raw["name"]),
        type=str(raw["type"]),
        description=str(raw["description"]),
        format=str(raw["format"]),
        priority=priority,
    )


def decode_table(raw: Mapping[str, Any]) -> ResourceTable:
    """Parses a meta.k8s.io/v1 Table payload.

    Row and column counts are not required to agree; see
    :func:`render_table` for how mismatched rows are displayed.
    """
    if not isinstance(raw, Mapping):
        raise DecodeError(f"Table payload must be an object, got {type(raw).__name__}")
    try:
        columns = tuple(_decode_column(column) for column in raw["columnDefinitions"])
        rows = tuple(
            TableRow(cells=tuple(CellValue.from_wire(cell) for cell in row["cells"]))
            for row in raw["rows"] or ()
        )
    except KeyError as e:
        raise DecodeError(f"Table payload is missing field {e}") from e
    except TypeError as e:
        raise DecodeError(f"Table payload has an unexpected shape: {e}") from e
    return ResourceTable(column_definitions=columns, rows=rows)


def compute_column_widths(table: ResourceTable) -> list[int]:
    """Returns, per column, the widest of its header and its cells.

    Widths are terminal cell widths. A row with fewer cells than there are
    columns only contributes the cells it has.
    """
    widths = [cell_len(header) for header in table.headers]
    for row in table.rows:
        for index, text in enumerate(row.display_cells()[: len(widths)]):
            widths[index] = max(widths[index], cell_len(text))
    return widths


def render_table(table: ResourceTable, widths: Sequence[int]) -> RenderedTable:
    """Pads every header and cell to its column width.

    Missing cells render as blanks; cells beyond the last column are dropped.
    """
    column_count = len(widths)
    header = tuple(
        set_cell_size(name, width) for name, width in zip(table.headers, widths)
    )
    rows = []
    for row in table.rows:
        texts = row.display_cells()[:column_count]
        if len(row.cells) != column_count:
            log.debug(
                "Row has %d cells for %d columns", len(row.cells), column_count
            )
        texts.extend([""] * (column_count - len(texts)))
        rows.append(
            tuple(set_cell_size(text, width) for text, width in zip(texts, widths))
        )
    return RenderedTable(header=header, rows=tuple(rows), widths=tuple(widths))


def select_columns(table: ResourceTable, wide: bool = False) -> ResourceTable:
    """Drops priority > 0 columns unless ``wide`` is set, like `kubectl get`."""
    if wide:
        return table
    keep = [
        index
        for index, column in enumerate(table.column_definitions)
        if column.priority == 0
    ]
    if len(keep) == len(table.column_definitions):
        return table
    return ResourceTable(
        column_definitions=tuple(table.column_definitions[i] for i in keep),
        rows=tuple(
            TableRow(cells=tuple(row.cells[i] for i in keep if i < len(row.cells)))
            for row in table.rows
        ),
    )


def filter_rows(table: ResourceTable, text: str) -> ResourceTable:
    """Keeps rows where any cell contains ``text``, ignoring case."""
    needle = text.strip().lower()
    if not needle:
        return table
    return replace(
        table,
        rows=tuple(
            row
            for row in table.rows
            if any(needle in cell.lower() for cell in row.display_cells())
        ),
    )
