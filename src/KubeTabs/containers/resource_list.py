from __future__ import annotations

import logging

from rich.text import Text
from textual.widgets import DataTable

from KubeTabs.core.table import RenderedTable

log = logging.getLogger(__name__)


class ResourceList(DataTable):
    """A data table showing the server-formatted rows of the active tab."""

    # Keys belong to the session, never to the table.
    can_focus = False

    DEFAULT_CSS = """
    ResourceList {
        height: 1fr;
        width: 100%;
        background: transparent;
        color: $text;
        border: round $primary;
    }
    ResourceList > .datatable--header {
        color: $primary;
        text-style: bold;
    }
    """

    def __init__(self) -> None:
        super().__init__(show_cursor=False, zebra_stripes=True)
        self._shown: RenderedTable | None = None

    @property
    def shown(self) -> RenderedTable | None:
        return self._shown

    def show(self, rendered: RenderedTable | None) -> None:
        """Replaces the table contents; an identical table is left untouched."""
        if rendered == self._shown:
            return
        self._shown = rendered
        self.clear(columns=True)
        if rendered is None:
            return

        with self.app.batch_update():
            for index, (label, width) in enumerate(
                zip(rendered.header, rendered.widths)
            ):
                self.add_column(Text(label), width=width, key=str(index))
            self.add_rows([[Text(cell) for cell in row] for row in rendered.rows])
        log.debug(
            "Showing %d rows in %d columns", len(rendered.rows), len(rendered.widths)
        )
