from __future__ import annotations

import logging

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Label, Static

from KubeTabs.core.refresh_loop import Frame
from KubeTabs.core.session import EditingMode

log = logging.getLogger(__name__)


class FieldBox(Static):
    """A bordered single-line box showing one field of the active tab."""

    DEFAULT_CSS = """
    FieldBox {
        width: 1fr;
        height: 3;
        border: round $primary;
        padding: 0 1;

        &.-editing {
            border: round $accent;
        }

        &.-invalid {
            border: round $error;
            color: $error;
        }
    }
    """

    def __init__(self, title: str, mode: EditingMode, id: str) -> None:
        super().__init__(id=id)
        self.border_title = title
        self.mode = mode

    def set_value(self, value: str | None, placeholder: str = "") -> None:
        if value is None:
            self.update(Text(placeholder, style="dim italic"))
        else:
            self.update(Text(value))


class TabHeader(Vertical):
    """The tab strip and the Namespace / Resource / Filter boxes."""

    DEFAULT_CSS = """
    TabHeader {
        height: auto;
        dock: top;
    }

    TabHeader #tab-strip {
        width: 100%;
        padding: 0 1;
    }

    TabHeader Horizontal {
        height: 3;
    }
    """

    def compose(self) -> ComposeResult:
        yield Label(id="tab-strip")
        with Horizontal():
            yield FieldBox("Namespace", EditingMode.NAMESPACE, id="namespace-field")
            yield FieldBox("Resource", EditingMode.RESOURCE, id="resource-field")
            yield FieldBox("Filter", EditingMode.FILTER, id="filter-field")

    @staticmethod
    def _tab_strip(frame: Frame) -> Text:
        strip = Text()
        for index, title in enumerate(frame.tab_titles):
            style = "reverse bold" if index == frame.active_index else "dim"
            strip.append(f" {title} ", style=style)
            strip.append(" ")
        return strip

    def update_frame(self, frame: Frame) -> None:
        self.query_one("#tab-strip", Label).update(self._tab_strip(frame))

        namespace_field = self.query_one("#namespace-field", FieldBox)
        resource_field = self.query_one("#resource-field", FieldBox)
        filter_field = self.query_one("#filter-field", FieldBox)

        namespace_field.set_value(frame.namespace, placeholder="all namespaces")
        resource_field.set_value(frame.resource)
        filter_field.set_value(frame.filter)

        resource_field.set_class(not frame.resource_valid, "-invalid")
        resource_field.border_subtitle = (
            f"{frame.descriptor.kind} {frame.descriptor.api_version}"
            if frame.descriptor
            else None
        )

        for field in (namespace_field, resource_field, filter_field):
            field.set_class(field.mode is frame.editing_mode, "-editing")
