from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Static

from KubeTabs.containers.resource_list import ResourceList
from KubeTabs.containers.tab_header import TabHeader
from KubeTabs.core.refresh_loop import Frame
from KubeTabs.core.session import EditingMode, KeyPress

if TYPE_CHECKING:
    from KubeTabs.app import KubeTabs

log = logging.getLogger(__name__)

HELP_TEXT = {
    EditingMode.NONE: (
        "n namespace  r resource  f filter  ctrl+t new tab  "
        "tab/shift+tab switch tab  q quit"
    ),
    EditingMode.NAMESPACE: "editing namespace  enter/esc done",
    EditingMode.RESOURCE: "editing resource  enter/esc done",
    EditingMode.FILTER: "editing filter  enter/esc done",
}


class MainScreen(Screen[None]):
    """Main screen of the application."""

    app: KubeTabs  # type: ignore[assignment]

    DEFAULT_CSS = """
    MainScreen {
        height: 100%;
        width: 100%;
    }

    #error-banner {
        dock: bottom;
        height: auto;
        background: $error;
        color: $text;
        padding: 0 1;
        display: none;

        &.-visible {
            display: block;
        }
    }

    #help-line {
        dock: bottom;
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield TabHeader()
        yield ResourceList()
        yield Static(id="help-line")
        yield Static(id="error-banner")

    def on_key(self, event: events.Key) -> None:
        """Forward every key press to the session instead of textual bindings."""
        event.stop()
        event.prevent_default()
        character = event.character if event.is_printable else None
        self.app.key_channel.put(KeyPress(event.key, character))

    def draw(self, frame: Frame) -> None:
        self.query_one(TabHeader).update_frame(frame)
        self.query_one(ResourceList).show(frame.table)
        self.query_one("#help-line", Static).update(HELP_TEXT[frame.editing_mode])

        banner = self.query_one("#error-banner", Static)
        banner.set_class(frame.error is not None, "-visible")
        banner.update(Text(frame.error or ""))
