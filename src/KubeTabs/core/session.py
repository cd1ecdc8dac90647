"""Tabs and the modal editing state machine driven by key presses."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

NEW_TAB_KEYS = frozenset({"ctrl+t"})
NEXT_TAB_KEYS = frozenset({"tab", "right"})
PREV_TAB_KEYS = frozenset({"shift+tab", "left"})
QUIT_KEYS = frozenset({"q", "ctrl+c"})
BACKSPACE_KEYS = frozenset({"backspace"})
LEAVE_EDITING_KEYS = frozenset({"enter", "escape"})


class EditingMode(enum.Enum):
    NONE = "none"
    NAMESPACE = "namespace"
    RESOURCE = "resource"
    FILTER = "filter"


EDITING_MODE_KEYS: dict[str, EditingMode] = {
    "n": EditingMode.NAMESPACE,
    "r": EditingMode.RESOURCE,
    "f": EditingMode.FILTER,
}


@dataclass(frozen=True)
class KeyPress:
    """A single key event.

    ``key`` uses textual's key names ("a", "ctrl+t", "backspace", ...);
    ``character`` is set only for printable keys.
    """

    key: str
    character: str | None = None

    @property
    def is_printable(self) -> bool:
        return (
            self.character is not None
            and len(self.character) == 1
            and self.character.isprintable()
        )


@dataclass
class Tab:
    """One independent browsing session."""

    namespace: str | None = "default"
    resource: str = "pods"
    filter: str = ""
    generation: int = field(default=0, compare=False)

    def _bump(self) -> None:
        self.generation += 1

    def append(self, mode: EditingMode, character: str) -> None:
        if mode is EditingMode.NAMESPACE:
            if self.namespace is None:
                return
            self.namespace += character
            self._bump()
        elif mode is EditingMode.RESOURCE:
            self.resource += character
            self._bump()
        elif mode is EditingMode.FILTER:
            self.filter += character

    def backspace(self, mode: EditingMode) -> None:
        if mode is EditingMode.NAMESPACE:
            if not self.namespace:
                return
            self.namespace = self.namespace[:-1]
            self._bump()
        elif mode is EditingMode.RESOURCE:
            if not self.resource:
                return
            self.resource = self.resource[:-1]
            self._bump()
        elif mode is EditingMode.FILTER:
            self.filter = self.filter[:-1]


class SessionState:
    """The ordered tabs, the active tab and the current editing mode."""

    def __init__(self, default_namespace: str | None = "default") -> None:
        self._default_namespace = default_namespace
        self.tabs: list[Tab] = [self.new_tab()]
        self._active_index = 0
        self.editing_mode = EditingMode.NONE
        self.finished = False

    def new_tab(self) -> Tab:
        return Tab(namespace=self._default_namespace)

    @property
    def active_index(self) -> int:
        return self._active_index

    @active_index.setter
    def active_index(self, index: int) -> None:
        self._active_index = max(0, min(index, len(self.tabs) - 1))

    @property
    def active_tab(self) -> Tab:
        return self.tabs[self._active_index]

    def handle_key(self, key: KeyPress) -> None:
        if self.finished:
            return
        if self.editing_mode is EditingMode.NONE:
            self._handle_navigation(key)
        else:
            self._handle_editing(key)

    def _handle_navigation(self, key: KeyPress) -> None:
        if key.key in NEW_TAB_KEYS:
            self.tabs.append(self.new_tab())
            log.debug("Opened tab %d", len(self.tabs))
        elif key.key in NEXT_TAB_KEYS:
            self.active_index = self._active_index + 1
        elif key.key in PREV_TAB_KEYS:
            self.active_index = self._active_index - 1
        elif key.key in QUIT_KEYS:
            self.finished = True
        elif key.key in EDITING_MODE_KEYS:
            self.editing_mode = EDITING_MODE_KEYS[key.key]

    def _handle_editing(self, key: KeyPress) -> None:
        tab = self.active_tab
        if key.key in LEAVE_EDITING_KEYS:
            self.editing_mode = EditingMode.NONE
        elif key.key in BACKSPACE_KEYS:
            tab.backspace(self.editing_mode)
        elif key.is_printable:
            assert key.character is not None
            tab.append(self.editing_mode, key.character)
