import pytest

from KubeTabs.core.session import EditingMode, KeyPress, SessionState, Tab


def press(session, *keys):
    for key in keys:
        if len(key) == 1:
            session.handle_key(KeyPress(key, key))
        else:
            session.handle_key(KeyPress(key))


def type_text(session, text):
    for character in text:
        session.handle_key(KeyPress(character, character))


class TestKeyPress:
    def test_printable(self):
        assert KeyPress("a", "a").is_printable
        assert KeyPress("space", " ").is_printable
        assert not KeyPress("enter", "\r").is_printable
        assert not KeyPress("backspace").is_printable
        assert not KeyPress("ctrl+t", "\x14").is_printable


class TestTab:
    def test_defaults(self):
        tab = Tab()
        assert (tab.namespace, tab.resource, tab.filter) == ("default", "pods", "")

    def test_editing_namespace_or_resource_bumps_generation(self):
        tab = Tab()
        tab.append(EditingMode.RESOURCE, "x")
        tab.backspace(EditingMode.NAMESPACE)
        assert tab.generation == 2

    def test_editing_filter_keeps_generation(self):
        tab = Tab()
        tab.append(EditingMode.FILTER, "w")
        tab.backspace(EditingMode.FILTER)
        assert tab.generation == 0

    def test_backspace_on_empty_field_is_a_no_op(self):
        tab = Tab(namespace="", resource="", filter="")
        for mode in (EditingMode.NAMESPACE, EditingMode.RESOURCE, EditingMode.FILTER):
            tab.backspace(mode)
        assert tab == Tab(namespace="", resource="", filter="")
        assert tab.generation == 0


class TestSessionState:
    def test_initial_state(self):
        session = SessionState()
        assert len(session.tabs) == 1
        assert session.active_index == 0
        assert session.active_tab == Tab()
        assert session.editing_mode is EditingMode.NONE
        assert not session.finished

    def test_new_tab_appends_without_switching(self):
        session = SessionState()
        press(session, "ctrl+t")
        assert len(session.tabs) == 2
        assert session.active_index == 0

    def test_new_tab_uses_default_namespace(self):
        session = SessionState(default_namespace="kube-system")
        press(session, "ctrl+t")
        assert [tab.namespace for tab in session.tabs] == ["kube-system", "kube-system"]

    @pytest.mark.parametrize("next_key", ["tab", "right"])
    def test_next_tab(self, next_key):
        session = SessionState()
        press(session, "ctrl+t", "ctrl+t", next_key)
        assert session.active_index == 1
        press(session, next_key, next_key)
        assert session.active_index == 2

    @pytest.mark.parametrize("prev_key", ["shift+tab", "left"])
    def test_previous_tab_stops_at_first(self, prev_key):
        session = SessionState()
        press(session, "ctrl+t", "tab", prev_key, prev_key)
        assert session.active_index == 0

    def test_active_index_is_clamped(self):
        session = SessionState()
        press(session, "ctrl+t")
        session.active_index = 10
        assert session.active_index == 1
        session.active_index = -3
        assert session.active_index == 0

    @pytest.mark.parametrize(
        "key, mode",
        [
            ("n", EditingMode.NAMESPACE),
            ("r", EditingMode.RESOURCE),
            ("f", EditingMode.FILTER),
        ],
    )
    def test_mode_keys(self, key, mode):
        session = SessionState()
        press(session, key)
        assert session.editing_mode is mode
        assert session.active_tab == Tab()

    @pytest.mark.parametrize("leave_key", ["enter", "escape"])
    def test_leave_editing(self, leave_key):
        session = SessionState()
        press(session, "r", leave_key)
        assert session.editing_mode is EditingMode.NONE

    def test_edit_resource(self):
        session = SessionState()
        press(session, "r", "backspace", "backspace", "backspace", "backspace")
        type_text(session, "svc")
        press(session, "enter")
        assert session.active_tab.resource == "svc"
        assert session.editing_mode is EditingMode.NONE

    def test_edit_namespace_and_filter(self):
        session = SessionState()
        press(session, "n")
        type_text(session, "-x")
        press(session, "escape", "f")
        type_text(session, "web")
        press(session, "backspace")
        assert session.active_tab.namespace == "default-x"
        assert session.active_tab.filter == "we"

    def test_edits_only_touch_the_active_tab(self):
        session = SessionState()
        press(session, "ctrl+t", "tab", "r")
        type_text(session, "x")
        press(session, "enter", "shift+tab")
        assert session.tabs[0] == Tab()
        assert session.tabs[1].resource == "podsx"

    def test_navigation_keys_are_ignored_while_editing(self):
        session = SessionState()
        press(session, "ctrl+t", "f", "tab", "shift+tab", "ctrl+t", "ctrl+c")
        assert len(session.tabs) == 2
        assert session.active_index == 0
        assert session.active_tab.filter == ""
        assert not session.finished

    def test_mode_and_quit_keys_are_typed_while_editing(self):
        session = SessionState()
        press(session, "f")
        type_text(session, "nrfq")
        assert session.active_tab.filter == "nrfq"
        assert not session.finished

    def test_appending_to_all_namespaces_is_a_no_op(self):
        session = SessionState(default_namespace=None)
        press(session, "n")
        type_text(session, "abc")
        press(session, "backspace")
        assert session.active_tab.namespace is None
        assert session.active_tab.generation == 0

    @pytest.mark.parametrize("quit_key", ["q", "ctrl+c"])
    def test_quit(self, quit_key):
        session = SessionState()
        press(session, quit_key)
        assert session.finished

    def test_keys_after_quit_are_ignored(self):
        session = SessionState()
        press(session, "q", "ctrl+t", "r")
        assert len(session.tabs) == 1
        assert session.editing_mode is EditingMode.NONE

    def test_unbound_keys_do_nothing(self):
        session = SessionState()
        press(session, "x", "f5", "up")
        assert session.active_tab == Tab()
        assert session.editing_mode is EditingMode.NONE
