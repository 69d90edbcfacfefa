"""Tests for per-node handler rehydration."""

from mindmap.editor.handlers import HANDLER_NAMES, HandlerRehydrator, NodeHandlers


class RecordingActions:
    """NodeActions that records every call."""

    def __init__(self):
        self.calls = []

    def delete_node(self, node_id):
        self.calls.append(("delete_node", node_id))
        return True

    def open_editor(self, node_id):
        self.calls.append(("open_editor", node_id))
        return True

    def update_field(self, node_id, field_id, value):
        self.calls.append(("update_field", node_id, field_id, value))
        return True

    def update_title(self, node_id, title):
        self.calls.append(("update_title", node_id, title))
        return True

    def handle_click(self, handle_id, node_id):
        self.calls.append(("handle_click", handle_id, node_id))


class TestRehydrate:
    """Test binding and rebinding of callback sets."""

    def test_binds_every_node(self):
        """Each node gets a complete set bound to its own id."""
        rehydrator = HandlerRehydrator(RecordingActions())
        assert rehydrator.rehydrate(["a", "b"]) == ["a", "b"]
        for node_id in ("a", "b"):
            handlers = rehydrator.get(node_id)
            assert handlers.is_complete_for(node_id)
            assert handlers.missing() == []

    def test_idempotent(self):
        """A second pass changes nothing."""
        rehydrator = HandlerRehydrator(RecordingActions())
        rehydrator.rehydrate(["a", "b"])
        before = {n: rehydrator.get(n) for n in ("a", "b")}
        assert rehydrator.rehydrate(["a", "b"]) == []
        assert all(rehydrator.get(n) is before[n] for n in ("a", "b"))
        assert not rehydrator.needs_hydration(["a", "b"])

    def test_only_new_nodes_bound(self):
        """Adding a node leaves existing sets untouched."""
        rehydrator = HandlerRehydrator(RecordingActions())
        rehydrator.rehydrate(["a"])
        kept = rehydrator.get("a")
        assert rehydrator.rehydrate(["a", "c"]) == ["c"]
        assert rehydrator.get("a") is kept

    def test_incomplete_set_rebound(self):
        """A set missing callbacks is replaced."""
        rehydrator = HandlerRehydrator(RecordingActions())
        rehydrator.attach("a", NodeHandlers(node_id="a", on_delete=lambda: None))
        assert rehydrator.needs_hydration(["a"])
        assert rehydrator.rehydrate(["a"]) == ["a"]
        assert rehydrator.get("a").is_complete_for("a")

    def test_set_bound_to_other_id_rebound(self):
        """A set copied from another node is rebound to its new owner."""
        actions = RecordingActions()
        rehydrator = HandlerRehydrator(actions)
        rehydrator.rehydrate(["a"])
        rehydrator.attach("copy", rehydrator.get("a"))
        assert rehydrator.rehydrate(["a", "copy"]) == ["copy"]
        rehydrator.get("copy").on_delete()
        assert actions.calls == [("delete_node", "copy")]

    def test_stale_ids_dropped(self):
        """Sets for removed nodes are pruned."""
        rehydrator = HandlerRehydrator(RecordingActions())
        rehydrator.rehydrate(["a", "b"])
        rehydrator.rehydrate(["b"])
        assert rehydrator.get("a") is None


class TestDispatch:
    """Callbacks route to the actions with the node's id."""

    def test_all_callbacks(self):
        """Every callback calls into the dispatch layer."""
        actions = RecordingActions()
        rehydrator = HandlerRehydrator(actions)
        rehydrator.rehydrate(["n1"])
        handlers = rehydrator.get("n1")

        handlers.on_delete()
        handlers.on_edit()
        handlers.on_update("f1", "hello")
        handlers.on_title_change("Title")
        handlers.on_handle_click("r-source", "n1")

        assert actions.calls == [
            ("delete_node", "n1"),
            ("open_editor", "n1"),
            ("update_field", "n1", "f1", "hello"),
            ("update_title", "n1", "Title"),
            ("handle_click", "r-source", "n1"),
        ]

    def test_missing_names(self):
        """missing() lists absent callbacks."""
        handlers = NodeHandlers(node_id="x", on_edit=lambda: None)
        assert set(handlers.missing()) == set(HANDLER_NAMES) - {"on_edit"}
