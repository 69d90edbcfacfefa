"""Tests for connection validation."""

import itertools

import pytest

from mindmap.editor.graph_model import GraphModel
from mindmap.editor.validator import (
    DUPLICATE_MESSAGE,
    Connection,
    ConnectionRejected,
    ConnectionValidator,
)
from mindmap.models.graph import HANDLE_IDS, Graph, Node
from mindmap.utils.identifiers import SequentialIdGenerator


def _model() -> GraphModel:
    return GraphModel(Graph(nodes=[Node(id=n) for n in ("a", "b", "c")]))


def _validator(**kwargs) -> ConnectionValidator:
    return ConnectionValidator(id_generator=SequentialIdGenerator("edge-"), **kwargs)


class TestConnect:
    """Test creating edges from user drags."""

    def test_creates_edge_with_defaults(self):
        """A valid connection gets a generated id and default presentation."""
        model = _model()
        edge = _validator().connect(model, Connection("a", "b", "r-source", "l-target"))
        assert edge.id == "edge-1"
        assert edge.animated
        assert edge.type == "smoothstep"
        assert model.get_edge("edge-1") == edge

    def test_duplicate_pair_rejected_for_every_handle_combination(self):
        """Any handles, either direction: a second edge for {a, b} is refused."""
        model = _model()
        validator = _validator()
        validator.connect(model, Connection("a", "b", "r-source", "l-target"))

        for sh, th in itertools.product(HANDLE_IDS, repeat=2):
            for source, target in (("a", "b"), ("b", "a")):
                with pytest.raises(ConnectionRejected) as exc_info:
                    validator.connect(model, Connection(source, target, sh, th))
                assert exc_info.value.reason == "duplicate"
                assert exc_info.value.message == DUPLICATE_MESSAGE
        assert len(model.edges) == 1

    def test_other_pairs_still_allowed(self):
        """The rule is per pair, not per node."""
        model = _model()
        validator = _validator()
        validator.connect(model, Connection("a", "b"))
        validator.connect(model, Connection("a", "c"))
        validator.connect(model, Connection("c", "b"))
        assert len(model.edges) == 3

    def test_self_loop_passes_by_default(self):
        """Self-loops are left to the rendering layer unless configured."""
        model = _model()
        edge = _validator().connect(model, Connection("a", "a", "r-source", "l-target"))
        assert edge.source == edge.target == "a"

    def test_self_loop_rejected_when_configured(self):
        """reject_self_loops blocks source == target."""
        with pytest.raises(ConnectionRejected) as exc_info:
            _validator(reject_self_loops=True).connect(_model(), Connection("a", "a"))
        assert exc_info.value.reason == "self_loop"

    def test_missing_endpoint_rejected(self):
        """A drag released on empty canvas has no target."""
        with pytest.raises(ConnectionRejected) as exc_info:
            _validator().connect(_model(), Connection("a", None))
        assert exc_info.value.reason == "incomplete"


class TestReconnect:
    """Test moving an existing edge."""

    def test_replaces_in_place(self):
        """Same id, new endpoint, not counted as a duplicate of itself."""
        model = _model()
        validator = _validator()
        edge = validator.connect(model, Connection("a", "b", "r-source", "l-target"))
        moved = validator.reconnect(model, edge.id, Connection("a", "b", "b-source", "t-target"))
        assert moved.id == edge.id
        assert moved.source_handle == "b-source"
        assert len(model.edges) == 1

    def test_new_endpoint(self):
        """The edge can move to another node."""
        model = _model()
        validator = _validator()
        edge = validator.connect(model, Connection("a", "b"))
        moved = validator.reconnect(model, edge.id, Connection("a", "c"))
        assert (moved.source, moved.target) == ("a", "c")

    def test_onto_existing_pair_rejected(self):
        """Moving onto a pair that already has an edge is a duplicate."""
        model = _model()
        validator = _validator()
        validator.connect(model, Connection("a", "b"))
        second = validator.connect(model, Connection("a", "c"))
        with pytest.raises(ConnectionRejected):
            validator.reconnect(model, second.id, Connection("b", "a"))
        assert model.get_edge(second.id).target == "c"

    def test_unknown_edge(self):
        """Reconnecting an edge that is gone is a no-op."""
        assert _validator().reconnect(_model(), "ghost", Connection("a", "b")) is None
