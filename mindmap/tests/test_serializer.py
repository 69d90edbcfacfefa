"""Tests for converting graphs to and from storage."""

import pytest

from mindmap.editor.graph_model import GraphModel
from mindmap.editor.serializer import PayloadError, deserialize, serialize, strip_handlers
from mindmap.models.defaults import default_graph
from mindmap.models.graph import Edge, EdgeStyle, Field, FieldOption, Graph, Node, Position
from mindmap.models.persisted import PersistedGraph


def _graph() -> Graph:
    return Graph(
        title="Plans",
        nodes=[
            Node(
                id="a",
                position=Position(x=10.5, y=-3),
                title="Alpha",
                color="#112233",
                fields=[
                    Field(id="f2", type="number", label="Count", value=7),
                    Field(id="f1", type="multiselect", label="Tags", value=["x"],
                          options=[FieldOption(label="x", value="x")]),
                    Field(id="f3", type="checkbox", label="Done", value=False),
                ],
            ),
            Node(id="b", position=Position(x=200, y=80)),
        ],
        edges=[
            Edge(id="e1", source="a", target="b", source_handle="r-source", target_handle="l-target"),
        ],
    )


class TestRoundTrip:
    """deserialize(serialize(g)) keeps the graph's identity."""

    def test_nodes_and_fields(self):
        """Ids, positions, field order and values survive."""
        original = _graph()
        restored = deserialize(serialize(original))
        assert [n.id for n in restored.nodes] == ["a", "b"]
        a = restored.nodes[0]
        assert (a.position.x, a.position.y) == (10.5, -3)
        assert a.title == "Alpha"
        assert a.color == "#112233"
        assert [f.id for f in a.fields] == ["f2", "f1", "f3"]
        assert [f.value for f in a.fields] == [7, ["x"], False]
        assert a.fields[1].options == [FieldOption(label="x", value="x")]

    def test_edges(self):
        """Endpoints and handles survive."""
        restored = deserialize(serialize(_graph()))
        (edge,) = restored.edges
        assert (edge.id, edge.source, edge.target, edge.source_handle, edge.target_handle) == (
            "e1", "a", "b", "r-source", "l-target",
        )

    def test_through_json(self):
        """The wire form round-trips through JSON."""
        payload = serialize(_graph())
        restored = deserialize(PersistedGraph.model_validate_json(payload.model_dump_json(by_alias=True)))
        assert restored.edges[0].target_handle == "l-target"
        assert restored.title == "Plans"

    def test_accepts_model(self):
        """A live GraphModel serializes like its snapshot."""
        model = GraphModel(default_graph())
        assert serialize(model) == serialize(model.to_graph())


class TestStripping:
    """Behavior never reaches storage."""

    def test_handler_keys_removed(self):
        """Legacy handler keys and callables are dropped from node data."""
        node = Node(id="a", onDelete="fn", onHandleDisconnect="fn", callback=lambda: None, note="keep")
        data = serialize(Graph(nodes=[node])).nodes[0].data
        assert "onDelete" not in data
        assert "onHandleDisconnect" not in data
        assert "callback" not in data
        assert data["note"] == "keep"

    def test_handler_keys_ignored_on_load(self):
        """Stored handler keys do not come back."""
        graph = deserialize({
            "title": "t",
            "nodes": [{"id": "a", "data": {"title": "A", "onEdit": "x", "on_update": "y"}}],
            "edges": [],
        })
        assert graph.nodes[0].model_extra == {}

    def test_strip_handlers(self):
        """strip_handlers keeps plain data."""
        assert strip_handlers({"onUpdate": 1, "a": 1, "f": print}) == {"a": 1}

    def test_wire_shape(self):
        """Nodes use a data envelope; edges use camelCase keys."""
        wire = serialize(_graph()).to_wire()
        node = wire["nodes"][0]
        assert node["type"] == "custom"
        assert set(node["data"]) == {"title", "color", "fields"}
        edge = wire["edges"][0]
        assert edge["sourceHandle"] == "r-source"
        assert edge["interactionWidth"] == 25
        assert edge["style"] == {"stroke": "#8b5cf6", "strokeWidth": 2}


class TestForwardCompatibility:
    """Data this version does not understand is carried through."""

    def test_unknown_field_type(self):
        """An unrecognized type is kept verbatim with its extra keys."""
        graph = deserialize({
            "nodes": [{
                "id": "a",
                "data": {"fields": [{"id": "f1", "type": "slider", "value": 3, "min": 0}]},
            }],
        })
        field = graph.nodes[0].fields[0]
        assert field.type == "slider"
        again = serialize(graph).nodes[0].data["fields"][0]
        assert again == {"id": "f1", "type": "slider", "label": "", "value": 3, "min": 0}

    def test_unknown_data_keys(self):
        """Unknown node data keys survive a round trip."""
        graph = deserialize({"nodes": [{"id": "a", "data": {"icon": "star"}}]})
        assert serialize(graph).nodes[0].data["icon"] == "star"

    def test_reserved_data_keys_dropped(self):
        """data cannot override the node's id or position."""
        graph = deserialize({"nodes": [{"id": "a", "data": {"id": "b", "position": 1}}]})
        node = graph.nodes[0]
        assert node.id == "a"
        assert node.model_extra == {}


class TestDefaults:
    """Missing presentation falls back to defaults."""

    def test_minimal_edge(self):
        """An edge with only endpoints gets the default look."""
        graph = deserialize({
            "nodes": [{"id": "a"}, {"id": "b"}],
            "edges": [{"id": "e1", "source": "a", "target": "b"}],
        })
        edge = graph.edges[0]
        assert edge.type == "smoothstep"
        assert edge.animated
        assert edge.reconnectable
        assert edge.interaction_width == 25
        assert edge.style == EdgeStyle()
        assert edge.source_handle is None

    def test_stored_style_merged_over_defaults(self):
        """Stored style keys win; missing ones are filled in."""
        graph = deserialize({
            "edges": [{"id": "e1", "source": "a", "target": "b", "style": {"stroke": "#000", "opacity": 0.5}}],
        })
        style = graph.edges[0].style
        assert style.stroke == "#000"
        assert style.stroke_width == 2
        assert style.model_extra == {"opacity": 0.5}

    def test_minimal_node(self):
        """Nodes without data deserialize and serialize without errors."""
        graph = deserialize({"nodes": [{"id": "a"}]})
        node = graph.nodes[0]
        assert (node.title, node.color, node.fields) == ("", "#000000", [])
        assert serialize(graph).nodes[0].data == {"title": "", "color": "#000000", "fields": []}

    def test_repeated_ids_keep_first(self):
        """Corrupt payloads with repeated ids do not crash the load."""
        graph = deserialize({
            "nodes": [{"id": "a", "data": {"title": "first"}}, {"id": "a", "data": {"title": "second"}}],
            "edges": [
                {"id": "e1", "source": "a", "target": "a"},
                {"id": "e1", "source": "a", "target": "b"},
            ],
        })
        assert [n.title for n in graph.nodes] == ["first"]
        assert [e.target for e in graph.edges] == ["a"]

    def test_snake_case_stroke_width(self):
        """A stored ``stroke_width`` is read instead of clashing with the default."""
        graph = deserialize({
            "edges": [{"id": "e1", "source": "a", "target": "b", "style": {"stroke_width": 3}}],
        })
        style = graph.edges[0].style
        assert style.stroke_width == 3
        assert style.model_extra == {}

    def test_camel_case_width_wins(self):
        """When both spellings are stored the camelCase one is used."""
        graph = deserialize({
            "edges": [{
                "id": "e1",
                "source": "a",
                "target": "b",
                "style": {"strokeWidth": 5, "stroke_width": 3},
            }],
        })
        assert graph.edges[0].style.stroke_width == 5


class TestCorruptPayloads:
    """Payloads that cannot be rebuilt raise a clear error."""

    def test_field_entries_must_be_objects(self):
        """A non-object entry in ``fields`` is rejected."""
        with pytest.raises(PayloadError):
            deserialize({"nodes": [{"id": "a", "data": {"fields": ["oops"]}}]})

    def test_fields_must_be_a_list(self):
        """A ``fields`` value that is not a list is rejected."""
        with pytest.raises(PayloadError):
            deserialize({"nodes": [{"id": "a", "data": {"fields": {"id": "f1"}}}]})
