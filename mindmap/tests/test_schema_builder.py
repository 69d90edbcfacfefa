"""Tests for the node draft editor."""

import random

import pytest

from mindmap.editor.graph_model import GraphModel
from mindmap.editor.schema_builder import SchemaBuilder
from mindmap.models.defaults import default_graph
from mindmap.models.graph import FieldOption, FieldType
from mindmap.utils.identifiers import SequentialIdGenerator


def _builder() -> SchemaBuilder:
    return SchemaBuilder(id_generator=SequentialIdGenerator("field-"))


class TestFields:
    """Test draft field operations."""

    def test_add_field_defaults(self):
        """New fields are blank text fields."""
        field = _builder().add_field()
        assert field.id == "field-1"
        assert field.type == "text"
        assert field.label == ""
        assert field.value == ""

    def test_switch_to_select_seeds_option(self):
        """Switching into select adds one default option."""
        builder = _builder()
        field = builder.add_field()
        updated = builder.set_field_type(field.id, "select")
        assert updated.options == [FieldOption(label="Option 1", value="Option 1")]

    def test_switch_accepts_enum(self):
        """FieldType members are stored as their string value."""
        builder = _builder()
        field = builder.add_field()
        assert builder.set_field_type(field.id, FieldType.multiselect).type == "multiselect"

    def test_switch_keeps_existing_options(self):
        """Fields that already have options are not reseeded."""
        builder = _builder()
        field = builder.add_field()
        builder.update_field(field.id, options=[{"label": "A", "value": "A"}])
        updated = builder.set_field_type(field.id, "select")
        assert [o.label for o in updated.options] == ["A"]

    def test_switch_to_plain_type_does_not_seed(self):
        """Only select/multiselect get options."""
        builder = _builder()
        field = builder.add_field()
        assert builder.set_field_type(field.id, "number").options == []

    def test_update_cannot_change_id(self):
        """Field ids are fixed at creation."""
        builder = _builder()
        field = builder.add_field()
        updated = builder.update_field(field.id, id="other", label="Name")
        assert updated.id == field.id
        assert updated.label == "Name"

    def test_remove_field(self):
        """Removed fields are gone; ids are not reissued."""
        builder = _builder()
        first = builder.add_field()
        assert builder.remove_field(first.id)
        assert not builder.remove_field(first.id)
        assert builder.add_field().id == "field-2"

    def test_unknown_field_is_noop(self):
        """Operations on a missing field return nothing."""
        builder = _builder()
        assert builder.update_field("nope", label="x") is None
        assert builder.add_option("nope") is None


class TestOptions:
    """Test option editing."""

    def test_numbers_never_reused(self):
        """Removing an option does not free its number."""
        builder = _builder()
        field = builder.add_field()
        builder.set_field_type(field.id, "select")
        builder.add_option(field.id)
        builder.remove_option(field.id, 1)
        option = builder.add_option(field.id)
        assert option.label == "Option 3"
        assert [o.label for o in builder.get_field(field.id).options] == ["Option 1", "Option 3"]

    def test_existing_options_counted(self):
        """Editing a node continues numbering after its current options."""
        node = default_graph().nodes[0]
        builder = SchemaBuilder.for_node(node)
        assert builder.add_option("f2").label == "Option 3"

    def test_rename_mirrors_value(self):
        """An option's value follows its label."""
        builder = _builder()
        field = builder.add_field()
        builder.set_field_type(field.id, "select")
        renamed = builder.rename_option(field.id, 0, "Blue")
        assert renamed == FieldOption(label="Blue", value="Blue")

    def test_bad_index(self):
        """Out-of-range option indexes are ignored."""
        builder = _builder()
        field = builder.add_field()
        builder.set_field_type(field.id, "select")
        assert builder.rename_option(field.id, 5, "x") is None
        assert not builder.remove_option(field.id, -1)


class TestCommit:
    """Test writing drafts into the graph."""

    def test_edit_is_isolated_until_commit(self):
        """Draft changes do not touch the live node."""
        model = GraphModel(default_graph())
        builder = SchemaBuilder.for_node(model.get_node("1"))
        builder.title = "Changed"
        builder.update_field("f1", value="draft")
        assert model.get_node("1").title == "Mind Map Start"
        assert model.get_node("1").fields[0].value == "My Mind Map"

    def test_edit_commit_merges(self):
        """Committing an edit updates title, color and fields in place."""
        model = GraphModel(default_graph())
        builder = SchemaBuilder.for_node(model.get_node("1"))
        builder.title = "Changed"
        builder.color = "#ff0000"
        builder.remove_field("f2")
        node = builder.commit(model)
        assert node.id == "1"
        assert node.title == "Changed"
        assert node.color == "#ff0000"
        assert [f.id for f in node.fields] == ["f1"]
        assert (node.position.x, node.position.y) == (100, 100)

    def test_edit_commit_after_delete(self):
        """A draft for a deleted node commits nothing."""
        model = GraphModel(default_graph())
        builder = SchemaBuilder.for_node(model.get_node("1"))
        model.delete_node("1")
        assert builder.commit(model) is None
        assert model.nodes == []

    def test_new_node(self):
        """Creating appends a node with a new id at a random spot."""
        model = GraphModel(default_graph())
        builder = _builder()
        builder.title = ""
        builder.add_field()
        node = builder.commit(model, SequentialIdGenerator("node-"), random.Random(1))
        assert node.id == "node-1"
        assert node.title == "New Node"
        assert 100 <= node.position.x < 400
        assert 100 <= node.position.y < 400
        assert [n.id for n in model.nodes] == ["1", "node-1"]

    def test_commit_twice_raises(self):
        """A draft can only be closed once."""
        model = GraphModel()
        builder = _builder()
        builder.commit(model)
        with pytest.raises(RuntimeError):
            builder.commit(model)

    def test_cancel(self):
        """Cancel leaves the graph alone."""
        model = GraphModel(default_graph())
        builder = _builder()
        builder.add_field()
        builder.cancel()
        assert [n.id for n in model.nodes] == ["1"]
        with pytest.raises(RuntimeError):
            builder.commit(model)
