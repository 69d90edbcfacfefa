"""Edit buffer for a node's title, color, and form fields.

The builder works on a private copy while the node dialog is open; the live
graph only changes on ``commit``. ``cancel`` throws the draft away.
"""

import logging
import random
from typing import Any

from mindmap.editor.graph_model import GraphModel
from mindmap.models.defaults import DEFAULT_NODE_TITLE
from mindmap.models.graph import Field, FieldOption, Node, OPTION_FIELD_TYPES, Position
from mindmap.utils.identifiers import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)

DEFAULT_NODE_COLOR = "#000000"

# new nodes land at a random spot in this box
SPAWN_ORIGIN = 100.0
SPAWN_SPREAD = 300.0


class SchemaBuilder:
    """Draft of a node being created or edited."""

    def __init__(
        self,
        node_id: str | None = None,
        title: str = DEFAULT_NODE_TITLE,
        color: str = DEFAULT_NODE_COLOR,
        fields: list[Field] | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.node_id = node_id  # None while creating
        self.title = title
        self.color = color
        self.fields: list[Field] = [f.model_copy(deep=True) for f in fields or []]
        self.id_generator = id_generator or UuidIdGenerator(prefix="field-")
        self.closed = False
        # per-field option counters; numbers are never handed out twice
        self._option_counters: dict[str, int] = {
            f.id: len(f.options or []) for f in self.fields
        }

    @classmethod
    def for_node(cls, node: Node, id_generator: IdGenerator | None = None) -> "SchemaBuilder":
        """Start editing an existing node (deep copy of its form)."""
        return cls(
            node_id=node.id,
            title=node.title,
            color=node.color or DEFAULT_NODE_COLOR,
            fields=node.fields,
            id_generator=id_generator,
        )

    @property
    def is_new(self) -> bool:
        return self.node_id is None

    def get_field(self, field_id: str) -> Field | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def _replace(self, field: Field) -> None:
        self.fields = [field if f.id == field.id else f for f in self.fields]

    # --- fields ---

    def add_field(self) -> Field:
        """Append a blank text field."""
        field = Field(id=self.id_generator(), type="text", label="", value="", options=[])
        self.fields.append(field)
        self._option_counters[field.id] = 0
        return field

    def update_field(self, field_id: str, **updates: Any) -> Field | None:
        """Change label/value/type of a draft field.

        Switching into select/multiselect seeds one option when the field
        has none.
        """
        field = self.get_field(field_id)
        if field is None:
            return None

        updates.pop("id", None)
        if "type" in updates:
            updates["type"] = getattr(updates["type"], "value", updates["type"])
        if "options" in updates and updates["options"] is not None:
            updates["options"] = [FieldOption.model_validate(o) for o in updates["options"]]
        updated = field.model_copy(update=updates)
        if updates.get("type") in OPTION_FIELD_TYPES and not updated.options:
            updated = updated.model_copy(update={"options": [self._next_option(field_id)]})
        self._replace(updated)
        return updated

    def set_field_type(self, field_id: str, field_type: str) -> Field | None:
        return self.update_field(field_id, type=field_type)

    def remove_field(self, field_id: str) -> bool:
        before = len(self.fields)
        self.fields = [f for f in self.fields if f.id != field_id]
        return len(self.fields) != before

    # --- options ---

    def _next_option(self, field_id: str) -> FieldOption:
        number = self._option_counters.get(field_id, 0) + 1
        self._option_counters[field_id] = number
        label = f"Option {number}"
        return FieldOption(label=label, value=label)

    def add_option(self, field_id: str) -> FieldOption | None:
        field = self.get_field(field_id)
        if field is None:
            return None
        option = self._next_option(field_id)
        self._replace(field.model_copy(update={"options": [*(field.options or []), option]}))
        return option

    def rename_option(self, field_id: str, index: int, label: str) -> FieldOption | None:
        """Relabel an option; its value mirrors the label."""
        field = self.get_field(field_id)
        if field is None or not field.options or not 0 <= index < len(field.options):
            return None
        options = list(field.options)
        options[index] = FieldOption(label=label, value=label)
        self._replace(field.model_copy(update={"options": options}))
        return options[index]

    def remove_option(self, field_id: str, index: int) -> bool:
        field = self.get_field(field_id)
        if field is None or not field.options or not 0 <= index < len(field.options):
            return False
        options = [o for i, o in enumerate(field.options) if i != index]
        self._replace(field.model_copy(update={"options": options}))
        return True

    # --- lifecycle ---

    def commit(
        self,
        model: GraphModel,
        node_id_generator: IdGenerator | None = None,
        rng: random.Random | None = None,
    ) -> Node | None:
        """Write the draft into the graph.

        Editing merges title/color/fields into the existing node (None if it
        was deleted meanwhile). Creating appends a node with a fresh id at a
        random position.
        """
        if self.closed:
            raise RuntimeError("draft already committed or cancelled")
        self.closed = True

        if not self.is_new:
            changed = model.update_node_data(
                self.node_id,
                {"title": self.title, "color": self.color, "fields": self.fields},
            )
            return model.get_node(self.node_id) if changed else None

        node_id_generator = node_id_generator or UuidIdGenerator(prefix="node-")
        rng = rng or random.Random()
        node = Node(
            id=node_id_generator(),
            position=Position(
                x=rng.random() * SPAWN_SPREAD + SPAWN_ORIGIN,
                y=rng.random() * SPAWN_SPREAD + SPAWN_ORIGIN,
            ),
            title=self.title or DEFAULT_NODE_TITLE,
            color=self.color,
            fields=self.fields,
        )
        model.add_node(node)
        logger.info("created node %s", node.id)
        return node

    def cancel(self) -> None:
        """Discard the draft without touching the graph."""
        self.closed = True
