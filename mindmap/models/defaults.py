"""Seed content for a brand-new mind map."""

from mindmap.models.graph import Field, FieldOption, Graph, Node, Position

DEFAULT_GRAPH_TITLE = "My New Mind Map"
DEFAULT_NODE_TITLE = "New Node"


def default_nodes() -> list[Node]:
    """The single starter node shown on a fresh editor."""
    return [
        Node(
            id="1",
            position=Position(x=100, y=100),
            title="Mind Map Start",
            color="#2563eb",
            fields=[
                Field(id="f1", type="text", label="Project Name", value="My Mind Map"),
                Field(
                    id="f2",
                    type="select",
                    label="Environment",
                    value="prod",
                    options=[
                        FieldOption(label="Production", value="prod"),
                        FieldOption(label="Staging", value="staging"),
                    ],
                ),
            ],
        )
    ]


def default_graph() -> Graph:
    return Graph(title=DEFAULT_GRAPH_TITLE, nodes=default_nodes(), edges=[])
