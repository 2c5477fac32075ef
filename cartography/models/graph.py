# cartography/models/graph.py
from pydantic import BaseModel, ConfigDict, Field, field_validator

class NodeAttributes(BaseModel):
    name: str | None = None
    url: str | None = None

    model_config = ConfigDict(extra="allow")

class Node(BaseModel):
    id: str
    labels: list[str] = Field(min_length=1)
    attributes: NodeAttributes = Field(default_factory=NodeAttributes)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value) if isinstance(value, int) else value

    @property
    def primary_label(self) -> str:
        return self.labels[0]

    @property
    def name(self) -> str | None:
        return self.attributes.name

    @property
    def url(self) -> str | None:
        return self.attributes.url

class Edge(BaseModel):
    source: str
    target: str
    label: str = ""

    @field_validator("source", "target", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value) if isinstance(value, int) else value

class Dataset(BaseModel):
    nodes: list[Node]
    edges: list[Edge]

class VisibleEdge(BaseModel):
    """An edge of the visible graph, holding the visible node objects themselves."""
    source: Node
    target: Node
    label: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source.id, self.target.id)

class RenderAnnotation(BaseModel):
    """Mutable render-only state for one node, kept apart from the dataset record."""
    x: float = 0.0
    y: float = 0.0
    fx: float | None = None
    fy: float | None = None
    expanded: bool = False
    pin_token: int = 0
    radius: float | None = None
    radius_name: str | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None
