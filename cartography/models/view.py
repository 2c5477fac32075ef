# cartography/models/view.py
from pydantic import BaseModel, Field

class NodeView(BaseModel):
    id: str
    labels: list[str]
    name: str | None = None
    url: str | None = None
    x: float
    y: float
    fx: float | None = None
    fy: float | None = None
    radius: float
    lines: list[str]
    line_height: float
    text_offset_y: float
    color: str
    css_class: str | None = None
    expandable: bool
    expanded: bool
    ring_radius: float | None = None
    link_icon_offset: float | None = None

class EdgeView(BaseModel):
    source: str
    target: str
    label: str = ""

class LegendItem(BaseModel):
    label: str
    kind: str
    colors: list[str] = Field(default_factory=list)

class GraphView(BaseModel):
    revision: int
    title: str
    nodes: list[NodeView]
    edges: list[EdgeView]
    legend: list[LegendItem] = Field(default_factory=list)

class PositionUpdate(BaseModel):
    id: str
    x: float
    y: float

class DragRequest(BaseModel):
    x: float
    y: float

class LinkTarget(BaseModel):
    id: str
    url: str
