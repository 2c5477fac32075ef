# cartography/services/render_adapter.py
import webbrowser
from typing import Callable

from cartography.core.config import Settings, settings as default_settings
from cartography.core.styles import (
    CATEGORY_STYLES, DEFAULT_NODE_COLOR, PARENT_COLOR_BY_NAME, GRAPH_TITLE, LEGEND_ITEMS
)
from cartography.models.graph import Node
from cartography.models.view import NodeView, EdgeView, GraphView, LegendItem
from cartography.services.expansion import ExpansionController, ExpansionResult
from cartography.services.text_layout import TextLayoutEngine


def style_for(category: str) -> dict[str, str | None]:
    return CATEGORY_STYLES.get(category, {"color": DEFAULT_NODE_COLOR, "css_class": category.lower() or None})


def legend() -> list[LegendItem]:
    return [LegendItem.model_validate(item) for item in LEGEND_ITEMS]


class RenderAdapter:
    """Turns a session's visible graph into draw-ready views and routes interactions back."""

    def __init__(
        self,
        controller: ExpansionController,
        layout: TextLayoutEngine,
        config: Settings | None = None,
        opener: Callable[[str], object] = webbrowser.open_new_tab,
    ):
        self.controller = controller
        self.layout = layout
        self.config = config or default_settings
        self.opener = opener

    def render(self) -> GraphView:
        visible = self.controller.visible
        return GraphView(
            revision=visible.revision,
            title=GRAPH_TITLE,
            nodes=[self._node_view(node) for node in visible.nodes],
            edges=[
                EdgeView(source=edge.source.id, target=edge.target.id, label=edge.label)
                for edge in visible.edges
            ],
            legend=legend(),
        )

    def on_node_click(self, node_id: str) -> ExpansionResult:
        return self.controller.expand(node_id)

    def on_node_drag(self, node_id: str, x: float, y: float) -> None:
        self.controller.pin(node_id, x, y)

    def on_node_drag_end(self, node_id: str) -> None:
        self.controller.unpin(node_id)

    def on_link_icon_click(self, node_id: str) -> str | None:
        node = self.controller.visible.get_node(node_id)
        if not node.url:
            return None
        self.opener(node.url)
        return node.url

    def fill_color(self, node: Node) -> str:
        for edge in self.controller.visible.incoming(node.id):
            parent_color = PARENT_COLOR_BY_NAME.get(edge.source.name)
            if parent_color:
                return parent_color
            # Only the first visible parent decides.
            break
        return style_for(node.primary_label)["color"]

    def _node_view(self, node: Node) -> NodeView:
        annotation = self.controller.annotation(node.id)
        lines = self.layout.wrap(node.name)
        radius = self.layout.cached_radius(node, annotation)
        line_height = self.config.FONT_SIZE + 2
        expandable = self.controller.is_expandable(node.id)

        return NodeView(
            id=node.id,
            labels=node.labels,
            name=node.name,
            url=node.url,
            x=annotation.x,
            y=annotation.y,
            fx=annotation.fx,
            fy=annotation.fy,
            radius=radius,
            lines=lines,
            line_height=line_height,
            text_offset_y=-(len(lines) - 1) * line_height / 2 if lines else 0.0,
            color=self.fill_color(node),
            css_class=style_for(node.primary_label)["css_class"],
            expandable=expandable,
            expanded=annotation.expanded,
            ring_radius=radius + self.config.EXPANDABLE_RING_OFFSET if expandable and not annotation.expanded else None,
            link_icon_offset=radius - self.config.LINK_ICON_INSET if node.url else None,
        )
