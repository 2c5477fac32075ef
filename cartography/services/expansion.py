# cartography/services/expansion.py
import logging
import random
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Iterable

from cartography.core.config import Settings, settings as default_settings
from cartography.core.exceptions import NodeNotFoundException
from cartography.models.graph import Node, VisibleEdge, RenderAnnotation
from cartography.models.view import PositionUpdate
from cartography.services.graph_store import GraphStore
from cartography.services.pin_scheduler import PinScheduler, PinHandle, AsyncioPinScheduler

logger = logging.getLogger(__name__)


@dataclass
class ExpansionResult:
    node_id: str
    revision: int
    added_nodes: list[Node] = field(default_factory=list)
    added_edges: list[VisibleEdge] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added_nodes or self.added_edges)


class VisibleGraph:
    """The revealed part of the full graph. Members are only ever added."""

    def __init__(self):
        self._nodes: list[Node] = []
        self._edges: list[VisibleEdge] = []
        self._node_index: dict[str, Node] = {}
        self._edge_keys: set[tuple[str, str]] = set()
        self.revision = 0

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> tuple[VisibleEdge, ...]:
        return tuple(self._edges)

    def contains_node(self, node_id: str) -> bool:
        return node_id in self._node_index

    def contains_edge(self, source_id: str, target_id: str) -> bool:
        return (source_id, target_id) in self._edge_keys

    def get_node(self, node_id: str) -> Node:
        try:
            return self._node_index[node_id]
        except KeyError:
            raise NodeNotFoundException(f"Node '{node_id}' is not visible.") from None

    def add_node(self, node: Node) -> bool:
        if node.id in self._node_index:
            return False
        self._node_index[node.id] = node
        self._nodes.append(node)
        return True

    def add_edge(self, edge: VisibleEdge) -> bool:
        if self.contains_edge(*edge.key):
            return False
        if not (self.contains_node(edge.source.id) and self.contains_node(edge.target.id)):
            raise ValueError(f"Edge {edge.key} has an endpoint outside the visible graph.")
        self._edge_keys.add(edge.key)
        self._edges.append(edge)
        return True

    def incoming(self, node_id: str) -> list[VisibleEdge]:
        return [edge for edge in self._edges if edge.target.id == node_id]


Listener = Callable[[ExpansionResult], None]


class ExpansionController:
    """
    Grows the visible graph of one session from the root, one expansion at a time.

    Render-only state (position, pin, expanded flag, cached radius) lives in a side
    table of RenderAnnotation records keyed by node id. Every mutation bumps the
    visible graph revision before listeners are told about it.
    """

    def __init__(
        self,
        store: GraphStore,
        scheduler: PinScheduler | None = None,
        config: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.config = config or default_settings
        self.scheduler = scheduler or AsyncioPinScheduler()
        self.rng = rng or random.Random(self.config.JITTER_SEED)
        self.visible = VisibleGraph()
        self.annotations: dict[str, RenderAnnotation] = {}
        self._listeners: list[Listener] = []
        self._pin_counter = 0
        self._settle_pins: dict[str, tuple[int, PinHandle]] = {}

    def annotation(self, node_id: str) -> RenderAnnotation:
        if node_id not in self.annotations:
            self.annotations[node_id] = RenderAnnotation()
        return self.annotations[node_id]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def seed(self) -> ExpansionResult:
        root = self.store.root
        if self.visible.contains_node(root.id):
            return ExpansionResult(node_id=root.id, revision=self.visible.revision)

        annotation = self.annotation(root.id)
        annotation.x = self.config.VIEWPORT_WIDTH / 2
        annotation.y = self.config.VIEWPORT_HEIGHT / 2
        self.visible.add_node(root)
        return self._publish(ExpansionResult(node_id=root.id, revision=0, added_nodes=[root]))

    def is_expandable(self, node_id: str) -> bool:
        return self.store.is_expandable(node_id)

    def is_expanded(self, node_id: str) -> bool:
        annotation = self.annotations.get(node_id)
        return annotation is not None and annotation.expanded

    def expand(self, node_id: str) -> ExpansionResult:
        node = self.visible.get_node(node_id)
        child_edges = self.store.child_edges_of(node_id)
        annotation = self.annotation(node_id)
        unchanged = ExpansionResult(node_id=node_id, revision=self.visible.revision)

        if not child_edges:
            logger.debug("Node %s has no children; nothing to expand.", node_id)
            return unchanged
        if annotation.expanded:
            logger.debug("Node %s is already expanded.", node_id)
            return unchanged

        annotation.expanded = True
        result = ExpansionResult(node_id=node_id, revision=self.visible.revision)
        jitter = self.config.JITTER_MAGNITUDE

        for edge in child_edges:
            target = self.store.get_node(edge.target)
            if self.visible.add_node(target):
                child = self.annotation(target.id)
                child.x = annotation.x + self.rng.uniform(-jitter, jitter)
                child.y = annotation.y + self.rng.uniform(-jitter, jitter)
                result.added_nodes.append(target)

            visible_edge = VisibleEdge(source=node, target=target, label=edge.label)
            if self.visible.add_edge(visible_edge):
                result.added_edges.append(visible_edge)

        token = self._set_pin(annotation, annotation.x, annotation.y)
        logger.info(
            "Expanded node %s: %d new node(s), %d new edge(s).",
            node_id, len(result.added_nodes), len(result.added_edges)
        )
        self._publish(result)
        # The release is scheduled only once the change is fully published.
        self._schedule_release(node_id, token)
        return result

    def pin(self, node_id: str, x: float, y: float) -> None:
        self.visible.get_node(node_id)
        annotation = self.annotation(node_id)
        self._set_pin(annotation, x, y)
        annotation.x, annotation.y = x, y

    def unpin(self, node_id: str) -> None:
        self.visible.get_node(node_id)
        annotation = self.annotation(node_id)
        self._pin_counter += 1
        annotation.pin_token = self._pin_counter
        annotation.fx = annotation.fy = None

    def notify_settled(self, node_id: str) -> bool:
        """Releases an expansion pin early once the layout engine reports it has settled."""
        pending = self._settle_pins.get(node_id)
        if pending is None:
            return False
        token, handle = pending
        handle.cancel()
        return self._release_pin(node_id, token)

    def update_positions(self, updates: Iterable[PositionUpdate]) -> int:
        applied = 0
        for update in updates:
            if not self.visible.contains_node(update.id):
                logger.debug("Ignoring position for hidden node %s.", update.id)
                continue
            annotation = self.annotation(update.id)
            annotation.x, annotation.y = update.x, update.y
            applied += 1
        return applied

    def _set_pin(self, annotation: RenderAnnotation, x: float, y: float) -> int:
        self._pin_counter += 1
        annotation.pin_token = self._pin_counter
        annotation.fx, annotation.fy = x, y
        return annotation.pin_token

    def _schedule_release(self, node_id: str, token: int) -> None:
        handle = self.scheduler.call_later(
            self.config.PIN_RELEASE_DELAY, partial(self._release_pin, node_id, token)
        )
        self._settle_pins[node_id] = (token, handle)

    def _release_pin(self, node_id: str, token: int) -> bool:
        pending = self._settle_pins.get(node_id)
        if pending is not None and pending[0] == token:
            del self._settle_pins[node_id]

        annotation = self.annotations.get(node_id)
        if annotation is None or annotation.pin_token != token:
            logger.debug("Pin on %s was replaced; keeping the newer pin.", node_id)
            return False
        annotation.fx = annotation.fy = None
        logger.debug("Released settle pin on %s.", node_id)
        return True

    def _publish(self, result: ExpansionResult) -> ExpansionResult:
        self.visible.revision += 1
        result.revision = self.visible.revision
        for listener in list(self._listeners):
            listener(result)
        return result
