# cartography/services/graph_store.py
import json
import logging
from collections import defaultdict, deque
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cartography.core.config import settings
from cartography.core.exceptions import MalformedDatasetError, NodeNotFoundException
from cartography.models.graph import Node, Edge, Dataset

logger = logging.getLogger(__name__)


class GraphStore:
    """The full archive graph. Immutable once loaded."""

    def __init__(self, nodes: list[Node], edges: list[Edge], root: Node):
        self._nodes = tuple(nodes)
        self._edges = tuple(edges)
        self._nodes_by_id = {node.id: node for node in self._nodes}
        self.root = root

        children: dict[str, list[Edge]] = defaultdict(list)
        parents: dict[str, list[str]] = defaultdict(list)
        for edge in self._edges:
            children[edge.source].append(edge)
            parents[edge.target].append(edge.source)
        self._children = {source: tuple(edges) for source, edges in children.items()}
        self._parents = {target: tuple(ids) for target, ids in parents.items()}

    @classmethod
    def load(cls, raw: dict[str, Any], root_label: str | None = None) -> "GraphStore":
        root_label = root_label or settings.ROOT_LABEL
        if not isinstance(raw, dict) or "nodes" not in raw or "edges" not in raw:
            raise MalformedDatasetError("Dataset must be an object with 'nodes' and 'edges'.")

        try:
            dataset = Dataset.model_validate(raw)
        except ValidationError as exc:
            raise MalformedDatasetError(f"Dataset records are invalid: {exc}") from exc

        seen: set[str] = set()
        for node in dataset.nodes:
            if node.id in seen:
                raise MalformedDatasetError(f"Duplicate node id '{node.id}'.")
            seen.add(node.id)

        roots = [node for node in dataset.nodes if node.primary_label == root_label]
        if not roots:
            raise MalformedDatasetError(f"No node has the root category '{root_label}'.")
        if len(roots) > 1:
            logger.warning(
                "Found %d nodes with root category '%s'; using '%s'.",
                len(roots), root_label, roots[0].id
            )

        for edge in dataset.edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in seen:
                    raise MalformedDatasetError(
                        f"Edge {edge.source} -> {edge.target} references unknown node id '{endpoint}'."
                    )

        store = cls(dataset.nodes, dataset.edges, roots[0])
        unreachable = store.unreachable_ids()
        if unreachable:
            logger.warning("%d node(s) are unreachable from the root: %s", len(unreachable), sorted(unreachable))
        logger.info(
            "Loaded dataset with %d nodes and %d edges (root '%s').",
            len(store._nodes), len(store._edges), store.root.id
        )
        return store

    @classmethod
    def load_path(cls, path: str | Path, root_label: str | None = None) -> "GraphStore":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except json.JSONDecodeError as exc:
            raise MalformedDatasetError(f"Dataset '{path}' is not valid JSON: {exc}") from exc
        return cls.load(raw, root_label=root_label)

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    def get_node(self, node_id: str) -> Node:
        try:
            return self._nodes_by_id[node_id]
        except KeyError:
            raise NodeNotFoundException(f"Node '{node_id}' does not exist in the dataset.") from None

    def child_edges_of(self, node_id: str) -> tuple[Edge, ...]:
        return self._children.get(node_id, ())

    def is_expandable(self, node_id: str) -> bool:
        return len(self.child_edges_of(node_id)) > 0

    def parents_of(self, node_id: str) -> tuple[str, ...]:
        return self._parents.get(node_id, ())

    def unreachable_ids(self) -> set[str]:
        reached = {self.root.id}
        queue = deque([self.root.id])
        while queue:
            for edge in self.child_edges_of(queue.popleft()):
                if edge.target not in reached:
                    reached.add(edge.target)
                    queue.append(edge.target)
        return set(self._nodes_by_id) - reached
