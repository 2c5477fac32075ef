import asyncio
import time
import random

import pytest

from cartography.core.config import Settings
from cartography.core.exceptions import NodeNotFoundException
from cartography.models.view import PositionUpdate
from cartography.services.expansion import ExpansionController
from cartography.services.graph_store import GraphStore
from cartography.services.pin_scheduler import AsyncioPinScheduler

CONFIG = Settings(VIEWPORT_WIDTH=1000, VIEWPORT_HEIGHT=600, JITTER_MAGNITUDE=50, PIN_RELEASE_DELAY=0.3)


@pytest.fixture
def store(raw_dataset):
    return GraphStore.load(raw_dataset)


@pytest.fixture
def controller(store, scheduler):
    controller = ExpansionController(store, scheduler=scheduler, config=CONFIG, rng=random.Random(3))
    controller.seed()
    return controller


def node_ids(controller):
    return [node.id for node in controller.visible.nodes]


def edge_keys(controller):
    return [edge.key for edge in controller.visible.edges]


def assert_consistent(controller):
    ids = node_ids(controller)
    keys = edge_keys(controller)
    assert len(ids) == len(set(ids))
    assert len(keys) == len(set(keys))
    for source, target in keys:
        assert source in ids and target in ids
    assert controller.store.root.id in ids


def test_seed_shows_only_root_at_center(controller):
    assert node_ids(controller) == ["R"]
    assert edge_keys(controller) == []
    annotation = controller.annotation("R")
    assert (annotation.x, annotation.y) == (500, 300)
    assert not annotation.expanded


def test_seed_twice_is_harmless(controller):
    revision = controller.visible.revision
    controller.seed()
    assert node_ids(controller) == ["R"]
    assert controller.visible.revision == revision


def test_expanding_root_reveals_children(controller):
    result = controller.expand("R")

    assert node_ids(controller) == ["R", "A", "B"]
    assert edge_keys(controller) == [("R", "A"), ("R", "B")]
    assert result.changed
    assert controller.is_expanded("R")


def test_expand_is_idempotent(controller):
    controller.expand("R")
    nodes, edges, revision = node_ids(controller), edge_keys(controller), controller.visible.revision

    result = controller.expand("R")

    assert not result.changed
    assert node_ids(controller) == nodes
    assert edge_keys(controller) == edges
    assert controller.visible.revision == revision


def test_visible_edges_reference_visible_node_objects(controller):
    controller.expand("R")
    edge = controller.visible.edges[0]
    assert edge.source is controller.visible.get_node("R")
    assert edge.target is controller.visible.get_node("A")
    assert edge.label == "contains"


def test_monotonic_disclosure_with_shared_children(controller):
    seen_nodes, seen_edges = set(), set()
    for node_id in ["R", "A", "A", "B", "D", "C", "R"]:
        controller.expand(node_id)
        assert seen_nodes <= set(node_ids(controller))
        assert seen_edges <= set(edge_keys(controller))
        seen_nodes, seen_edges = set(node_ids(controller)), set(edge_keys(controller))
        assert_consistent(controller)

    assert node_ids(controller) == ["R", "A", "B", "C", "D", "E"]
    # D is reached from both A and B; it is shown once with both edges
    assert ("A", "D") in edge_keys(controller)
    assert ("B", "D") in edge_keys(controller)


def test_expanding_a_leaf_is_a_noop(controller, scheduler):
    controller.expand("R")
    controller.expand("A")
    revision = controller.visible.revision

    result = controller.expand("C")

    assert not result.changed
    assert not controller.is_expanded("C")
    assert controller.visible.revision == revision
    assert controller.annotation("C").fx is None


def test_expanding_a_hidden_node_is_rejected(controller):
    with pytest.raises(NodeNotFoundException):
        controller.expand("C")
    assert node_ids(controller) == ["R"]


def test_new_nodes_spawn_near_parent(controller):
    controller.pin("R", 100, 200)
    controller.unpin("R")
    controller.expand("R")
    for node_id in ("A", "B"):
        annotation = controller.annotation(node_id)
        assert abs(annotation.x - 100) <= 50
        assert abs(annotation.y - 200) <= 50


def test_listeners_see_each_change_in_order(controller):
    received = []
    unsubscribe = controller.subscribe(received.append)

    controller.expand("R")
    controller.expand("R")
    controller.expand("A")
    unsubscribe()
    controller.expand("B")

    assert [result.node_id for result in received] == ["R", "A"]
    assert [result.revision for result in received] == [2, 3]
    assert [node.id for node in received[0].added_nodes] == ["A", "B"]


def test_expansion_pins_node_until_release(controller, scheduler):
    controller.expand("R")
    annotation = controller.annotation("R")

    assert annotation.pinned
    assert (annotation.fx, annotation.fy) == (annotation.x, annotation.y)
    assert [handle.delay for handle in scheduler.handles] == [0.3]

    scheduler.run_pending()
    assert not annotation.pinned


def test_late_release_does_not_clobber_drag_pin(controller, scheduler):
    controller.expand("R")
    controller.pin("R", 42, 24)

    scheduler.run_pending()

    annotation = controller.annotation("R")
    assert (annotation.fx, annotation.fy) == (42, 24)

    controller.unpin("R")
    assert not annotation.pinned


def test_settled_notification_releases_early(controller, scheduler):
    controller.expand("R")
    handle = scheduler.handles[0]

    assert controller.notify_settled("R")
    assert handle.cancelled
    assert not controller.annotation("R").pinned
    assert not controller.notify_settled("R")


def test_settled_notification_keeps_drag_pin(controller, scheduler):
    controller.expand("R")
    controller.pin("R", 1, 2)

    assert not controller.notify_settled("R")
    assert controller.annotation("R").pinned


def test_drag_requires_visible_node(controller):
    with pytest.raises(NodeNotFoundException):
        controller.pin("A", 0, 0)


def test_position_updates_ignore_hidden_nodes(controller):
    applied = controller.update_positions([
        PositionUpdate(id="R", x=10, y=20),
        PositionUpdate(id="A", x=30, y=40),
    ])
    assert applied == 1
    assert (controller.annotation("R").x, controller.annotation("R").y) == (10, 20)
    assert "A" not in controller.annotations


def test_annotations_do_not_touch_dataset_records(controller, store):
    controller.expand("R")
    assert controller.visible.get_node("R") == store.get_node("R")
    assert "expanded" not in store.get_node("R").model_dump()


@pytest.mark.asyncio
async def test_asyncio_scheduler_releases_pin(store):
    config = Settings(PIN_RELEASE_DELAY=0.01)
    controller = ExpansionController(store, scheduler=AsyncioPinScheduler(), config=config)
    controller.seed()
    controller.expand("R")
    assert controller.annotation("R").pinned

    await asyncio.sleep(0.05)

    assert not controller.annotation("R").pinned


def test_default_scheduler_works_without_event_loop(store):
    controller = ExpansionController(store, config=Settings(PIN_RELEASE_DELAY=0.01))
    controller.seed()
    received = []
    controller.subscribe(received.append)

    result = controller.expand("R")

    assert [change.node_id for change in received] == ["R"]
    assert result.revision == controller.visible.revision == 2
    assert node_ids(controller) == ["R", "A", "B"]

    deadline = time.monotonic() + 2
    while controller.annotation("R").pinned and time.monotonic() < deadline:
        time.sleep(0.01)
    assert not controller.annotation("R").pinned


class FailingScheduler:
    def call_later(self, delay, callback):
        raise RuntimeError("timer unavailable")


def test_change_is_published_before_release_is_scheduled(store):
    controller = ExpansionController(store, scheduler=FailingScheduler(), config=CONFIG)
    controller.seed()
    received = []
    controller.subscribe(received.append)

    with pytest.raises(RuntimeError):
        controller.expand("R")

    assert [change.revision for change in received] == [2]
    assert controller.visible.revision == 2
    assert [node.id for node in received[0].added_nodes] == ["A", "B"]


def test_visible_graph_edge_membership(controller):
    controller.expand("R")
    assert controller.visible.contains_edge("R", "A")
    assert not controller.visible.contains_edge("A", "R")
    assert not controller.visible.contains_edge("A", "C")
