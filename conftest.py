import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Point the app at the bundled test dataset so tests never depend on a local .env
os.environ.setdefault("DATASET_PATH", str(ROOT / "tests" / "data" / "graph.json"))
os.environ.setdefault("JITTER_SEED", "7")
os.environ.setdefault("PIN_RELEASE_DELAY", "30")


class FixedAdvanceMeasurer:
    """Every character is `advance` pixels wide; counts calls so tests can check caching."""

    def __init__(self, advance: float = 6.0):
        self.advance = advance
        self.calls = 0

    def width(self, text: str) -> float:
        self.calls += 1
        return len(text) * self.advance


class ManualScheduler:
    """Collects deferred callbacks instead of running them on a clock."""

    class Handle:
        def __init__(self, delay, callback):
            self.delay = delay
            self.callback = callback
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.handles: list[ManualScheduler.Handle] = []

    def call_later(self, delay, callback):
        handle = self.Handle(delay, callback)
        self.handles.append(handle)
        return handle

    def run_pending(self):
        pending, self.handles = self.handles, []
        for handle in pending:
            if not handle.cancelled:
                handle.callback()


@pytest.fixture
def measurer():
    return FixedAdvanceMeasurer()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def raw_dataset():
    return {
        "nodes": [
            {"id": "R", "labels": ["HIMO"], "attributes": {"name": "HIMO", "url": "https://example.org/himo"}},
            {"id": "A", "labels": ["Fonds"], "attributes": {"name": "Archives of the US Senate"}},
            {"id": "B", "labels": ["Fonds"], "attributes": {"name": "Possible extra-archives"}},
            {"id": "C", "labels": ["Series"], "attributes": {"name": "Hearings"}},
            {"id": "D", "labels": ["PendingFonds"], "attributes": {"name": "Taylor Society Papers"}},
            {"id": "E", "labels": ["Context"], "attributes": {}},
        ],
        "edges": [
            {"source": "R", "target": "A", "label": "contains"},
            {"source": "R", "target": "B", "label": "contains"},
            {"source": "A", "target": "C", "label": "contains"},
            {"source": "B", "target": "D", "label": "suggests"},
            {"source": "A", "target": "D", "label": "mentions"},
            {"source": "B", "target": "E", "label": "suggests"},
        ],
    }
