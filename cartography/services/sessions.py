# cartography/services/sessions.py
import logging
from collections import OrderedDict

from cartography.core.config import Settings, settings as default_settings
from cartography.services.expansion import ExpansionController
from cartography.services.graph_store import GraphStore
from cartography.services.render_adapter import RenderAdapter
from cartography.services.text_layout import TextLayoutEngine

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    One seeded visible graph per user workspace, all sharing the same full graph.
    Holds at most MAX_SESSIONS workspaces; the least recently used one is dropped first.
    """

    def __init__(self, store: GraphStore, layout: TextLayoutEngine | None = None, config: Settings | None = None):
        self.store = store
        self.config = config or default_settings
        self.layout = layout or TextLayoutEngine(config=self.config)
        self._sessions: OrderedDict[str, RenderAdapter] = OrderedDict()

    def get(self, user_id: str) -> RenderAdapter:
        if user_id in self._sessions:
            self._sessions.move_to_end(user_id)
            return self._sessions[user_id]

        controller = ExpansionController(self.store, config=self.config)
        controller.seed()
        self._sessions[user_id] = RenderAdapter(controller, self.layout, config=self.config)
        logger.info("Started session for workspace %s.", user_id)

        while len(self._sessions) > self.config.MAX_SESSIONS:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted idle session for workspace %s.", evicted)
        return self._sessions[user_id]

    def reset(self, user_id: str) -> bool:
        return self._sessions.pop(user_id, None) is not None

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
