"""Client-session selection state and the accept/reject caller rules."""
import logging
from typing import Dict, List, Optional, Tuple

from config import settings
from core.domain import TrailEntry
from services.decision_processor import DecisionProcessor
from services.recommendation_store import RecommendationStore

logger = logging.getLogger(settings.LOGGER_NAME)

SelectionKey = Tuple[str, int]


class SelectionManager:
    """
    In-memory checkbox state per (document, version). Never persisted and
    never shared: one instance belongs to one viewing session.
    """

    def __init__(self):
        self._selections: Dict[SelectionKey, Dict[str, bool]] = {}

    def toggle(self, document_name: str, version: int, item_id: str) -> bool:
        """Flip an id (absent counts as unchecked) and return its new value."""
        checked = self._selections.setdefault((document_name, version), {})
        checked[item_id] = not checked.get(item_id, False)
        return checked[item_id]

    def is_selected(self, document_name: str, version: int, item_id: str) -> bool:
        return self._selections.get((document_name, version), {}).get(item_id, False)

    def selected_ids(self, document_name: str, version: int) -> List[str]:
        checked = self._selections.get((document_name, version), {})
        return [item_id for item_id, on in checked.items() if on]

    def clear(self, document_name: str, version: int) -> None:
        self._selections.pop((document_name, version), None)


class ReviewSession:
    """
    Session-scoped context for reviewing one folder.

    Holds the selection and applies the product rules before calling the
    Decision Processor: Accept with nothing checked accepts every pending
    item of that version; Reject with nothing checked does nothing.
    """

    def __init__(self, folder: str, store: RecommendationStore, processor: DecisionProcessor,
                 selection: Optional[SelectionManager] = None):
        self.folder = folder
        self.store = store
        self.processor = processor
        self.selection = selection or SelectionManager()
        self.trail: List[TrailEntry] = []

    async def refresh(self, document_name: Optional[str] = None) -> List[TrailEntry]:
        self.trail = await self.store.list_trail(self.folder, document_name)
        return self.trail

    def toggle(self, entry: TrailEntry, item_id: str) -> bool:
        return self.selection.toggle(entry.document_name, entry.version, item_id)

    async def accept(self, entry: TrailEntry) -> List[str]:
        """Accept checked ids, or all pending ids when none are checked. Returns the ids sent."""
        chosen = self.selection.selected_ids(entry.document_name, entry.version)
        effective = chosen or entry.pending_ids()
        if not effective:
            logger.info(f"Nothing to accept for '{entry.document_name}' v{entry.version}")
            return []

        await self.processor.decide(self.folder, entry.document_name, entry.version, effective, [])
        self.selection.clear(entry.document_name, entry.version)
        return effective

    async def reject(self, entry: TrailEntry) -> List[str]:
        """Reject checked ids only. Returns the ids sent (empty when nothing was checked)."""
        chosen = self.selection.selected_ids(entry.document_name, entry.version)
        if not chosen:
            return []

        await self.processor.decide(self.folder, entry.document_name, entry.version, [], chosen)
        self.selection.clear(entry.document_name, entry.version)
        return chosen
