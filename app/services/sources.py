# app/services/sources.py
import logging
from typing import Dict, List, Sequence

from app.models.assistant import CalendarEvent, Email, StoredFile

logger = logging.getLogger(__name__)


class SourceConnector:
    """
    A third-party data source (mail, calendar, file storage) for one user.
    Subclasses override whichever of the three feeds they provide.
    """

    name = "source"

    async def emails(self, uid: str) -> List[Email]:
        return []

    async def files(self, uid: str) -> List[StoredFile]:
        return []

    async def calendar_events(self, uid: str) -> List[CalendarEvent]:
        return []


async def gather_sources(connectors: Sequence[SourceConnector], uid: str) -> Dict[str, list]:
    """
    Collect every feed from every connector. A connector that fails is logged
    and skipped so one broken integration does not block the assistant.
    """
    out: Dict[str, list] = {"emails": [], "files": [], "calendar_events": []}
    for c in connectors:
        for feed in out:
            try:
                out[feed].extend(await getattr(c, feed)(uid))
            except Exception:
                logger.exception("Connector %s failed on %s for uid=%s", c.name, feed, uid)
    return out
