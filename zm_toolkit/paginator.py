"""
Paged event retrieval.

The first page tells us how many pages there are; the rest are fetched in
order. Any failed page aborts the whole retrieval: a partial event list would
silently produce an incomplete video or image set.
"""
import logging
from typing import Iterator

from .models import Event
from .query import Query

logger = logging.getLogger(__name__)


def _page_count(data: dict) -> int:
    pagination = data.get("pagination") or {}
    try:
        return max(1, int(pagination.get("pageCount") or 1))
    except (TypeError, ValueError):
        logger.warning(f"Unexpected pagination block {pagination!r}; assuming a single page.")
        return 1


def iter_event_pages(session, query: Query) -> Iterator[list[Event]]:
    """
    Fetch a query's result pages in order.

    Yields:
        The events of each page, in the server's (chronological) order.

    Raises:
        TransportError: from the session, on the first failed page.
    """
    page_num = 1
    page_count = 1
    while page_num <= page_count:
        data = session.get_json(query.path(page_num))
        if page_num == 1:
            page_count = _page_count(data)
        events = [Event.from_api_dict(item) for item in data.get("events", [])]
        if events:
            first_event_ts = events[0].start_time or "N/A"
            last_event_ts = events[-1].start_time or "N/A"
            logger.info(f"Fetched event page {page_num}/{page_count} ({len(events)} events). "
                        f"Timestamp range: {first_event_ts} to {last_event_ts}")
        else:
            logger.info(f"Event page {page_num}/{page_count} is empty.")
        yield events
        page_num += 1


def fetch_all_events(session, query: Query) -> list[Event]:
    """All events matching ``query``, concatenated in page order."""
    events = []
    for page in iter_event_pages(session, query):
        events.extend(page)
    logger.info(f"Retrieved {len(events)} events.")
    return events
