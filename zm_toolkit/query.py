"""
Event search query construction.

The server's event index takes its filter as path segments of the form
``/Field OP:value`` followed by ``.json?&sort=...&direction=asc&page=N``:

    events/index/StartTime >=:2021-01-01 00:00:00/StartTime <=:2021-01-02 00:00:00/MonitorId:3.json?&sort=StartTime&direction=asc&page=1

Everything here runs before any network call; an invalid window or an
unresolvable monitor fails the build.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence
from urllib.parse import quote

import dateparser

from .errors import DateParseError, InvalidRangeError, MixedSelectorError, ValidationError
from .registry import EntityResolver
from .settings import EVENT_SORT_FIELD, EVENT_TIME_FORMAT, EVENTS_INDEX_ENDPOINT

logger = logging.getLogger(__name__)

EXCLUDE_PREFIX = "!"
NEGATE_PREFIX = "!"

OP_GTE = ">="
OP_LTE = "<="
OP_REGEXP = "REGEXP"
OP_NOT_REGEXP = "NOT REGEXP"

DATEPARSER_SETTINGS = {"PREFER_DATES_FROM": "past", "RETURN_AS_TIMEZONE_AWARE": False}


def parse_time(text) -> datetime:
    """
    Turn "yesterday", "2 hours ago" or "2021-01-01 08:00" into a datetime.

    Raises:
        DateParseError: the text is not understood.
    """
    if isinstance(text, datetime):
        return text
    parsed = dateparser.parse(str(text), settings=DATEPARSER_SETTINGS)
    if parsed is None:
        raise DateParseError(f"Could not understand the date '{text}'")
    return parsed


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    @classmethod
    def parse(cls, since, until=None, parser=parse_time) -> "TimeWindow":
        """
        Build a window from two date expressions; a missing end means now.

        Raises:
            DateParseError: either bound is not understood.
            InvalidRangeError: the start is after the end.
        """
        start = parser(since)
        end = parser(until) if until else datetime.now()
        if start > end:
            raise InvalidRangeError(
                f"Start of range ({start:{EVENT_TIME_FORMAT}}) is after its end ({end:{EVENT_TIME_FORMAT}})"
            )
        return cls(start, end)


@dataclass(frozen=True)
class NotesFilter:
    pattern: str
    negate: bool = False

    @classmethod
    def parse(cls, token: str) -> "NotesFilter":
        if token.startswith(NEGATE_PREFIX):
            return cls(token[len(NEGATE_PREFIX):], negate=True)
        return cls(token)

    @property
    def segment(self) -> str:
        op = OP_NOT_REGEXP if self.negate else OP_REGEXP
        return f"Notes {op}:{self.pattern}"


class SelectionMode(Enum):
    ALL = "all"
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class Query:
    window: TimeWindow
    monitor_ids: tuple[int, ...] = ()
    mode: SelectionMode = SelectionMode.ALL
    notes: Optional[NotesFilter] = None

    def segments(self) -> list[str]:
        segments = [
            f"StartTime {OP_GTE}:{self.window.start:{EVENT_TIME_FORMAT}}",
            f"StartTime {OP_LTE}:{self.window.end:{EVENT_TIME_FORMAT}}",
        ]
        segments.extend(f"MonitorId:{monitor_id}" for monitor_id in self.monitor_ids)
        if self.notes is not None:
            segments.append(self.notes.segment)
        return segments

    def path(self, page: int) -> str:
        """API path for one page of results."""
        filters = "".join("/" + quote(segment, safe=":") for segment in self.segments())
        return f"{EVENTS_INDEX_ENDPOINT}{filters}.json?&sort={EVENT_SORT_FIELD}&direction=asc&page={page}"


class QueryBuilder:
    """Turns user-level filters into a Query against a populated registry."""

    def __init__(self, resolver: EntityResolver):
        self.resolver = resolver

    def select_monitors(self, selectors: Sequence[str]) -> tuple[SelectionMode, tuple[int, ...]]:
        """
        Resolve monitor selector tokens to monitor ids.

        With no tokens every monitor is searched. Tokens prefixed with "!"
        form a deny-list: every active monitor except the named ones. Without
        the prefix each token is resolved and searched explicitly.

        Raises:
            MixedSelectorError: prefixed and plain tokens were combined.
            NotFoundError: a plain token names no monitor.
            ValidationError: the deny-list excludes every active monitor.
        """
        selectors = [s for s in selectors if s]
        if not selectors:
            return SelectionMode.ALL, ()

        excluded = [s for s in selectors if s.startswith(EXCLUDE_PREFIX)]
        if not excluded:
            ids = []
            for token in selectors:
                monitor_id = self.resolver.resolve_monitor(token)
                if monitor_id not in ids:
                    ids.append(monitor_id)
            return SelectionMode.ALLOW, tuple(ids)

        if len(excluded) != len(selectors):
            plain = ", ".join(s for s in selectors if not s.startswith(EXCLUDE_PREFIX))
            raise MixedSelectorError(
                f"Cannot mix excluded and included monitors (included: {plain}); use one style or the other",
                field_name="monitor",
            )

        deny = {s[len(EXCLUDE_PREFIX):] for s in excluded}
        known = set(self.resolver.registry.by_name) | {str(i) for i in self.resolver.registry.by_id}
        for key in sorted(deny - known):
            logger.warning(f"Excluded monitor '{key}' does not exist; ignoring it.")

        ids = tuple(
            m.id for m in self.resolver.registry
            if m.active and str(m.id) not in deny and m.name not in deny
        )
        if not ids:
            raise ValidationError("Every active monitor is excluded; nothing to search", field_name="monitor")
        return SelectionMode.DENY, ids

    def build(self, since, until=None, selectors: Sequence[str] = (), notes: Optional[str] = None) -> Query:
        """
        Assemble a query.

        Raises:
            DateParseError, InvalidRangeError: from the time window.
            MixedSelectorError, NotFoundError, ValidationError: from monitor selection.
        """
        window = since if isinstance(since, TimeWindow) else TimeWindow.parse(since, until)
        mode, monitor_ids = self.select_monitors(selectors)
        notes_filter = NotesFilter.parse(notes) if notes else None
        query = Query(window=window, monitor_ids=monitor_ids, mode=mode, notes=notes_filter)
        logger.debug(f"Built {mode.value} query over monitors {monitor_ids or 'ALL'}: {query.segments()}")
        return query
