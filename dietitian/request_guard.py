# -*- coding: utf-8 -*-
"""Latest-request-wins guard for overlapping async lookups.

Each scope (one per screen-like consumer, e.g. "barcode" or "patient") tracks the
key of its most recent request. A response is committed only if its ticket is
still the latest one for the scope; anything older is dropped.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestTicket:
    scope: str
    key: Hashable
    seq: int


class LatestRequestGuard:
    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: Dict[str, RequestTicket] = {}
        self._values: Dict[str, Any] = {}

    def begin(self, scope: str, key: Hashable) -> RequestTicket:
        ticket = RequestTicket(scope=scope, key=key, seq=next(self._counter))
        self._latest[scope] = ticket
        return ticket

    def is_current(self, ticket: RequestTicket) -> bool:
        return self._latest.get(ticket.scope) == ticket

    def commit(self, ticket: RequestTicket, value: Any) -> bool:
        if not self.is_current(ticket):
            logger.info("Dropping stale %s response for %r", ticket.scope, ticket.key)
            return False
        self._values[ticket.scope] = value
        return True

    def release(self, ticket: RequestTicket) -> None:
        """Forget the scope once its latest request is done; older tickets are no-ops."""
        if self.is_current(ticket):
            self._latest.pop(ticket.scope, None)
            self._values.pop(ticket.scope, None)

    def value(self, scope: str) -> Optional[Any]:
        return self._values.get(scope)

    def current_key(self, scope: str) -> Optional[Hashable]:
        ticket = self._latest.get(scope)
        return ticket.key if ticket else None
