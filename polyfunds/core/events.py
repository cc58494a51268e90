"""Append-only domain event log, pollable by business id or account."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from polyfunds import database


class Event(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    sequence: int
    name: str
    timestamp: int
    business_id: Optional[int] = None
    account: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)


class PendingEvent(BaseModel):
    """An event raised inside a transaction, numbered only once it commits."""

    name: str
    business_id: Optional[int] = None
    account: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)


class EventLog:
    """In-memory event log with an optional sqlite mirror.

    With a mirror, numbering continues from the highest sequence already stored,
    and a batch is written to the mirror before it becomes visible in memory.
    """

    def __init__(self, db_path: Optional[str] = None):
        self._events: List[Event] = []
        self._lock = threading.Lock()
        self._db_path = db_path
        self._last_sequence = 0
        if db_path:
            database.init_db(db_path)
            self._last_sequence = database.last_sequence(db_path)

    @property
    def db_path(self) -> Optional[str]:
        return self._db_path

    def append(self, pending: List[PendingEvent], timestamp: int) -> List[Event]:
        with self._lock:
            committed = [
                Event(
                    sequence=self._last_sequence + offset,
                    name=item.name,
                    timestamp=timestamp,
                    business_id=item.business_id,
                    account=item.account,
                    args=item.args,
                )
                for offset, item in enumerate(pending, start=1)
            ]
            if self._db_path and committed:
                database.save_events(self._db_path, [event.model_dump() for event in committed])
            self._events.extend(committed)
            self._last_sequence += len(committed)
            return committed

    def query(
        self,
        business_id: Optional[int] = None,
        account: Optional[str] = None,
        name: Optional[str] = None,
        after: int = 0,
    ) -> List[Event]:
        """Return events with sequence > ``after`` matching every given filter."""
        with self._lock:
            return [
                event
                for event in self._events
                if event.sequence > after
                and (business_id is None or event.business_id == business_id)
                and (account is None or event.account == account)
                and (name is None or event.name == name)
            ]

    def __len__(self) -> int:
        return len(self._events)
