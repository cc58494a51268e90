"""Single-writer transaction boundary shared by all ledger engines.

Conventions:
  - Writers hold the re-entrant lock for the whole command and see one timestamp.
  - State is snapshotted on entry and restored if the command raises.
  - Events are appended to the log only after the command returns normally.
  - A failure to record the events rolls the command back like any other error.
  - Readers take the same lock, so they never see a half-applied command.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

import structlog

from polyfunds.core.events import EventLog, PendingEvent
from polyfunds.core.state import LedgerRules, LedgerState

logger = structlog.get_logger()


@dataclass
class Transaction:
    state: LedgerState
    now: int
    events: List[PendingEvent] = field(default_factory=list)

    def emit(
        self,
        name: str,
        /,
        business_id: Optional[int] = None,
        account: Optional[str] = None,
        **args: Any,
    ) -> None:
        self.events.append(
            PendingEvent(name=name, business_id=business_id, account=account, args=args)
        )


class LedgerContext:
    def __init__(self, state: LedgerState, rules: LedgerRules, clock, events: EventLog):
        self.state = state
        self.rules = rules
        self.clock = clock
        self.events = events
        self._lock = threading.RLock()
        self._active: Optional[Transaction] = None

    @contextmanager
    def transaction(self, operation: str) -> Iterator[Transaction]:
        with self._lock:
            # nested commands join the outer transaction
            if self._active is not None:
                yield self._active
                return

            # full copy of the ledger, so cost grows with the number of records
            snapshot = copy.deepcopy(self.state)
            tx = Transaction(state=self.state, now=self.clock.now())
            self._active = tx
            try:
                yield tx
                committed = self.events.append(tx.events, tx.now)
            except Exception as exc:
                self._restore(snapshot)
                logger.warning(
                    "Ledger command rejected",
                    operation=operation,
                    error=getattr(exc, "code", type(exc).__name__),
                    reason=str(exc),
                )
                raise
            finally:
                self._active = None

            logger.info(
                "Ledger command committed",
                operation=operation,
                timestamp=tx.now,
                events=[event.name for event in committed],
            )

    @contextmanager
    def reading(self) -> Iterator[LedgerState]:
        with self._lock:
            yield self.state

    def now(self) -> int:
        return self.clock.now()

    def _restore(self, snapshot: LedgerState) -> None:
        # engines keep a reference to self.state, so restore in place
        self.state.__dict__.update(snapshot.__dict__)
