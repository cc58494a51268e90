"""One ledger instance: shared state, clock and event log behind the four engines."""

from __future__ import annotations

from typing import Optional

import structlog

from polyfunds.config import Settings
from polyfunds.core.clock import SystemClock
from polyfunds.core.context import LedgerContext
from polyfunds.core.dividends import DividendEngine
from polyfunds.core.events import EventLog
from polyfunds.core.investment import InvestmentEngine
from polyfunds.core.registry import BusinessRegistry, require_admin
from polyfunds.core.savings import SavingsLedger
from polyfunds.core.state import LedgerRules, LedgerState
from polyfunds.core.stats import PlatformStatsAggregator

logger = structlog.get_logger()


class Platform:
    def __init__(
        self,
        admin: str,
        fee_recipient: Optional[str] = None,
        rules: Optional[LedgerRules] = None,
        clock=None,
        events: Optional[EventLog] = None,
    ):
        state = LedgerState(admin=admin, fee_recipient=fee_recipient or admin)
        self.ctx = LedgerContext(
            state=state,
            rules=rules if rules is not None else LedgerRules(),
            clock=clock if clock is not None else SystemClock(),
            events=events if events is not None else EventLog(),
        )
        self.savings = SavingsLedger(self.ctx)
        self.registry = BusinessRegistry(self.ctx)
        self.investments = InvestmentEngine(self.ctx)
        self.dividends = DividendEngine(self.ctx)
        self.stats = PlatformStatsAggregator(self.ctx)
        logger.info("Platform initialized", admin=admin, fee_recipient=state.fee_recipient)

    @classmethod
    def from_settings(cls, settings: Settings, clock=None) -> "Platform":
        return cls(
            admin=settings.admin_address,
            fee_recipient=settings.effective_fee_recipient,
            rules=LedgerRules.from_settings(settings),
            clock=clock,
            events=EventLog(db_path=settings.event_db_path),
        )

    @property
    def admin(self) -> str:
        return self.ctx.state.admin

    @property
    def events(self) -> EventLog:
        return self.ctx.events

    @property
    def rail(self):
        return self.ctx.state.rail

    def emergency_withdraw(self, admin: str) -> int:
        """Send the whole pool to the admin. Returns the amount sent."""
        with self.ctx.transaction("emergency_withdraw") as tx:
            require_admin(tx.state, admin)
            amount = tx.state.pool_balance
            tx.state.pool_balance = 0
            if amount:
                tx.state.rail.transfer(admin, amount)
            tx.emit("EmergencyWithdrawal", account=admin, amount=amount)
            logger.warning("Emergency withdrawal", admin=admin, amount=amount)
            return amount
