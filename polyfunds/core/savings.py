"""Savings accounts with linear time-based yield paid out of a shared pool."""

from __future__ import annotations

from typing import NamedTuple, Optional

import structlog

from polyfunds.core.clock import SECONDS_PER_YEAR
from polyfunds.core.context import LedgerContext, Transaction
from polyfunds.core.errors import (
    InsufficientBalance,
    InsufficientPoolFunds,
    InvalidAmount,
    NoYieldAvailable,
)
from polyfunds.core.state import SavingsAccount

logger = structlog.get_logger()

BPS_DENOMINATOR = 10_000


class SavingsBalance(NamedTuple):
    principal: int
    accrued_yield: int
    total: int


def linear_yield(principal: int, annual_bps: int, elapsed_seconds: int) -> int:
    """Simple (non-compounding) interest for ``elapsed_seconds``, rounded down."""
    if principal <= 0 or elapsed_seconds <= 0:
        return 0
    return principal * annual_bps * elapsed_seconds // (BPS_DENOMINATOR * SECONDS_PER_YEAR)


class SavingsLedger:
    def __init__(self, ctx: LedgerContext):
        self.ctx = ctx

    # ---------- reads ----------

    def accrued_yield(self, account: SavingsAccount, now: int) -> int:
        return account.pending_yield + linear_yield(
            account.principal,
            self.ctx.rules.annual_yield_bps,
            now - account.deposit_timestamp,
        )

    def get_balance(self, address: str) -> SavingsBalance:
        with self.ctx.reading() as state:
            account = state.savings.get(address)
            if account is None:
                return SavingsBalance(0, 0, 0)
            accrued = self.accrued_yield(account, self.ctx.now())
            return SavingsBalance(account.principal, accrued, account.principal + accrued)

    def get_account(self, address: str) -> Optional[SavingsAccount]:
        with self.ctx.reading() as state:
            return state.savings.get(address)

    def pool_balance(self) -> int:
        with self.ctx.reading() as state:
            return state.pool_balance

    # ---------- commands ----------

    def deposit(self, address: str, amount: int) -> SavingsBalance:
        if amount <= 0:
            raise InvalidAmount("Deposit amount must be greater than 0")

        with self.ctx.transaction("deposit") as tx:
            state = tx.state
            account = state.savings.get(address)
            if account is None or not account.active:
                # an inactive record has zero principal and nothing owed
                account = SavingsAccount(principal=0, deposit_timestamp=tx.now)
                state.savings[address] = account
            else:
                self._settle(account, tx.now)

            account.principal += amount
            account.deposit_timestamp = tx.now
            account.active = True
            state.pool_balance += amount

            tx.emit("Deposited", account=address, amount=amount, timestamp=tx.now)
            logger.info("Savings deposit", account=address, amount=amount)
            return self._snapshot(account, tx.now)

    def withdraw(self, address: str, amount: int = 0) -> int:
        """Withdraw ``amount`` (0 means everything). Yield is paid before principal.

        Returns the amount paid out.
        """
        if amount < 0:
            raise InvalidAmount("Withdrawal amount cannot be negative")

        with self.ctx.transaction("withdraw") as tx:
            state = tx.state
            account = state.savings.get(address)
            principal = account.principal if account else 0
            accrued = self.accrued_yield(account, tx.now) if account else 0
            available = principal + accrued

            payout = available if amount == 0 else amount
            if payout == 0 or payout > available:
                raise InsufficientBalance()

            self._pay_from_pool(tx, address, payout)

            yield_portion = min(payout, accrued)
            account.pending_yield = accrued - yield_portion
            account.principal -= payout - yield_portion
            account.deposit_timestamp = tx.now
            account.active = account.principal > 0
            if not account.active:
                account.pending_yield = 0

            tx.emit(
                "Withdrawn",
                account=address,
                amount=payout,
                yield_portion=yield_portion,
                timestamp=tx.now,
            )
            logger.info("Savings withdrawal", account=address, amount=payout, active=account.active)
            return payout

    def claim_yield(self, address: str) -> int:
        with self.ctx.transaction("claim_yield") as tx:
            account = tx.state.savings.get(address)
            accrued = self.accrued_yield(account, tx.now) if account else 0
            if accrued == 0:
                raise NoYieldAvailable()

            self._pay_from_pool(tx, address, accrued)
            account.pending_yield = 0
            account.deposit_timestamp = tx.now

            tx.emit("YieldClaimed", account=address, amount=accrued)
            return accrued

    def fund_pool(self, sender: str, amount: int) -> int:
        """Top up the shared pool that yield and payouts are paid from."""
        if amount <= 0:
            raise InvalidAmount("Funding amount must be greater than 0")

        with self.ctx.transaction("fund_pool") as tx:
            tx.state.pool_balance += amount
            tx.emit("PoolFunded", account=sender, amount=amount)
            return tx.state.pool_balance

    # ---------- helpers ----------

    def _settle(self, account: SavingsAccount, now: int) -> None:
        account.pending_yield = self.accrued_yield(account, now)
        account.deposit_timestamp = now

    def _pay_from_pool(self, tx: Transaction, address: str, amount: int) -> None:
        if tx.state.pool_balance < amount:
            raise InsufficientPoolFunds(
                f"pool holds {tx.state.pool_balance}, payout needs {amount}"
            )
        tx.state.pool_balance -= amount
        tx.state.rail.transfer(address, amount)

    def _snapshot(self, account: SavingsAccount, now: int) -> SavingsBalance:
        accrued = self.accrued_yield(account, now)
        return SavingsBalance(account.principal, accrued, account.principal + accrued)
