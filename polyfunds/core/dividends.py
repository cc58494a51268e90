"""Pro-rata dividend distribution, claims and revenue-based projections."""

from __future__ import annotations

import copy
from typing import List

import structlog

from polyfunds.core.context import LedgerContext
from polyfunds.core.errors import (
    InsufficientPoolFunds,
    InvalidAmount,
    MustSendEthForDividends,
    NoDividendsToClaim,
    NotBusinessOwner,
)
from polyfunds.core.registry import require_business
from polyfunds.core.state import Business, DividendDistribution

logger = structlog.get_logger()

MONTHS_PER_YEAR = 12


def potential_dividend(business: Business, token_amount: int, investor_share_percent: int) -> int:
    """
    Annual dividend projected for ``token_amount`` tokens from the business's own
    revenue figures. Integer steps, in this order:

      monthly profit = revenue * margin / 100
      annual profit  = monthly profit * 12
      investor share = annual profit * share% / 100
      per token      = investor share / token supply
      result         = per token * token amount
    """
    if business.monthly_revenue == 0 or business.profit_margin == 0:
        return 0
    monthly_profit = business.monthly_revenue * business.profit_margin // 100
    annual_profit = monthly_profit * MONTHS_PER_YEAR
    investor_share = annual_profit * investor_share_percent // 100
    per_token = investor_share // business.token_supply
    return per_token * token_amount


class DividendEngine:
    def __init__(self, ctx: LedgerContext):
        self.ctx = ctx

    def distribute_dividends(self, caller: str, business_id: int, amount: int) -> int:
        """Credit every holder ``amount * tokens // token_supply``.

        The divisor is the full token supply, so the share of unsold tokens stays
        in the pool unallocated. Returns the total credited to holders.
        """
        with self.ctx.transaction("distribute_dividends") as tx:
            state = tx.state
            business = require_business(state, business_id)
            if caller != business.owner:
                raise NotBusinessOwner()
            if amount <= 0:
                raise MustSendEthForDividends()

            credited = 0
            for (bid, holder), investment in state.investments.items():
                if bid != business_id or investment.token_amount == 0:
                    continue
                share = amount * investment.token_amount // business.token_supply
                if share:
                    key = (business_id, holder)
                    state.claimable[key] = state.claimable.get(key, 0) + share
                    credited += share

            state.pool_balance += amount
            business.total_dividends_paid += amount
            state.distributions.setdefault(business_id, []).append(
                DividendDistribution(
                    business_id=business_id,
                    amount=amount,
                    timestamp=tx.now,
                    token_supply=business.token_supply,
                    credited=credited,
                )
            )

            tx.emit("DividendDistributed", business_id=business_id, amount=amount, timestamp=tx.now)
            logger.info(
                "Dividends distributed",
                business_id=business_id,
                amount=amount,
                credited=credited,
            )
            return credited

    def claim_dividends(self, holder: str, business_id: int) -> int:
        with self.ctx.transaction("claim_dividends") as tx:
            state = tx.state
            require_business(state, business_id)
            key = (business_id, holder)
            amount = state.claimable.get(key, 0)
            if amount == 0:
                raise NoDividendsToClaim()
            if state.pool_balance < amount:
                raise InsufficientPoolFunds(
                    f"pool holds {state.pool_balance}, claim needs {amount}"
                )

            state.claimable[key] = 0
            state.pool_balance -= amount
            state.investments[key].dividends_claimed += amount
            state.rail.transfer(holder, amount)

            tx.emit("DividendClaimed", business_id=business_id, account=holder, amount=amount)
            return amount

    # ---------- reads ----------

    def get_claimable_dividends(self, holder: str, business_id: int) -> int:
        with self.ctx.reading() as state:
            return state.claimable.get((business_id, holder), 0)

    def get_distributions(self, business_id: int) -> List[DividendDistribution]:
        with self.ctx.reading() as state:
            require_business(state, business_id)
            return [copy.copy(entry) for entry in state.distributions.get(business_id, [])]

    def calculate_potential_dividend(self, business_id: int, token_amount: int) -> int:
        if token_amount < 0:
            raise InvalidAmount("Token amount cannot be negative")
        with self.ctx.reading() as state:
            business = require_business(state, business_id)
            return potential_dividend(business, token_amount, self.ctx.rules.investor_share_percent)
