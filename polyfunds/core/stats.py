"""Read-only rollups. Every figure is summed from stored records at read time."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

from polyfunds.core.context import LedgerContext


class PlatformStats(BaseModel):
    total_businesses_count: int
    total_investment_volume_amount: int
    total_dividends_paid_amount: int
    contract_balance: int
    total_investors: int


class TotalStats(BaseModel):
    total_savings_amount: int
    total_businesses: int
    contract_balance: int


class PortfolioEntry(BaseModel):
    business_id: int
    business_name: str
    token_balance: int
    invested_amount: int
    current_value: int
    claimable_dividends: int
    total_dividends_claimed: int


class PlatformStatsAggregator:
    def __init__(self, ctx: LedgerContext):
        self.ctx = ctx

    def get_platform_stats(self) -> PlatformStats:
        with self.ctx.reading() as state:
            return PlatformStats(
                total_businesses_count=len(state.businesses),
                total_investment_volume_amount=sum(b.total_raised for b in state.businesses),
                total_dividends_paid_amount=sum(b.total_dividends_paid for b in state.businesses),
                contract_balance=state.pool_balance,
                total_investors=len(
                    {investor for (_, investor), inv in state.investments.items() if inv.token_amount > 0}
                ),
            )

    def get_total_stats(self) -> TotalStats:
        with self.ctx.reading() as state:
            return TotalStats(
                total_savings_amount=sum(account.principal for account in state.savings.values()),
                total_businesses=len(state.businesses),
                contract_balance=state.pool_balance,
            )

    def get_portfolio(self, investor: str) -> List[PortfolioEntry]:
        with self.ctx.reading() as state:
            entries: List[PortfolioEntry] = []
            for (business_id, holder), investment in state.investments.items():
                if holder != investor:
                    continue
                business = state.businesses[business_id]
                entries.append(
                    PortfolioEntry(
                        business_id=business_id,
                        business_name=business.name,
                        token_balance=investment.token_amount,
                        invested_amount=investment.invested_amount,
                        current_value=investment.token_amount * business.token_price,
                        claimable_dividends=state.claimable.get((business_id, holder), 0),
                        total_dividends_claimed=investment.dividends_claimed,
                    )
                )
            return entries
