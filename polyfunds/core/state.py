"""Mutable ledger records and the payment rail they settle through."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from polyfunds.config import ZERO_ADDRESS
from polyfunds.core.errors import PaymentFailed


@dataclass(frozen=True)
class LedgerRules:
    """Economic constants fixed for the lifetime of a platform instance."""

    annual_yield_bps: int = 500
    platform_fee_percent: int = 3
    max_investment_percent: int = 25
    min_token_supply: int = 1_000
    max_token_supply: int = 1_000_000
    min_token_price: int = 10**15
    investor_share_percent: int = 70

    @classmethod
    def from_settings(cls, settings) -> "LedgerRules":
        return cls(
            annual_yield_bps=settings.annual_yield_bps,
            platform_fee_percent=settings.platform_fee_percent,
            max_investment_percent=settings.max_investment_percent,
            min_token_supply=settings.min_token_supply,
            max_token_supply=settings.max_token_supply,
            min_token_price=settings.min_token_price,
            investor_share_percent=settings.investor_share_percent,
        )


@dataclass
class SavingsAccount:
    principal: int
    deposit_timestamp: int
    active: bool = True
    # yield settled at the last principal change, still owed to the depositor
    pending_yield: int = 0


@dataclass
class Business:
    id: int
    name: str
    description: str
    category: str
    owner: str
    token_supply: int
    token_price: int
    monthly_revenue: int
    profit_margin: int
    available_tokens: int
    created_at: int
    total_raised: int = 0
    total_dividends_paid: int = 0
    verified: bool = False
    active: bool = True

    @property
    def tokens_sold(self) -> int:
        return self.token_supply - self.available_tokens


@dataclass
class Investment:
    business_id: int
    investor: str
    token_amount: int = 0
    invested_amount: int = 0
    dividends_claimed: int = 0


@dataclass
class DividendDistribution:
    business_id: int
    amount: int
    timestamp: int
    token_supply: int
    credited: int


class PaymentRail:
    """External balances reached by push payments out of the ledger.

    A frozen destination rejects transfers, which aborts the surrounding
    transaction.
    """

    def __init__(self) -> None:
        self.balances: Dict[str, int] = {}
        self.frozen: Set[str] = set()

    def transfer(self, to: str, amount: int) -> None:
        if not to or to == ZERO_ADDRESS:
            raise PaymentFailed(f"cannot pay {amount} to an empty address")
        if to in self.frozen:
            raise PaymentFailed(f"transfer of {amount} to frozen account {to} failed")
        self.balances[to] = self.balances.get(to, 0) + amount

    def balance_of(self, address: str) -> int:
        return self.balances.get(address, 0)


@dataclass
class LedgerState:
    """Everything a transaction may touch. Snapshotted as a whole for rollback."""

    admin: str
    fee_recipient: str
    pool_balance: int = 0
    savings: Dict[str, SavingsAccount] = field(default_factory=dict)
    businesses: List[Business] = field(default_factory=list)
    owner_businesses: Dict[str, List[int]] = field(default_factory=dict)
    investments: Dict[Tuple[int, str], Investment] = field(default_factory=dict)
    claimable: Dict[Tuple[int, str], int] = field(default_factory=dict)
    distributions: Dict[int, List[DividendDistribution]] = field(default_factory=dict)
    rail: PaymentRail = field(default_factory=PaymentRail)

    def find_business(self, business_id: int) -> Optional[Business]:
        if 0 <= business_id < len(self.businesses):
            return self.businesses[business_id]
        return None
