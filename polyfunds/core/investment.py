"""Fractional token purchases with a per-investor cap and platform fee split."""

from __future__ import annotations

import copy
from typing import List, NamedTuple

import structlog

from polyfunds.config import ZERO_ADDRESS
from polyfunds.core.context import LedgerContext
from polyfunds.core.errors import (
    BusinessNotActive,
    BusinessNotVerified,
    ExceedsMaximumInvestmentLimit,
    IncorrectPaymentAmount,
    InsufficientTokensAvailable,
    InvalidAddress,
    InvalidAmount,
)
from polyfunds.core.registry import require_admin, require_business
from polyfunds.core.state import Business, Investment, LedgerRules

logger = structlog.get_logger()


class FeeSplit(NamedTuple):
    owner_amount: int
    platform_fee: int


def split_payment(paid_amount: int, fee_percent: int) -> FeeSplit:
    """Platform fee rounds down; the division remainder stays with the owner."""
    fee = paid_amount * fee_percent // 100
    return FeeSplit(owner_amount=paid_amount - fee, platform_fee=fee)


def max_tokens_per_investor(business: Business, rules: LedgerRules) -> int:
    return business.token_supply * rules.max_investment_percent // 100


class InvestmentEngine:
    def __init__(self, ctx: LedgerContext):
        self.ctx = ctx

    def invest_in_business(
        self, investor: str, business_id: int, token_amount: int, paid_amount: int
    ) -> Investment:
        """Buy ``token_amount`` tokens for exactly ``token_amount * token_price``.

        The fee and the owner's share are pushed out in the same transaction, so a
        failed transfer undoes the purchase.
        """
        rules = self.ctx.rules
        with self.ctx.transaction("invest_in_business") as tx:
            state = tx.state
            business = require_business(state, business_id)
            if not business.verified:
                raise BusinessNotVerified()
            if not business.active:
                raise BusinessNotActive()
            if token_amount <= 0:
                raise InvalidAmount("Token amount must be greater than 0")
            if paid_amount != token_amount * business.token_price:
                raise IncorrectPaymentAmount()
            if token_amount > business.available_tokens:
                raise InsufficientTokensAvailable()

            key = (business_id, investor)
            investment = state.investments.get(key)
            held = investment.token_amount if investment else 0
            if held + token_amount > max_tokens_per_investor(business, rules):
                raise ExceedsMaximumInvestmentLimit()

            if investment is None:
                investment = Investment(business_id=business_id, investor=investor)
                state.investments[key] = investment

            business.available_tokens -= token_amount
            business.total_raised += paid_amount
            investment.token_amount += token_amount
            investment.invested_amount += paid_amount

            split = split_payment(paid_amount, rules.platform_fee_percent)
            if split.platform_fee:
                state.rail.transfer(state.fee_recipient, split.platform_fee)
            state.rail.transfer(business.owner, split.owner_amount)

            tx.emit(
                "InvestmentMade",
                business_id=business_id,
                account=investor,
                investor=investor,
                token_amount=token_amount,
                paid_amount=paid_amount,
            )
            logger.info(
                "Investment made",
                business_id=business_id,
                investor=investor,
                tokens=token_amount,
                fee=split.platform_fee,
            )
            return copy.copy(investment)

    def set_fee_recipient(self, admin: str, new_recipient: str) -> None:
        with self.ctx.transaction("set_fee_recipient") as tx:
            require_admin(tx.state, admin)
            if not new_recipient or new_recipient == ZERO_ADDRESS:
                raise InvalidAddress()
            previous = tx.state.fee_recipient
            tx.state.fee_recipient = new_recipient
            tx.emit("FeeRecipientUpdated", previous=previous, fee_recipient=new_recipient)

    # ---------- reads ----------

    def fee_recipient(self) -> str:
        with self.ctx.reading() as state:
            return state.fee_recipient

    def get_user_business_tokens(self, investor: str, business_id: int) -> int:
        with self.ctx.reading() as state:
            investment = state.investments.get((business_id, investor))
            return investment.token_amount if investment else 0

    def get_user_investments(self, investor: str) -> List[Investment]:
        with self.ctx.reading() as state:
            return [
                copy.copy(investment)
                for (_, holder), investment in state.investments.items()
                if holder == investor
            ]

    def get_holders(self, business_id: int) -> List[Investment]:
        with self.ctx.reading() as state:
            require_business(state, business_id)
            return [
                copy.copy(investment)
                for (bid, _), investment in state.investments.items()
                if bid == business_id and investment.token_amount > 0
            ]
