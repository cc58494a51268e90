"""Business records: creation rules, admin flags and owner linkage."""

from __future__ import annotations

import copy
from typing import List, Optional

import structlog

from polyfunds.core.context import LedgerContext, Transaction
from polyfunds.core.errors import (
    BusinessNameRequired,
    BusinessNotFound,
    DescriptionRequired,
    InvalidAmount,
    InvalidProfitMargin,
    InvalidTokenSupply,
    NotBusinessOwner,
    TokenPriceTooLow,
    Unauthorized,
)
from polyfunds.core.state import Business, LedgerState

logger = structlog.get_logger()

BUSINESS_CATEGORIES = [
    "Technology",
    "Real Estate",
    "Healthcare",
    "Finance",
    "Retail",
    "Manufacturing",
    "Food & Beverage",
    "Energy",
    "Entertainment",
    "Transportation",
]


def require_admin(state: LedgerState, caller: str) -> None:
    if caller != state.admin:
        raise Unauthorized()


def require_business(state: LedgerState, business_id: int) -> Business:
    business = state.find_business(business_id)
    if business is None:
        raise BusinessNotFound(f"Business {business_id} does not exist")
    return business


def _check_profit_margin(profit_margin: int) -> None:
    if not 0 <= profit_margin <= 100:
        raise InvalidProfitMargin()


class BusinessRegistry:
    def __init__(self, ctx: LedgerContext):
        self.ctx = ctx

    # ---------- commands ----------

    def create_business(
        self,
        owner: str,
        name: str,
        description: str,
        category: str,
        token_supply: int,
        token_price: int,
        monthly_revenue: int = 0,
        profit_margin: int = 0,
    ) -> int:
        """Register a business and return its id.

        Checks run in a fixed order and the first failure wins:
          name, description, token supply range, minimum price, profit margin.
        """
        rules = self.ctx.rules
        if not name:
            raise BusinessNameRequired()
        if not description:
            raise DescriptionRequired()
        if not rules.min_token_supply <= token_supply <= rules.max_token_supply:
            raise InvalidTokenSupply()
        if token_price < rules.min_token_price:
            raise TokenPriceTooLow()
        _check_profit_margin(profit_margin)
        if monthly_revenue < 0:
            raise InvalidAmount("Monthly revenue cannot be negative")

        with self.ctx.transaction("create_business") as tx:
            state = tx.state
            business = Business(
                id=len(state.businesses),
                name=name,
                description=description,
                category=category,
                owner=owner,
                token_supply=token_supply,
                token_price=token_price,
                monthly_revenue=monthly_revenue,
                profit_margin=profit_margin,
                available_tokens=token_supply,
                created_at=tx.now,
            )
            state.businesses.append(business)
            state.owner_businesses.setdefault(owner, []).append(business.id)

            tx.emit(
                "BusinessCreated",
                business_id=business.id,
                account=owner,
                owner=owner,
                name=name,
                token_supply=token_supply,
                token_price=token_price,
            )
            logger.info("Business created", business_id=business.id, owner=owner, name=name)
            return business.id

    def verify_business(self, admin: str, business_id: int, verified: bool = True) -> None:
        with self.ctx.transaction("verify_business") as tx:
            business = self._admin_target(tx, admin, business_id)
            business.verified = verified
            tx.emit("BusinessVerified", business_id=business_id, verified=verified)

    def deactivate_business(self, admin: str, business_id: int) -> None:
        """Block new investment. Holdings and unclaimed dividends are untouched."""
        with self.ctx.transaction("deactivate_business") as tx:
            business = self._admin_target(tx, admin, business_id)
            business.active = False
            tx.emit("BusinessDeactivated", business_id=business_id)

    def update_business_metrics(
        self, caller: str, business_id: int, monthly_revenue: int, profit_margin: int
    ) -> None:
        with self.ctx.transaction("update_business_metrics") as tx:
            business = require_business(tx.state, business_id)
            if caller != business.owner:
                raise NotBusinessOwner()
            _check_profit_margin(profit_margin)
            if monthly_revenue < 0:
                raise InvalidAmount("Monthly revenue cannot be negative")

            business.monthly_revenue = monthly_revenue
            business.profit_margin = profit_margin
            tx.emit(
                "BusinessUpdated",
                business_id=business_id,
                monthly_revenue=monthly_revenue,
                profit_margin=profit_margin,
            )

    # ---------- reads ----------

    def get_business_info(self, business_id: int) -> Business:
        with self.ctx.reading() as state:
            return copy.copy(require_business(state, business_id))

    def get_owner_businesses(self, owner: str) -> List[int]:
        with self.ctx.reading() as state:
            return list(state.owner_businesses.get(owner, []))

    def list_businesses(
        self, verified_only: bool = False, category: Optional[str] = None
    ) -> List[Business]:
        with self.ctx.reading() as state:
            return [
                copy.copy(business)
                for business in state.businesses
                if (not verified_only or business.verified)
                and (category is None or business.category == category)
            ]

    def business_count(self) -> int:
        with self.ctx.reading() as state:
            return len(state.businesses)

    def _admin_target(self, tx: Transaction, admin: str, business_id: int) -> Business:
        require_admin(tx.state, admin)
        return require_business(tx.state, business_id)
