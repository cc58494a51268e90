from __future__ import annotations

import pytest

from polyfunds.core.errors import (
    BusinessNameRequired,
    BusinessNotFound,
    DescriptionRequired,
    InvalidProfitMargin,
    InvalidTokenSupply,
    NotBusinessOwner,
    TokenPriceTooLow,
    Unauthorized,
)
from polyfunds.tests.conftest import ADMIN, BUSINESS_OWNER, BUSINESS_OWNER_2, INVESTOR_1, ether


def create(platform, owner=BUSINESS_OWNER, **overrides):
    params = {
        "name": "TechCorp",
        "description": "Technology consulting business",
        "category": "Technology",
        "token_supply": 10_000,
        "token_price": ether("0.01"),
        "monthly_revenue": ether("10"),
        "profit_margin": 20,
    }
    params.update(overrides)
    return platform.registry.create_business(owner, **params)


def test_create_business_stores_every_field(platform):
    business_id = create(platform)

    info = platform.registry.get_business_info(business_id)
    assert business_id == 0
    assert info.name == "TechCorp"
    assert info.description == "Technology consulting business"
    assert info.category == "Technology"
    assert info.owner == BUSINESS_OWNER
    assert info.token_supply == 10_000
    assert info.token_price == ether("0.01")
    assert info.available_tokens == 10_000
    assert info.monthly_revenue == ether("10")
    assert info.profit_margin == 20
    assert info.active is True
    assert info.verified is False

    [created] = platform.events.query(business_id=0, name="BusinessCreated")
    assert created.account == BUSINESS_OWNER
    assert created.args == {
        "owner": BUSINESS_OWNER,
        "name": "TechCorp",
        "token_supply": 10_000,
        "token_price": ether("0.01"),
    }


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"name": ""}, BusinessNameRequired),
        ({"description": ""}, DescriptionRequired),
        ({"token_supply": 500}, InvalidTokenSupply),
        ({"token_supply": 999}, InvalidTokenSupply),
        ({"token_supply": 2_000_000}, InvalidTokenSupply),
        ({"token_price": ether("0.0005")}, TokenPriceTooLow),
        ({"profit_margin": 150}, InvalidProfitMargin),
        ({"profit_margin": -1}, InvalidProfitMargin),
    ],
)
def test_create_business_rejections(platform, overrides, error):
    with pytest.raises(error):
        create(platform, **overrides)
    assert platform.registry.business_count() == 0


def test_validation_order_reports_first_failure(platform):
    with pytest.raises(BusinessNameRequired):
        create(platform, name="", description="", token_supply=1, profit_margin=500)
    with pytest.raises(DescriptionRequired):
        create(platform, description="", token_supply=1)
    with pytest.raises(InvalidTokenSupply):
        create(platform, token_supply=1, token_price=1)
    with pytest.raises(TokenPriceTooLow):
        create(platform, token_price=1, profit_margin=500)


def test_boundary_values_are_accepted(platform):
    create(platform, token_supply=1_000, token_price=ether("0.001"), profit_margin=0)
    create(platform, token_supply=1_000_000, profit_margin=100, monthly_revenue=0)
    assert platform.registry.business_count() == 2


def test_owner_businesses_are_tracked_in_order(platform):
    create(platform, name="Business1")
    create(platform, owner=BUSINESS_OWNER_2, name="Other")
    create(platform, name="Business2")

    assert platform.registry.get_owner_businesses(BUSINESS_OWNER) == [0, 2]
    assert platform.registry.get_owner_businesses(BUSINESS_OWNER_2) == [1]
    assert platform.registry.get_owner_businesses(INVESTOR_1) == []


def test_admin_verifies_business(platform):
    business_id = create(platform)
    platform.registry.verify_business(ADMIN, business_id, True)

    assert platform.registry.get_business_info(business_id).verified is True
    event = platform.events.query(name="BusinessVerified")[-1]
    assert event.business_id == business_id
    assert event.args == {"verified": True}


def test_non_admin_cannot_verify_or_deactivate(platform):
    business_id = create(platform)

    with pytest.raises(Unauthorized):
        platform.registry.verify_business(INVESTOR_1, business_id, True)
    with pytest.raises(Unauthorized):
        platform.registry.deactivate_business(BUSINESS_OWNER, business_id)

    info = platform.registry.get_business_info(business_id)
    assert info.verified is False
    assert info.active is True


def test_deactivated_business_is_still_readable(platform):
    business_id = create(platform)
    platform.registry.deactivate_business(ADMIN, business_id)

    info = platform.registry.get_business_info(business_id)
    assert info.name == "TechCorp"
    assert info.active is False


def test_unknown_business(platform):
    with pytest.raises(BusinessNotFound):
        platform.registry.get_business_info(999)
    with pytest.raises(BusinessNotFound):
        platform.registry.verify_business(ADMIN, 999, True)


def test_owner_updates_metrics(platform):
    business_id = create(platform)
    platform.registry.update_business_metrics(BUSINESS_OWNER, business_id, ether("15"), 25)

    info = platform.registry.get_business_info(business_id)
    assert info.monthly_revenue == ether("15")
    assert info.profit_margin == 25
    event = platform.events.query(name="BusinessUpdated")[-1]
    assert event.args == {"monthly_revenue": ether("15"), "profit_margin": 25}


def test_metrics_update_rejections(platform):
    business_id = create(platform)

    with pytest.raises(NotBusinessOwner):
        platform.registry.update_business_metrics(INVESTOR_1, business_id, ether("15"), 25)
    with pytest.raises(InvalidProfitMargin):
        platform.registry.update_business_metrics(BUSINESS_OWNER, business_id, ether("15"), 150)

    assert platform.registry.get_business_info(business_id).profit_margin == 20


def test_list_businesses_filters(platform):
    create(platform, name="A", category="Technology")
    create(platform, name="B", category="Retail")
    platform.registry.verify_business(ADMIN, 1, True)

    assert [b.name for b in platform.registry.list_businesses()] == ["A", "B"]
    assert [b.name for b in platform.registry.list_businesses(verified_only=True)] == ["B"]
    assert [b.name for b in platform.registry.list_businesses(category="Technology")] == ["A"]


def test_returned_records_are_copies(platform):
    business_id = create(platform)
    info = platform.registry.get_business_info(business_id)
    info.verified = True

    assert platform.registry.get_business_info(business_id).verified is False
