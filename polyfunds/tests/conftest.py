from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from polyfunds.app import create_app
from polyfunds.config import WEI, Settings
from polyfunds.core.clock import ManualClock
from polyfunds.core.platform import Platform
from polyfunds.core.state import LedgerRules

ADMIN = "0x00000000000000000000000000000000000000a1"
BUSINESS_OWNER = "0x00000000000000000000000000000000000000b1"
BUSINESS_OWNER_2 = "0x00000000000000000000000000000000000000b2"
INVESTOR_1 = "0x00000000000000000000000000000000000000c1"
INVESTOR_2 = "0x00000000000000000000000000000000000000c2"
FEE_RECIPIENT = "0x00000000000000000000000000000000000000f1"
USER_1 = "0x00000000000000000000000000000000000000d1"


def ether(amount: str) -> int:
    """parseEther equivalent for test readability: ether("0.01") == 10**16."""
    whole, _, frac = amount.partition(".")
    frac = (frac + "0" * 18)[:18]
    return int(whole) * WEI + int(frac or 0)


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000)


@pytest.fixture()
def platform(clock: ManualClock) -> Platform:
    return Platform(admin=ADMIN, rules=LedgerRules(), clock=clock)


@pytest.fixture()
def verified_business(platform: Platform) -> int:
    """10,000 tokens at 0.01, 20 monthly revenue, 30% margin, verified."""
    business_id = platform.registry.create_business(
        BUSINESS_OWNER,
        "InvestmentTest",
        "Investment Test Business",
        "Test",
        10_000,
        ether("0.01"),
        ether("20"),
        30,
    )
    platform.registry.verify_business(ADMIN, business_id, True)
    return business_id


@pytest.fixture()
def client(platform: Platform) -> FlaskClient:
    app = create_app(settings=Settings(admin_address=ADMIN), platform=platform)
    with app.test_client() as test_client:
        yield test_client
