from __future__ import annotations

from polyfunds.config import Settings
from polyfunds.core.clock import ManualClock
from polyfunds.core.platform import Platform
from polyfunds.core.state import LedgerRules
from polyfunds.tests.conftest import ADMIN, BUSINESS_OWNER, INVESTOR_1, ether


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("POLYFUNDS_ADMIN_ADDRESS", ADMIN)
    monkeypatch.setenv("POLYFUNDS_PLATFORM_FEE_PERCENT", "5")

    settings = Settings(_env_file=None)

    assert settings.admin_address == ADMIN
    assert settings.platform_fee_percent == 5
    assert settings.effective_fee_recipient == ADMIN
    assert LedgerRules.from_settings(settings).platform_fee_percent == 5


def test_platform_uses_configured_rules():
    settings = Settings(
        _env_file=None,
        admin_address=ADMIN,
        platform_fee_percent=10,
        max_investment_percent=50,
    )
    platform = Platform.from_settings(settings, clock=ManualClock())
    business_id = platform.registry.create_business(
        BUSINESS_OWNER, "Configured", "Custom rules", "Finance", 1_000, ether("1")
    )
    platform.registry.verify_business(ADMIN, business_id, True)

    platform.investments.invest_in_business(INVESTOR_1, business_id, 500, ether("500"))

    assert platform.rail.balance_of(ADMIN) == ether("50")
    assert platform.rail.balance_of(BUSINESS_OWNER) == ether("450")
