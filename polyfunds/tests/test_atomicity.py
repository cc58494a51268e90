from __future__ import annotations

import threading

import pytest

from polyfunds.core.errors import PaymentFailed
from polyfunds.tests.conftest import ADMIN, BUSINESS_OWNER, INVESTOR_1, USER_1, ether


def test_failed_owner_payout_rolls_back_investment(platform, verified_business):
    platform.rail.frozen.add(BUSINESS_OWNER)
    events_before = len(platform.events)

    with pytest.raises(PaymentFailed):
        platform.investments.invest_in_business(INVESTOR_1, verified_business, 100, ether("1"))

    info = platform.registry.get_business_info(verified_business)
    assert info.available_tokens == 10_000
    assert info.total_raised == 0
    assert platform.investments.get_user_business_tokens(INVESTOR_1, verified_business) == 0
    # the fee leg had already been paid inside the transaction
    assert platform.rail.balance_of(ADMIN) == 0
    assert len(platform.events) == events_before


def test_failed_withdrawal_transfer_keeps_savings(platform):
    platform.savings.deposit(USER_1, ether("1.0"))
    platform.rail.frozen.add(USER_1)

    with pytest.raises(PaymentFailed):
        platform.savings.withdraw(USER_1, 0)

    assert platform.savings.get_balance(USER_1).principal == ether("1.0")
    assert platform.stats.get_total_stats().contract_balance == ether("1.0")

    platform.rail.frozen.discard(USER_1)
    assert platform.savings.withdraw(USER_1, 0) == ether("1.0")


def test_concurrent_deposits_are_serialised(platform):
    def deposit_many():
        for _ in range(50):
            platform.savings.deposit(USER_1, 1)

    workers = [threading.Thread(target=deposit_many) for _ in range(4)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert platform.savings.get_balance(USER_1).principal == 200
    assert len(platform.events.query(name="Deposited")) == 200
    assert [event.sequence for event in platform.events.query()] == list(range(1, 201))


def test_event_fields_named_like_emit_parameters_are_kept(platform):
    with platform.ctx.transaction("rename") as tx:
        tx.emit("Renamed", business_id=7, account=USER_1, name="New name")

    [event] = platform.events.query(name="Renamed")
    assert event.business_id == 7
    assert event.account == USER_1
    assert event.args == {"name": "New name"}
