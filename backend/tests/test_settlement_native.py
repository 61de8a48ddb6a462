import pytest

from helpers import (
    ALICE,
    BOB,
    NATIVE_KEY,
    OWNER_CREDENTIAL,
    PROJECT_WALLET,
    SALE_ADDRESS,
    ZERO,
    sample_project,
    to_scaled,
)
from launchpad.core.errors import (
    InsufficientPayment,
    InvalidPriceFeed,
    NotStarted,
    SoldOut,
    TransferFailed,
    ZeroAmount,
)
from launchpad.sale import NativePriceSource, TokenSale
from launchpad.sale.events import TokenBought, TokenSoldOut

ASTR_PRICE_E8 = 10_000_000
SUPPLY = to_scaled(50, 18)


@pytest.fixture
def project_id(sale, clock, feed):
    # 0.2 USD per token with a 5% native discount, native at 0.1 USD
    project_id = sale.add_project(
        OWNER_CREDENTIAL,
        sample_project(
            clock.now,
            token_decimals=18,
            usd_price_per_token_e6=200_000,
            max_allocate_amount=SUPPLY,
        ),
    )
    clock.advance(1000)
    feed.set_value(NATIVE_KEY, ASTR_PRICE_E8, clock.now)
    return project_id


@pytest.fixture(autouse=True)
def funded(native):
    native.set_balance(ALICE, to_scaled(1000, 18))
    native.set_balance(BOB, to_scaled(1000, 18))


def test_buy_full_supply(sale, native, project_id):
    granted = sale.buy_with_native(ALICE, project_id, SUPPLY, to_scaled(95, 18))

    assert granted == SUPPLY
    assert native.balance_of(PROJECT_WALLET) == to_scaled(95, 18)
    assert native.balance_of(ALICE) == to_scaled(905, 18)
    assert native.balance_of(SALE_ADDRESS) == 0
    assert sale.raised_amount(project_id).native_amount == to_scaled(95, 18)
    assert sale.events.events[-2:] == [
        TokenBought(project_id, ALICE, ZERO, SUPPLY, to_scaled(95, 18)),
        TokenSoldOut(project_id),
    ]


def test_excess_value_is_refunded(sale, native, project_id):
    sale.buy_with_native(ALICE, project_id, to_scaled(10, 18), to_scaled(100, 18))

    assert native.balance_of(PROJECT_WALLET) == to_scaled(19, 18)
    assert native.balance_of(ALICE) == to_scaled(981, 18)
    assert native.balance_of(SALE_ADDRESS) == 0
    committed = sale.get_users_committed_token_amounts(project_id, ALICE)
    assert committed[2].paid_token_address == ZERO
    assert committed[2].amount_paid == to_scaled(19, 18)


def test_partial_fill_charges_for_granted_amount_only(sale, native, project_id):
    sale.buy_with_native(ALICE, project_id, to_scaled(40, 18), to_scaled(76, 18))
    granted = sale.buy_with_native(BOB, project_id, to_scaled(20, 18), to_scaled(38, 18))

    assert granted == to_scaled(10, 18)
    assert native.balance_of(BOB) == to_scaled(981, 18)
    assert native.balance_of(PROJECT_WALLET) == to_scaled(95, 18)
    assert sale.allocated_amount(project_id) == SUPPLY

    with pytest.raises(SoldOut):
        sale.buy_with_native(BOB, project_id, 1, to_scaled(1, 18))


def test_insufficient_value_is_rejected(sale, native, project_id):
    with pytest.raises(InsufficientPayment) as exc:
        sale.buy_with_native(ALICE, project_id, to_scaled(10, 18), to_scaled(19, 18) - 1)

    assert str(exc.value) == "Sending native amount is not enough for payment"
    assert native.balance_of(ALICE) == to_scaled(1000, 18)
    assert native.balance_of(SALE_ADDRESS) == 0
    assert sale.allocated_amount(project_id) == 0


def test_value_above_buyer_balance_fails(sale, native, project_id):
    with pytest.raises(TransferFailed):
        sale.buy_with_native(ALICE, project_id, to_scaled(1, 18), to_scaled(2000, 18))
    assert sale.allocated_amount(project_id) == 0


def test_unset_price_is_rejected(sale, feed, project_id):
    feed.set_value(NATIVE_KEY, 0, 0)

    with pytest.raises(InvalidPriceFeed) as exc:
        sale.buy_with_native(ALICE, project_id, to_scaled(1, 18), to_scaled(10, 18))
    assert str(exc.value) == "Native price must be greater than 0"
    assert sale.allocated_amount(project_id) == 0


def test_window_is_checked_before_price(sale, clock, feed):
    project_id = sale.add_project(OWNER_CREDENTIAL, sample_project(clock.now))
    with pytest.raises(NotStarted):
        sale.buy_with_native(ALICE, project_id, 1, 1)


def test_zero_amount_is_rejected(sale, project_id):
    with pytest.raises(ZeroAmount):
        sale.buy_with_native(ALICE, project_id, 0, to_scaled(1, 18))


def test_stale_price_is_rejected_when_max_age_set(usdc, usdt, native, feed, clock):
    sale = TokenSale(
        owner=OWNER_CREDENTIAL.address,
        usdc=usdc,
        usdt=usdt,
        native=native,
        price_source=NativePriceSource(feed, NATIVE_KEY, clock=clock, max_age_seconds=60),
        address=SALE_ADDRESS,
        clock=clock,
    )
    project_id = sale.add_project(
        OWNER_CREDENTIAL, sample_project(clock.now, token_decimals=18, usd_price_per_token_e6=200_000)
    )
    clock.advance(1000)
    feed.set_value(NATIVE_KEY, ASTR_PRICE_E8, clock.now - 61)

    with pytest.raises(InvalidPriceFeed) as exc:
        sale.buy_with_native(ALICE, project_id, 1, to_scaled(1, 18))
    assert str(exc.value) == "Native price is older than 60s"

    feed.set_value(NATIVE_KEY, ASTR_PRICE_E8, clock.now - 60)
    assert sale.buy_with_native(ALICE, project_id, 1, to_scaled(1, 18)) == 1


def test_rejecting_payout_rolls_back(sale, native, project_id):
    native.set_accept(PROJECT_WALLET, False)

    with pytest.raises(TransferFailed):
        sale.buy_with_native(ALICE, project_id, to_scaled(10, 18), to_scaled(19, 18))

    assert native.balance_of(ALICE) == to_scaled(1000, 18)
    assert native.balance_of(SALE_ADDRESS) == 0
    assert sale.get_allocated_accounts(project_id) == []
    assert sale.raised_amount(project_id).native_amount == 0


def test_failed_refund_rolls_back(sale, native, project_id):
    native.on_receive(ALICE, _reject_from(SALE_ADDRESS))

    with pytest.raises(TransferFailed) as exc:
        sale.buy_with_native(ALICE, project_id, to_scaled(10, 18), to_scaled(20, 18))
    assert str(exc.value) == "Transfer failed"
    assert native.balance_of(ALICE) == to_scaled(1000, 18)
    assert native.balance_of(PROJECT_WALLET) == 0
    assert sale.allocated_amount(project_id) == 0

    # Exact payment needs no refund
    sale.buy_with_native(ALICE, project_id, to_scaled(10, 18), to_scaled(19, 18))
    assert native.balance_of(PROJECT_WALLET) == to_scaled(19, 18)


def test_reentrant_payout_sees_reserved_supply(sale, native, project_id):
    calls = []
    reentered = []

    def buy_again(sender, amount):
        if calls:
            return
        calls.append(sender)
        reentered.append(
            sale.buy_with_native(BOB, project_id, to_scaled(50, 18), to_scaled(95, 18))
        )

    native.on_receive(PROJECT_WALLET, buy_again)
    granted = sale.buy_with_native(ALICE, project_id, to_scaled(40, 18), to_scaled(76, 18))

    assert granted == to_scaled(40, 18)
    assert reentered == [to_scaled(10, 18)]
    assert sale.allocated_amount(project_id) == SUPPLY
    assert sale.get_user_allocated_amount(project_id, BOB) == to_scaled(10, 18)
    assert native.balance_of(BOB) == to_scaled(981, 18)
    assert native.balance_of(PROJECT_WALLET) == to_scaled(95, 18)
    assert TokenSoldOut(project_id) in sale.events.events


def test_failing_reentrant_payout_undoes_inner_purchase(sale, native, project_id):
    calls = []

    def buy_then_fail(sender, amount):
        if calls:
            return
        calls.append(sender)
        sale.buy_with_native(BOB, project_id, to_scaled(5, 18), to_scaled(10, 18))
        raise RuntimeError("payout wallet is broken")

    native.on_receive(PROJECT_WALLET, buy_then_fail)

    with pytest.raises(TransferFailed):
        sale.buy_with_native(ALICE, project_id, to_scaled(10, 18), to_scaled(19, 18))

    assert sale.allocated_amount(project_id) == 0
    assert sale.get_allocated_accounts(project_id) == []
    assert native.balance_of(ALICE) == to_scaled(1000, 18)
    assert native.balance_of(BOB) == to_scaled(1000, 18)
    assert not any(isinstance(e, TokenBought) for e in sale.events.events)


def _reject_from(source):
    def hook(sender, amount):
        if sender == source:
            raise RuntimeError("receiver rejects value")

    return hook
