import math

import pytest

from catalog import Cart
from checkout import TAX_RATE, CheckoutError, CheckoutWizard, Step, compute_totals
from client import StoreClient

SHOE = {"id": "p1", "name": "Runner", "price": 1000, "category": "Sneakers"}


def test_example_totals():
    totals = compute_totals([{"price": 1000, "quantity": 2}], 0)
    assert totals.subtotal == 2000
    assert math.isclose(totals.tax, 160)
    assert math.isclose(totals.total, 2160)


def test_totals_invariant_with_delivery_fee():
    lines = [{"price": 1234.5, "quantity": 3}, {"price": 99.99, "quantity": 1}]
    totals = compute_totals(lines, 550)
    assert math.isclose(totals.tax, TAX_RATE * totals.subtotal)
    assert math.isclose(totals.total, totals.subtotal + totals.delivery_cost + totals.tax)


def test_totals_accept_cart_lines():
    cart = Cart()
    cart.add(SHOE, 9, "Black")
    cart.add(SHOE, 9, "Black")
    assert compute_totals(cart.lines, 0).to_dict() == {
        "subtotal": 2000,
        "deliveryCost": 0,
        "tax": 2000 * TAX_RATE,
        "total": 2000 + 2000 * TAX_RATE,
    }


@pytest.fixture
def wizard(client, kv):
    cart = Cart()
    cart.add(SHOE, 9, "Black", quantity=2)
    return CheckoutWizard(cart, StoreClient(base_url="", session=client, timeout=None))


def _fill_delivery(wizard, location):
    wizard.set_delivery_details("Jane Doe", "jane@example.com", "0712345678", "Moi Avenue 1")
    wizard.select_location(location)


def test_delivery_details_are_required(wizard, nairobi):
    wizard.select_location(nairobi)
    with pytest.raises(CheckoutError, match="delivery details"):
        wizard.proceed_to_payment()
    assert wizard.step == Step.DELIVERY


def test_mpesa_checkout_runs_to_success(wizard, kv, nairobi):
    _fill_delivery(wizard, nairobi)
    wizard.proceed_to_payment()
    assert wizard.step == Step.PAYMENT

    wizard.choose_mpesa("0712345678")
    order = wizard.submit()

    assert wizard.step == Step.SUCCESS
    assert math.isclose(order["total"], 2160)
    assert order["status"] == "pending"
    payment = kv.get(f"payment:{wizard.payment_id}")
    assert payment["method"] == "mpesa"
    assert payment["orderId"] == order["id"]
    assert "STK push" in wizard.message

    wizard.finish()
    assert wizard.step == Step.DELIVERY
    assert wizard.cart.lines == []


def test_card_checkout_needs_all_fields(wizard, kv, nairobi):
    _fill_delivery(wizard, nairobi)
    wizard.proceed_to_payment()
    wizard.choose_card("4242424242424242", "12/30", "", "Jane Doe")
    with pytest.raises(CheckoutError, match="card details"):
        wizard.submit()
    assert wizard.step == Step.PAYMENT
    assert kv.get_by_prefix("order:") == []

    wizard.choose_card("4242424242424242", "12/30", "123", "Jane Doe")
    wizard.submit()
    payment = kv.get(f"payment:{wizard.payment_id}")
    assert payment["method"] == "card"
    assert "cardDetails" not in payment


def test_failed_order_returns_to_payment_step(wizard, nairobi):
    _fill_delivery(wizard, nairobi)
    wizard.details.customer_email = "not-an-email"
    wizard.proceed_to_payment()
    wizard.choose_mpesa("0712345678")
    with pytest.raises(CheckoutError, match="Payment failed"):
        wizard.submit()
    assert wizard.step == Step.PAYMENT


def test_transitions_out_of_order_are_rejected(wizard):
    with pytest.raises(CheckoutError):
        wizard.submit()
    with pytest.raises(CheckoutError):
        wizard.finish()


def test_reset_clears_form(wizard, nairobi):
    _fill_delivery(wizard, nairobi)
    wizard.proceed_to_payment()
    wizard.choose_mpesa("0712345678")
    wizard.reset()
    assert wizard.step == Step.DELIVERY
    assert wizard.location is None
    assert wizard.mpesa_phone == ""
    assert not wizard.details.complete()
