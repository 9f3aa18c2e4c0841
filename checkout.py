"""
Checkout

Order totals and the four-step checkout wizard
(delivery -> payment -> processing -> success).
Payment is simulated server-side; the wizard only records the request.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from loguru import logger

from catalog import Cart
from client import StoreAPIError, StoreClient

TAX_RATE = 0.08


@dataclass
class OrderTotals:
    subtotal: float
    delivery_cost: float
    tax: float
    total: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "subtotal": self.subtotal,
            "deliveryCost": self.delivery_cost,
            "tax": self.tax,
            "total": self.total,
        }


def _price_and_quantity(line) -> tuple:
    if isinstance(line, dict):
        return line.get("price", 0), line.get("quantity", 1)
    return line.price, line.quantity


def compute_totals(lines: Iterable[Any], delivery_cost: float = 0) -> OrderTotals:
    subtotal = 0
    for line in lines:
        price, quantity = _price_and_quantity(line)
        subtotal += price * quantity
    delivery_cost = delivery_cost or 0
    tax = subtotal * TAX_RATE
    return OrderTotals(
        subtotal=subtotal,
        delivery_cost=delivery_cost,
        tax=tax,
        total=subtotal + delivery_cost + tax,
    )


class CheckoutError(Exception):
    """Shown to the shopper as a blocking message"""
    pass


class Step(str, Enum):
    DELIVERY = "delivery"
    PAYMENT = "payment"
    PROCESSING = "processing"
    SUCCESS = "success"


@dataclass
class DeliveryDetails:
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    delivery_address: str = ""

    def complete(self) -> bool:
        return all([self.customer_name, self.customer_email, self.customer_phone, self.delivery_address])


@dataclass
class CardInput:
    number: str = ""
    expiry: str = ""
    cvc: str = ""
    name: str = ""

    def complete(self) -> bool:
        return all([self.number, self.expiry, self.cvc, self.name])


class CheckoutWizard:
    def __init__(self, cart: Cart, client: StoreClient):
        self.cart = cart
        self.client = client
        self.reset()

    def reset(self):
        self.step = Step.DELIVERY
        self.details = DeliveryDetails()
        self.location: Optional[Dict[str, Any]] = None
        self.payment_method = "mpesa"
        self.mpesa_phone = ""
        self.card = CardInput()
        self.order: Optional[Dict[str, Any]] = None
        self.payment_id: Optional[str] = None
        self.message: Optional[str] = None

    def _expect(self, step: Step):
        if self.step != step:
            raise CheckoutError(f"Checkout is at '{self.step.value}', expected '{step.value}'")

    @property
    def totals(self) -> OrderTotals:
        cost = self.location.get("cost", 0) if self.location else 0
        return compute_totals(self.cart.lines, cost)

    def load_locations(self):
        return self.client.list_delivery_locations()

    # Step 1: delivery

    def set_delivery_details(self, customer_name: str, customer_email: str, customer_phone: str, delivery_address: str):
        self._expect(Step.DELIVERY)
        self.details = DeliveryDetails(customer_name, customer_email, customer_phone, delivery_address)

    def select_location(self, location: Dict[str, Any]):
        self._expect(Step.DELIVERY)
        self.location = location

    def proceed_to_payment(self):
        self._expect(Step.DELIVERY)
        if not self.location or not self.details.complete():
            raise CheckoutError("Please fill in all delivery details")
        self.step = Step.PAYMENT

    # Step 2: payment

    def back_to_delivery(self):
        self._expect(Step.PAYMENT)
        self.step = Step.DELIVERY

    def choose_mpesa(self, phone: str):
        self._expect(Step.PAYMENT)
        self.payment_method = "mpesa"
        self.mpesa_phone = phone

    def choose_card(self, number: str, expiry: str, cvc: str, name: str):
        self._expect(Step.PAYMENT)
        self.payment_method = "card"
        self.card = CardInput(number, expiry, cvc, name)

    def _order_payload(self) -> Dict[str, Any]:
        totals = self.totals
        return {
            "customerName": self.details.customer_name,
            "customerEmail": self.details.customer_email,
            "customerPhone": self.details.customer_phone,
            "deliveryAddress": self.details.delivery_address,
            "deliveryLocation": self.location,
            "cart": self.cart.to_order_lines(),
            **totals.to_dict(),
        }

    # Steps 3 and 4: processing, success

    def submit(self) -> Dict[str, Any]:
        self._expect(Step.PAYMENT)
        if self.payment_method == "mpesa" and not self.mpesa_phone:
            raise CheckoutError("Please enter your M-Pesa phone number")
        if self.payment_method == "card" and not self.card.complete():
            raise CheckoutError("Please fill in all card details")
        if not self.cart.lines:
            raise CheckoutError("Your cart is empty")

        self.step = Step.PROCESSING
        try:
            order = self.client.create_order(self._order_payload())
            if self.payment_method == "mpesa":
                result = self.client.pay_mpesa(self.mpesa_phone, order["total"], order["id"])
            else:
                card = {
                    "number": self.card.number,
                    "expiry": self.card.expiry,
                    "cvc": self.card.cvc,
                    "name": self.card.name,
                }
                result = self.client.pay_card(card, order["total"], order["id"])
        except StoreAPIError as e:
            logger.error(f"Error processing payment: {e}")
            self.step = Step.PAYMENT
            raise CheckoutError("Payment failed. Please try again.") from e

        self.order = order
        self.payment_id = result.get("paymentId")
        self.message = result.get("message")
        self.step = Step.SUCCESS
        return order

    def finish(self):
        """Close a completed checkout: empties the cart and starts over."""
        self._expect(Step.SUCCESS)
        self.cart.clear()
        self.reset()
