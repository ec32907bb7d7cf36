# payment.py - simulated payment gateway for SelamBus
#
# Nothing here talks to a real provider. Latency and outcomes come from an
# injected `sleep` callable and random source so tests can pin them down.

import logging
import random
import re
import string
import time
from dataclasses import dataclass
from datetime import datetime

from fixtures import (
    DEFAULT_ARRIVAL_TERMINAL, DEFAULT_DEPARTURE_TERMINAL, DEFAULT_FROM, DEFAULT_TO,
)

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("telebirr", "cbebirr", "card", "bank")
METHOD_LABELS = {"telebirr": "TeleBirr", "cbebirr": "CBE Birr", "card": "Card", "bank": "Bank Transfer"}
FAILURE_RATES = {"telebirr": 0.10, "cbebirr": 0.15, "card": 0.05, "bank": 0.0}
PAYMENT_PREFIXES = {"telebirr": "TB", "cbebirr": "CBE", "card": "CARD", "bank": "BANK"}
FAILURE_MESSAGES = {
    "telebirr": "TeleBirr payment failed. Please check your balance and try again.",
    "cbebirr": "CBE Birr payment failed. Please check your balance and try again.",
    "card": "Card payment failed. Please check your card details and try again.",
}
SUCCESS_MESSAGE = "Payment processed successfully"
BANK_MESSAGE = "Bank transfer receipt uploaded successfully. Your booking will be confirmed within 24 hours."

TAX_RATE = 0.15
CONVENIENCE_FEE = 10
CARD_FEE_RATE = 0.025

MAX_RECEIPT_BYTES = 5 * 1024 * 1024
RECEIPT_TYPES = ("image/jpeg", "image/jpg", "image/png", "application/pdf")

PAYMENT_DATA_KEY = "paymentData"

_BASE36 = string.digits + string.ascii_uppercase


class PaymentError(Exception):
    pass


class PaymentValidationError(PaymentError):
    def __init__(self, errors):
        self.errors = errors
        super().__init__(next(iter(errors.values()), "Invalid payment details"))


class PaymentInProgressError(PaymentError):
    pass


# -------------------- VALIDATORS --------------------
def validate_phone_number(value):
    return bool(re.fullmatch(r"09[0-9]{8}", value or ""))


def validate_card_number(value):
    return bool(re.fullmatch(r"[0-9]{16}", re.sub(r"\s", "", value or "")))


def validate_expiry_date(value):
    return bool(re.fullmatch(r"(0[1-9]|1[0-2])/[0-9]{2}", value or ""))


def validate_cvv(value):
    return bool(re.fullmatch(r"[0-9]{3}", value or ""))


def validate_pin(value):
    return bool(re.fullmatch(r"[0-9]{4}", value or ""))


@dataclass
class Receipt:
    filename: str
    content_type: str
    size: int


def validate_receipt(receipt):
    if receipt is None or not receipt.filename:
        return "Please upload your bank transfer receipt"
    if receipt.size > MAX_RECEIPT_BYTES:
        return "File size must be less than 5MB"
    if receipt.content_type not in RECEIPT_TYPES:
        return "Please upload a JPG, PNG, or PDF file"
    return None


def validate_current_form(method, form, receipt=None):
    errors = {}
    if method in ("telebirr", "cbebirr"):
        number_field, pin_field = ("telebirrNumber", "telebirrPin") if method == "telebirr" else ("cbeNumber", "cbePin")
        if not validate_phone_number(form.get(number_field)):
            errors[number_field] = "Please enter a valid Ethiopian phone number (09XXXXXXXX)"
        if not validate_pin(form.get(pin_field)):
            errors[pin_field] = "Please enter a valid 4-digit PIN"
    elif method == "card":
        if not validate_card_number(form.get("cardNumber")):
            errors["cardNumber"] = "Please enter a valid 16-digit card number"
        if not validate_expiry_date(form.get("expiryDate")):
            errors["expiryDate"] = "Please enter a valid expiry date (MM/YY)"
        if not validate_cvv(form.get("cvv")):
            errors["cvv"] = "Please enter a valid 3-digit CVV"
        if not (form.get("cardholderName") or "").strip():
            errors["cardholderName"] = "Please enter the cardholder name"
    elif method == "bank":
        problem = validate_receipt(receipt)
        if problem:
            errors["bankReceipt"] = problem
    else:
        errors["paymentMethod"] = "Invalid payment method"
    return errors


# -------------------- PRICING & REFERENCES --------------------
def price_breakdown(booking_data):
    seats = len(booking_data.get("selectedSeats", []))
    subtotal = booking_data.get("totalPrice", 0)
    tax = round(subtotal * TAX_RATE)
    return {
        "baseFare": booking_data.get("seatPrices", 0),
        "passengers": seats,
        "subtotal": subtotal,
        "tax": tax,
        "convenienceFee": CONVENIENCE_FEE,
        "total": subtotal + tax + CONVENIENCE_FEE,
    }


def pay_button_label(method, total):
    if method == "card":
        return f"Pay ETB {total} (+ ETB {round(total * CARD_FEE_RATE)} fee)"
    if method == "bank":
        return f"Pay ETB {total} (Manual)"
    return f"Pay ETB {total}"


def _base36(rng, length):
    return "".join(rng.choice(_BASE36) for _ in range(length))


def generate_reference(now=None, rng=None):
    now = now or datetime.now()
    rng = rng or random
    return f"SLM-{now:%y%m%d}-{_base36(rng, 4)}"


def trip_summary(search_data=None, selected_bus=None):
    """Route and bus blocks for the order summary, with defaults for skipped stages."""
    search_data = search_data or {}
    bus = selected_bus or {}
    route = {
        "from": search_data.get("from") or bus.get("departureLocation") or DEFAULT_FROM,
        "to": search_data.get("to") or bus.get("arrivalLocation") or DEFAULT_TO,
        "departureDate": search_data.get("departureDate") or datetime.now().date().isoformat(),
        "departureTime": bus.get("departureTime", "08:00"),
        "arrivalTime": bus.get("arrivalTime", "12:30"),
        "departureTerminal": bus.get("departureTerminal", DEFAULT_DEPARTURE_TERMINAL),
        "arrivalTerminal": bus.get("arrivalTerminal", DEFAULT_ARRIVAL_TERMINAL),
    }
    bus_info = {
        "id": bus.get("id"),
        "company": bus.get("company", "Selam Bus"),
        "type": bus.get("busType", "Standard Coach"),
        "logo": bus.get("logo", "SB"),
        "color": bus.get("color", "2563eb"),
    }
    return route, bus_info


# -------------------- PROCESSOR --------------------
@dataclass
class PaymentRecord:
    method: str
    success: bool
    message: str
    payment_id: str = None
    transaction_id: str = None
    requires_verification: bool = False
    timestamp: str = None


class PaymentProcessor:
    def __init__(self, rng=None, sleep=time.sleep, delay=2.0, clock=None):
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.delay = delay
        self.clock = clock or datetime.now
        self.is_processing = False

    def _simulate_latency(self):
        if self.delay:
            self.sleep(self.delay)

    def process_payment(self, method, form, receipt=None):
        if self.is_processing:
            raise PaymentInProgressError("A payment is already being processed")

        errors = validate_current_form(method, form, receipt)
        if errors:
            raise PaymentValidationError(errors)

        self.is_processing = True
        try:
            self._simulate_latency()  # gateway handshake
            self._simulate_latency()  # provider call
            now = self.clock()
            success = self.rng.random() >= FAILURE_RATES[method]
            if not success:
                logger.warning(f"{METHOD_LABELS[method]} payment declined")
                return PaymentRecord(method=method, success=False, message=FAILURE_MESSAGES[method],
                                     timestamp=now.isoformat())

            record = PaymentRecord(
                method=method,
                success=True,
                message=BANK_MESSAGE if method == "bank" else SUCCESS_MESSAGE,
                payment_id=f"{PAYMENT_PREFIXES[method]}-{int(now.timestamp() * 1000)}",
                transaction_id=f"TXN-{_base36(self.rng, 9)}",
                requires_verification=method == "bank",
                timestamp=now.isoformat(),
            )
            logger.info(f"{METHOD_LABELS[method]} payment accepted: {record.payment_id}")
            return record
        finally:
            self.is_processing = False


def merge_payment(booking_data, record, reference, route, bus, pricing):
    """Build the paymentData payload handed to the confirmation stage."""
    data = dict(booking_data)
    data.update({
        "reference": reference,
        "route": route,
        "bus": bus,
        "pricing": pricing,
        "paymentId": record.payment_id,
        "transactionId": record.transaction_id,
        "paymentMethod": record.method,
        "requiresVerification": record.requires_verification,
        "status": "completed",
        "timestamp": record.timestamp,
    })
    return data
