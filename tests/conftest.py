"""
Shared fixtures. The environment is set before `app` is imported so the
module-level engine binds to an in-memory database and no delay ever sleeps.
"""

import os
import random
from datetime import date, datetime, timedelta

import pytest

os.environ["SELAMBUS_DATABASE_URI"] = "sqlite:///:memory:"
os.environ["SELAMBUS_API_DELAY"] = "0"
os.environ["SELAMBUS_PAYMENT_DELAY"] = "0"
os.environ["SELAMBUS_FIXTURE_SEED"] = "1234"
os.environ.setdefault("SELAMBUS_LOG_LEVEL", "WARNING")

import app as selambus  # noqa: E402


class FixedRandom(random.Random):
    """Random whose random() is pinned; choice/randrange still work off the seed."""

    def __init__(self, value, seed=0):
        super().__init__(seed)
        self.value = value

    def random(self):
        return self.value


ADMIN = {"email": "admin@selambus.com", "password": "Admin123!"}
CUSTOMER = {"email": "abebe@example.com", "password": "Secret123!", "phone": "0911223344"}

SAMPLE_BUS = {
    "id": "bus-1",
    "company": "Selam Bus",
    "logo": "SB",
    "color": "2563eb",
    "busType": "Business Class",
    "departureTime": "08:00",
    "departurePeriod": "morning",
    "arrivalTime": "12:30",
    "duration": 4.5,
    "rating": 4.5,
    "price": 200,
    "seatsAvailable": 20,
    "amenities": [{"icon": "wifi", "name": "WiFi"}, {"icon": "snowflake", "name": "AC"}],
    "departureLocation": "Addis Ababa",
    "departureTerminal": "Autobus Tera",
    "arrivalLocation": "Hawassa",
    "arrivalTerminal": "Main Terminal",
}


def make_bus(bus_id, **overrides):
    bus = dict(SAMPLE_BUS, id=bus_id)
    bus.update(overrides)
    return bus


@pytest.fixture
def flask_app():
    app = selambus.app
    app.config.update(
        TESTING=True,
        RNG=random.Random(7),
        SLEEP=lambda seconds: None,
        API_DELAY=0,
        PAYMENT_DELAY=0,
        LISTINGS_SOURCE=None,
    )
    with app.app_context():
        selambus.db.drop_all()
        selambus.db.create_all()
        selambus.seed_defaults()
    selambus.CANCEL_CUTOFF_MINUTES = 30
    selambus._payments_in_flight.clear()
    yield app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture
def customer_id(flask_app):
    with flask_app.app_context():
        u = selambus.User(first_name="Abebe", last_name="Kebede", email=CUSTOMER["email"],
                          phone=CUSTOMER["phone"], role="customer")
        u.set_password(CUSTOMER["password"])
        selambus.db.session.add(u)
        selambus.db.session.commit()
        return u.id


def login(client, email, password, remember=False):
    data = {"email": email, "password": password}
    if remember:
        data["rememberMe"] = "1"
    return client.post("/login", data=data)


@pytest.fixture
def customer_client(client, customer_id):
    resp = login(client, CUSTOMER["email"], CUSTOMER["password"])
    assert resp.status_code == 302
    return client


@pytest.fixture
def admin_client(client):
    resp = login(client, ADMIN["email"], ADMIN["password"])
    assert resp.status_code == 302
    return client


@pytest.fixture
def tomorrow():
    return (date.today() + timedelta(days=1)).isoformat()


def add_booking(flask_app, user_id, reference="SLM-250101-AB12", travel_date=None, amount=298,
                status="confirmed", departure_time="08:00"):
    travel_date = travel_date or date.today() + timedelta(days=3)
    details = {
        "reference": reference,
        "route": {
            "from": "Addis Ababa", "to": "Hawassa", "departureDate": travel_date.isoformat(),
            "departureTime": departure_time, "arrivalTime": "12:30",
            "departureTerminal": "Autobus Tera", "arrivalTerminal": "Main Terminal",
        },
        "bus": {"id": "bus-1", "company": "Selam Bus", "type": "Business Class", "logo": "SB", "color": "2563eb"},
        "passengers": [{"seatNumber": "C1", "name": "Abebe Kebede", "gender": "male", "age": "30"}],
        "selectedSeats": ["C1"],
        "pricing": {"baseFare": 250, "passengers": 1, "subtotal": 250, "tax": 38, "convenienceFee": 10, "total": amount},
        "paymentMethod": "telebirr",
        "paymentId": "TB-1700000000000",
        "timestamp": datetime(2025, 1, 1, 9, 0).isoformat(),
    }
    with flask_app.app_context():
        b = selambus.Booking(
            reference=reference, user_id=user_id, from_city="Addis Ababa", to_city="Hawassa",
            travel_date=travel_date, departure_time=departure_time, company="Selam Bus",
            bus_type="Business Class", seats="C1", passenger_count=1, amount=amount,
            payment_method="telebirr", payment_id="TB-1700000000000", status=status, details=details,
        )
        selambus.db.session.add(b)
        selambus.db.session.commit()
    return reference
