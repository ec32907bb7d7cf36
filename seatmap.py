# seatmap.py - seat layouts and the seat-selection state machine
#
# The manager holds no reference to Flask; the web layer injects `notify`
# (normally flask.flash) and a storage mapping (normally flask.session).

import logging
import re
import string
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

logger = logging.getLogger(__name__)

MAX_SEATS = 10
SEAT_PRICES = {"economy": 150, "business": 250, "luxury": 350}
BOOKED_SEATS = frozenset({"A1", "A2", "B3", "C4", "D5"})  # sample reservations
WOMEN_ONLY_SEATS = frozenset({"E1", "E2", "F1", "F2"})

PHONE_RE = re.compile(r"^(\+251|0)?[1-9][0-9]{8}$")
PASSENGER_FIELDS = ("name", "age", "gender", "phone", "email", "id", "special", "requirements")
REQUIRED_FIELDS = ("name", "age", "gender", "phone")

BOOKING_DATA_KEY = "bookingData"


class SeatState(str, Enum):
    AVAILABLE = "available"
    SELECTED = "selected"
    BOOKED = "booked"
    WOMEN_ONLY = "womenOnly"


class SelectionState(str, Enum):
    IDLE = "idle"
    SEATS_PARTIALLY_SELECTED = "seats_partially_selected"
    READY_FOR_PASSENGER_ENTRY = "ready_for_passenger_entry"
    VALIDATED_READY_FOR_PAYMENT = "validated_ready_for_payment"


# -------------------- LAYOUTS --------------------
@dataclass(frozen=True)
class SeatLayout:
    bus_type: str
    rows: tuple  # tuple of rows; None marks the aisle

    @property
    def seat_ids(self):
        return frozenset(s for row in self.rows for s in row if s is not None)

    def __contains__(self, seat_id):
        return seat_id in self.seat_ids


def _build_layout(bus_type, row_count, pattern):
    # pattern like "12_34": digits are seat columns, "_" is the aisle
    rows = []
    for letter in string.ascii_uppercase[:row_count]:
        rows.append(tuple(None if c == "_" else f"{letter}{c}" for c in pattern))
    return SeatLayout(bus_type=bus_type, rows=tuple(rows))


LAYOUTS = {
    "economy": _build_layout("economy", 12, "12_34"),
    "business": _build_layout("business", 10, "1_23"),
    "luxury": _build_layout("luxury", 8, "1_2"),
}


def validate_phone_number(phone):
    """Ethiopian mobile/landline check; spaces and hyphens are ignored."""
    return bool(PHONE_RE.match(re.sub(r"[\s-]", "", phone or "")))


# -------------------- RECORDS --------------------
@dataclass
class PassengerRecord:
    seat_number: str
    name: str = ""
    age: str = ""
    gender: str = ""
    phone: str = ""
    email: str = ""
    id_number: str = ""
    special_requirements: bool = False
    requirements: str = ""

    def to_dict(self):
        return {
            "seatNumber": self.seat_number,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "phone": self.phone,
            "email": self.email,
            "idNumber": self.id_number,
            "specialRequirements": self.special_requirements,
            "requirements": self.requirements,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            seat_number=data["seatNumber"],
            name=data.get("name", ""),
            age=data.get("age", ""),
            gender=data.get("gender", ""),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
            id_number=data.get("idNumber", ""),
            special_requirements=bool(data.get("specialRequirements")),
            requirements=data.get("requirements", ""),
        )


@dataclass
class ValidationResult:
    is_valid: bool
    passengers: list
    errors: list = field(default_factory=list)


@dataclass
class BookingDraft:
    bus_type: str
    selected_seats: list
    passengers: list
    unit_price: int
    total_price: int
    booking_date: str

    def to_dict(self):
        return {
            "busType": self.bus_type,
            "selectedSeats": list(self.selected_seats),
            "passengers": [p.to_dict() for p in self.passengers],
            "totalPrice": self.total_price,
            "seatPrices": self.unit_price,
            "bookingDate": self.booking_date,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            bus_type=data["busType"],
            selected_seats=list(data["selectedSeats"]),
            passengers=[PassengerRecord.from_dict(p) for p in data["passengers"]],
            unit_price=data["seatPrices"],
            total_price=data["totalPrice"],
            booking_date=data["bookingDate"],
        )


@dataclass(frozen=True)
class SeatCell:
    seat_id: str
    state: SeatState

    @property
    def clickable(self):
        return self.state is not SeatState.BOOKED


def _log_notify(message, category="info"):
    logger.info(f"[{category}] {message}")


# -------------------- STATE MACHINE --------------------
class SeatMapManager:
    def __init__(self, bus_type="economy", selected=(), forms=None,
                 booked=BOOKED_SEATS, women_only=WOMEN_ONLY_SEATS,
                 prices=None, max_seats=MAX_SEATS, notify=None):
        if bus_type not in LAYOUTS:
            raise ValueError(f"Unknown bus class: {bus_type}")
        self._bus_type = bus_type
        self._booked = frozenset(booked)
        self._women_only = frozenset(women_only)
        self._prices = dict(prices or SEAT_PRICES)
        self._max_seats = max_seats
        self._notify = notify or _log_notify
        self._listeners = []
        # dict keeps insertion order, which is the selection order
        self._selected = {}
        for seat_id in selected:
            if seat_id in self.layout and seat_id not in self._booked:
                self._selected[seat_id] = None
        self._forms = {s: dict(v) for s, v in (forms or {}).items() if s in self._selected}

    # ---- read side ----
    @property
    def bus_type(self):
        return self._bus_type

    @property
    def layout(self):
        return LAYOUTS[self._bus_type]

    @property
    def selected_seats(self):
        return list(self._selected)

    @property
    def max_seats(self):
        return self._max_seats

    @property
    def unit_price(self):
        return self._prices[self._bus_type]

    @property
    def total_price(self):
        return len(self._selected) * self.unit_price

    def seat_state(self, seat_id):
        if seat_id in self._booked:
            return SeatState.BOOKED
        if seat_id in self._selected:
            return SeatState.SELECTED
        if seat_id in self._women_only:
            return SeatState.WOMEN_ONLY
        return SeatState.AVAILABLE

    def rows(self):
        return [
            [None if s is None else SeatCell(s, self.seat_state(s)) for s in row]
            for row in self.layout.rows
        ]

    def form_value(self, seat_id, name):
        return self._forms.get(seat_id, {}).get(name, "")

    def state(self, form=None):
        if not self._selected:
            return SelectionState.IDLE
        self.update_forms(form)
        if not any(self._forms.get(s) for s in self._selected):
            return SelectionState.SEATS_PARTIALLY_SELECTED
        if not self.validate_passenger_data().is_valid:
            return SelectionState.READY_FOR_PASSENGER_ENTRY
        return SelectionState.VALIDATED_READY_FOR_PAYMENT

    # ---- observers ----
    def subscribe(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _changed(self):
        for listener in list(self._listeners):
            listener(self)

    # ---- mutations ----
    def toggle_seat(self, seat_id):
        """Flip a seat in or out of the selection; returns True when it changed."""
        if seat_id in self._booked or seat_id not in self.layout:
            return False

        if seat_id in self._selected:
            del self._selected[seat_id]
            self._forms.pop(seat_id, None)
        else:
            if len(self._selected) >= self._max_seats:
                self._notify(f"Maximum {self._max_seats} seats can be selected per booking", "warning")
                return False
            self._selected[seat_id] = None

        self._changed()
        return True

    def clear_all_seats(self):
        self._selected.clear()
        self._forms.clear()
        self._changed()
        self._notify("All seats cleared", "info")

    def switch_bus_class(self, bus_type):
        if bus_type not in LAYOUTS:
            raise ValueError(f"Unknown bus class: {bus_type}")
        self._bus_type = bus_type
        dropped = [s for s in self._selected if s not in self.layout or s in self._booked]
        for seat_id in dropped:
            del self._selected[seat_id]
            self._forms.pop(seat_id, None)
        if dropped:
            logger.info(f"Switched to {bus_type}; dropped seats {', '.join(dropped)}")
        self._changed()

    def update_forms(self, form):
        """Capture passenger_<seat>_<field> values for the selected seats."""
        if form is None:
            return
        for seat_id in self._selected:
            values = {}
            for name in PASSENGER_FIELDS:
                raw = form.get(f"passenger_{seat_id}_{name}")
                if raw:
                    values[name] = raw.strip() if isinstance(raw, str) else raw
            self._forms[seat_id] = values

    # ---- validation & hand-off ----
    def validate_passenger_data(self, form=None):
        self.update_forms(form)
        passengers, errors = [], []

        for seat_id in self._selected:
            values = self._forms.get(seat_id, {})
            record = PassengerRecord(
                seat_number=seat_id,
                name=values.get("name", ""),
                age=values.get("age", ""),
                gender=values.get("gender", ""),
                phone=values.get("phone", ""),
                email=values.get("email", ""),
                id_number=values.get("id", ""),
                special_requirements=bool(values.get("special")),
                requirements=values.get("requirements", ""),
            )
            passengers.append(record)

            if any(not values.get(name) for name in REQUIRED_FIELDS):
                errors.append(f"Please fill in all required passenger information for seat {seat_id}")

            if record.age:
                try:
                    age = int(record.age)
                except ValueError:
                    age = 0
                if age < 1 or age > 120:
                    errors.append(f"Invalid age for passenger in seat {seat_id}")

            if record.phone and not validate_phone_number(record.phone):
                errors.append(f"Invalid phone number for passenger in seat {seat_id}")

        return ValidationResult(is_valid=not errors, passengers=passengers, errors=errors)

    def proceed_to_payment(self, storage, form=None, now=None):
        if not self._selected:
            self._notify("Please select at least one seat", "danger")
            return None

        result = self.validate_passenger_data(form)
        if not result.is_valid:
            self._notify(result.errors[0], "danger")
            return None

        draft = BookingDraft(
            bus_type=self._bus_type,
            selected_seats=self.selected_seats,
            passengers=result.passengers,
            unit_price=self.unit_price,
            total_price=self.total_price,
            booking_date=(now or datetime.utcnow()).isoformat(),
        )
        storage[BOOKING_DATA_KEY] = draft.to_dict()
        logger.info(f"Booking draft created: {draft.bus_type} seats={draft.selected_seats} total={draft.total_price}")
        return draft

    # ---- snapshot ----
    def to_dict(self):
        return {
            "busType": self._bus_type,
            "selectedSeats": self.selected_seats,
            "forms": {s: dict(v) for s, v in self._forms.items()},
        }

    @classmethod
    def from_dict(cls, data, **kwargs):
        data = data or {}
        return cls(
            bus_type=data.get("busType", "economy"),
            selected=data.get("selectedSeats", ()),
            forms=data.get("forms"),
            **kwargs,
        )


def load_booking_draft(storage):
    raw = storage.get(BOOKING_DATA_KEY)
    return BookingDraft.from_dict(raw) if raw else None
