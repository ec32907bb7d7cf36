"""Seat layouts, seat states and the selection state machine."""

import pytest

from seatmap import (
    BOOKING_DATA_KEY, LAYOUTS, BookingDraft, SeatMapManager, SeatState, SelectionState,
    load_booking_draft, validate_phone_number,
)


def passenger_form(seat, name="Abebe Kebede", age="30", gender="male", phone="0911223344", **extra):
    form = {
        f"passenger_{seat}_name": name,
        f"passenger_{seat}_age": age,
        f"passenger_{seat}_gender": gender,
        f"passenger_{seat}_phone": phone,
    }
    for key, value in extra.items():
        form[f"passenger_{seat}_{key}"] = value
    return form


class Recorder:
    def __init__(self):
        self.messages = []

    def __call__(self, message, category="info"):
        self.messages.append((message, category))


class TestLayouts:
    def test_seat_counts(self):
        assert len(LAYOUTS["economy"].seat_ids) == 48
        assert len(LAYOUTS["business"].seat_ids) == 30
        assert len(LAYOUTS["luxury"].seat_ids) == 16

    def test_aisle_position(self):
        assert LAYOUTS["economy"].rows[0] == ("A1", "A2", None, "A3", "A4")
        assert LAYOUTS["business"].rows[-1] == ("J1", None, "J2", "J3")
        assert LAYOUTS["luxury"].rows[-1] == ("H1", None, "H2")

    def test_unknown_class_rejected(self):
        with pytest.raises(ValueError):
            SeatMapManager(bus_type="sleeper")


class TestSeatState:
    def test_precedence(self):
        manager = SeatMapManager()
        assert manager.seat_state("A1") is SeatState.BOOKED
        assert manager.seat_state("E1") is SeatState.WOMEN_ONLY
        assert manager.seat_state("G3") is SeatState.AVAILABLE
        manager.toggle_seat("E1")
        assert manager.seat_state("E1") is SeatState.SELECTED

    def test_booked_cells_not_clickable(self):
        cells = {c.seat_id: c for row in SeatMapManager().rows() for c in row if c is not None}
        assert not cells["B3"].clickable
        assert cells["B4"].clickable


class TestToggle:
    def test_booked_seat_is_ignored(self):
        manager = SeatMapManager()
        assert manager.toggle_seat("A1") is False
        assert manager.selected_seats == []

    def test_seat_outside_layout_is_ignored(self):
        manager = SeatMapManager(bus_type="luxury")
        assert manager.toggle_seat("A4") is False

    def test_selection_order_and_total(self):
        manager = SeatMapManager(bus_type="business")
        manager.toggle_seat("C3")
        manager.toggle_seat("C1")
        assert manager.selected_seats == ["C3", "C1"]
        assert manager.total_price == 500

    def test_two_economy_seats_cost_300(self):
        manager = SeatMapManager(bus_type="economy")
        manager.toggle_seat("A3")
        manager.toggle_seat("A4")
        manager.toggle_seat("A1")
        assert manager.selected_seats == ["A3", "A4"]
        assert manager.total_price == 300

    def test_eleventh_seat_refused(self):
        notify = Recorder()
        manager = SeatMapManager(notify=notify)
        seats = [s for row in LAYOUTS["economy"].rows for s in row if s and s not in {"A1", "A2", "B3", "C4", "D5"}]
        for seat in seats[:10]:
            assert manager.toggle_seat(seat)
        assert manager.toggle_seat(seats[10]) is False
        assert len(manager.selected_seats) == 10
        assert notify.messages[-1] == ("Maximum 10 seats can be selected per booking", "warning")

    def test_deselect_drops_form_values(self):
        manager = SeatMapManager()
        manager.toggle_seat("G1")
        manager.update_forms(passenger_form("G1"))
        assert manager.form_value("G1", "name") == "Abebe Kebede"
        manager.toggle_seat("G1")
        manager.toggle_seat("G1")
        assert manager.form_value("G1", "name") == ""

    def test_listeners_fire_until_unsubscribed(self):
        manager = SeatMapManager()
        calls = []
        unsubscribe = manager.subscribe(lambda m: calls.append(list(m.selected_seats)))
        manager.toggle_seat("G1")
        unsubscribe()
        manager.toggle_seat("G2")
        assert calls == [["G1"]]

    def test_clear_all(self):
        notify = Recorder()
        manager = SeatMapManager(notify=notify)
        manager.toggle_seat("G1")
        manager.toggle_seat("G2")
        manager.clear_all_seats()
        assert manager.selected_seats == []
        assert notify.messages == [("All seats cleared", "info")]


class TestSwitchClass:
    def test_invalid_ids_dropped(self):
        manager = SeatMapManager()
        for seat in ("B1", "D4", "K2"):
            manager.toggle_seat(seat)
        manager.switch_bus_class("luxury")
        assert manager.bus_type == "luxury"
        assert manager.selected_seats == ["B1"]
        assert manager.unit_price == 350

    def test_economy_to_luxury_keeps_a3(self):
        manager = SeatMapManager(bus_type="economy")
        manager.toggle_seat("A3")
        manager.switch_bus_class("luxury")
        assert manager.bus_type == "luxury"
        assert manager.selected_seats == ["A3"]
        assert manager.total_price == 350

    def test_unknown_class_raises(self):
        manager = SeatMapManager()
        with pytest.raises(ValueError):
            manager.switch_bus_class("first")
        assert manager.bus_type == "economy"


class TestValidation:
    def test_missing_fields(self):
        manager = SeatMapManager()
        manager.toggle_seat("G1")
        result = manager.validate_passenger_data(passenger_form("G1", phone=""))
        assert not result.is_valid
        assert result.errors == ["Please fill in all required passenger information for seat G1"]

    def test_age_bounds(self):
        manager = SeatMapManager()
        manager.toggle_seat("G1")
        assert "Invalid age for passenger in seat G1" in manager.validate_passenger_data(passenger_form("G1", age="0")).errors
        assert "Invalid age for passenger in seat G1" in manager.validate_passenger_data(passenger_form("G1", age="121")).errors
        assert manager.validate_passenger_data(passenger_form("G1", age="120")).is_valid

    def test_phone(self):
        assert validate_phone_number("+251 911-223-344")
        assert validate_phone_number("0911223344")
        assert not validate_phone_number("0011223344")
        manager = SeatMapManager()
        manager.toggle_seat("G1")
        result = manager.validate_passenger_data(passenger_form("G1", phone="12345"))
        assert result.errors == ["Invalid phone number for passenger in seat G1"]

    def test_state_progression(self):
        manager = SeatMapManager()
        assert manager.state() is SelectionState.IDLE
        manager.toggle_seat("G1")
        assert manager.state() is SelectionState.SEATS_PARTIALLY_SELECTED
        assert manager.state({"passenger_G1_name": "Abebe"}) is SelectionState.READY_FOR_PASSENGER_ENTRY
        assert manager.state(passenger_form("G1")) is SelectionState.VALIDATED_READY_FOR_PAYMENT


class TestProceed:
    def test_empty_selection(self):
        notify = Recorder()
        storage = {}
        assert SeatMapManager(notify=notify).proceed_to_payment(storage) is None
        assert notify.messages == [("Please select at least one seat", "danger")]
        assert storage == {}

    def test_first_error_is_reported(self):
        notify = Recorder()
        manager = SeatMapManager(notify=notify)
        manager.toggle_seat("G1")
        assert manager.proceed_to_payment({}, {"passenger_G1_name": "Abebe"}) is None
        assert notify.messages[-1][0] == "Please fill in all required passenger information for seat G1"

    def test_draft_survives_storage(self):
        manager = SeatMapManager(bus_type="business")
        manager.toggle_seat("C1")
        manager.toggle_seat("C2")
        form = {**passenger_form("C1"), **passenger_form("C2", name="Sara Tesfaye", gender="female",
                                                        special="1", requirements="Wheelchair")}
        storage = {}
        draft = manager.proceed_to_payment(storage, form)

        stored = storage[BOOKING_DATA_KEY]
        assert stored["seatPrices"] == 250
        assert stored["totalPrice"] == 500
        assert stored["passengers"][1]["specialRequirements"] is True

        loaded = load_booking_draft(storage)
        assert loaded == draft
        assert loaded.selected_seats == ["C1", "C2"]
        assert [p.name for p in loaded.passengers] == ["Abebe Kebede", "Sara Tesfaye"]
        assert BookingDraft.from_dict(loaded.to_dict()) == loaded

    def test_snapshot_restores_selection(self):
        manager = SeatMapManager(bus_type="business")
        manager.toggle_seat("C1")
        manager.update_forms(passenger_form("C1"))
        restored = SeatMapManager.from_dict(manager.to_dict())
        assert restored.selected_seats == ["C1"]
        assert restored.form_value("C1", "age") == "30"
