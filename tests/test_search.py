"""Search form rules and the listing filter/sort engine."""

import random
from datetime import date, timedelta

from werkzeug.datastructures import MultiDict

from conftest import make_bus
from fixtures import RandomBusListings, StaticSource, calculate_arrival_time
from search import (
    FilterCriteria, SearchCriteria, SearchResultsManager, format_duration, star_rating,
    suggest_cities, validate_search,
)

TODAY = date(2025, 3, 10)


def criteria(**kw):
    base = dict(from_city="Addis Ababa", to_city="Hawassa", departure_date="2025-03-12")
    base.update(kw)
    return SearchCriteria(**base)


def listings():
    return StaticSource([
        make_bus("bus-1", company="Selam Bus", busType="Business Class", price=300, rating=4.1,
                 departureTime="14:00", departurePeriod="afternoon", duration=4.0,
                 amenities=[{"icon": "wifi", "name": "WiFi"}]),
        make_bus("bus-2", company="Golden Bus", busType="Luxury Sleeper", price=150, rating=4.8,
                 departureTime="06:00", departurePeriod="morning", duration=5.2,
                 amenities=[{"icon": "plug", "name": "Charging"}]),
        make_bus("bus-3", company="Sky Bus", busType="Higer Bus", price=220, rating=3.2,
                 departureTime="22:00", departurePeriod="night", duration=3.6,
                 amenities=[{"icon": "tv", "name": "TV"}]),
        make_bus("bus-4", company="Luxury Bus Lines", busType="Standard Coach", price=480, rating=3.9,
                 departureTime="18:00", departurePeriod="evening", duration=4.4,
                 amenities=[{"icon": "snowflake", "name": "AC"}, {"icon": "wifi", "name": "WiFi"}]),
    ])


def ids(buses):
    return [b["id"] for b in buses]


class TestCities:
    def test_substring_match(self):
        matches = suggest_cities("ad")
        assert "Addis Ababa" in matches
        assert "Adama" in matches

    def test_blank_query(self):
        assert suggest_cities("  ") == []


class TestSearchValidation:
    def test_valid(self):
        assert validate_search(criteria(), TODAY) is None

    def test_missing_city(self):
        assert validate_search(criteria(to_city=""), TODAY) == "Please select both departure and destination cities"

    def test_same_city(self):
        assert validate_search(criteria(to_city="Addis Ababa"), TODAY) == \
            "Departure and destination cities cannot be the same"

    def test_past_date(self):
        assert validate_search(criteria(departure_date="2025-03-09"), TODAY) == "Departure date cannot be in the past"

    def test_round_trip_needs_later_return(self):
        assert validate_search(criteria(is_round_trip=True), TODAY) == "Please select a return date for round trip"
        assert validate_search(criteria(is_round_trip=True, return_date="2025-03-12"), TODAY) == \
            "Return date must be after departure date"
        assert validate_search(criteria(is_round_trip=True, return_date="2025-03-13"), TODAY) is None

    def test_form_round_trip(self):
        parsed = SearchCriteria.from_form({"from": " Adama ", "to": "Jimma", "departureDate": "2025-03-12",
                                           "isRoundTrip": "on"})
        assert parsed.from_city == "Adama"
        assert parsed.is_round_trip
        assert SearchCriteria.from_dict(parsed.to_dict()) == parsed


class TestFilters:
    def test_from_args_drops_unknown_values(self):
        args = MultiDict([("time", "morning"), ("time", "brunch"), ("busType", "luxury"),
                          ("amenity", "wifi"), ("priceMax", "abc")])
        parsed = FilterCriteria.from_args(args)
        assert parsed.time == ["morning"]
        assert parsed.bus_type == ["luxury"]
        assert parsed.amenities == ["wifi"]
        assert parsed.price_max == 500

    def test_or_within_category(self):
        manager = SearchResultsManager(listings())
        manager.apply_filters(FilterCriteria(time=["morning", "night"]))
        assert ids(manager.filtered_data) == ["bus-2", "bus-3"]

    def test_amenities_any_of(self):
        manager = SearchResultsManager(listings())
        manager.apply_filters(FilterCriteria(amenities=["wifi", "charging"]))
        assert ids(manager.filtered_data) == ["bus-1", "bus-2", "bus-4"]

    def test_and_across_categories(self):
        manager = SearchResultsManager(listings())
        manager.apply_filters(FilterCriteria(amenities=["wifi"], price_max=400))
        assert ids(manager.filtered_data) == ["bus-1"]

    def test_bus_type_families(self):
        manager = SearchResultsManager(listings())
        manager.apply_filters(FilterCriteria(bus_type=["economy"]))
        assert ids(manager.filtered_data) == ["bus-4"]
        manager.apply_filters(FilterCriteria(bus_type=["luxury"]))
        assert ids(manager.filtered_data) == ["bus-2"]

    def test_company_slug(self):
        manager = SearchResultsManager(listings())
        manager.apply_filters(FilterCriteria(company=["luxury-bus-lines"]))
        assert ids(manager.filtered_data) == ["bus-4"]

    def test_clear_all(self):
        manager = SearchResultsManager(listings())
        manager.apply_filters(FilterCriteria(price_max=100))
        assert manager.result_count == 0
        manager.clear_all_filters()
        assert manager.result_count == 4
        assert manager.current_filters == FilterCriteria()


class TestSorting:
    def test_orders(self):
        manager = SearchResultsManager(listings())
        assert ids(manager.sort_results("price-low")) == ["bus-2", "bus-3", "bus-1", "bus-4"]
        assert ids(manager.sort_results("price-high")) == ["bus-4", "bus-1", "bus-3", "bus-2"]
        assert ids(manager.sort_results("rating")) == ["bus-2", "bus-1", "bus-4", "bus-3"]
        assert ids(manager.sort_results("duration")) == ["bus-3", "bus-1", "bus-4", "bus-2"]
        assert ids(manager.sort_results("departure")) == ["bus-2", "bus-1", "bus-4", "bus-3"]

    def test_unknown_key_keeps_order(self):
        manager = SearchResultsManager(listings())
        assert ids(manager.sort_results("colour")) == ["bus-1", "bus-2", "bus-3", "bus-4"]


class TestPaging:
    def test_load_more_appends_next_slice(self):
        manager = SearchResultsManager(RandomBusListings(random.Random(3), count=12))
        assert len(manager.visible_results) == 5
        assert manager.has_more_results
        new = manager.load_more_results()
        assert new == manager.filtered_data[5:10]
        assert len(manager.visible_results) == 10
        assert len(manager.load_more_results()) == 2
        assert not manager.has_more_results

    def test_show_pages_stops_at_end(self):
        manager = SearchResultsManager(RandomBusListings(random.Random(3), count=12))
        manager.show_pages(9)
        assert manager.current_page == 3
        manager.apply_filters()
        assert manager.current_page == 1


class TestListingFixtures:
    def test_seeded_listings_repeat(self):
        first = RandomBusListings(random.Random(11), from_city="Adama", to_city="Jimma").list()
        second = RandomBusListings(random.Random(11), from_city="Adama", to_city="Jimma").list()
        assert first == second
        assert len(first) == 50
        assert {b["departureLocation"] for b in first} == {"Adama"}
        assert all(120 <= b["price"] < 320 for b in first)

    def test_arrival_wraps_midnight(self):
        assert calculate_arrival_time("23:30", 2) == "01:30"
        assert calculate_arrival_time("08:00", 4.5) == "12:30"


class TestHelpers:
    def test_duration(self):
        assert format_duration(4.5) == "4h 30m"
        assert format_duration(3.25) == "3h 15m"

    def test_stars(self):
        assert star_rating(3.5) == (3, 1, 1)
        assert star_rating(4.2) == (4, 0, 1)
        assert star_rating(5.0) == (5, 0, 0)

    def test_tomorrow_is_valid(self):
        assert validate_search(criteria(departure_date=(date.today() + timedelta(days=1)).isoformat())) is None
