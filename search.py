# search.py - search form rules and the results filter/sort engine

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from fixtures import DataSource

logger = logging.getLogger(__name__)

ETHIOPIAN_CITIES = [
    "Addis Ababa", "Adama", "Hawassa", "Bahir Dar", "Gondar",
    "Mekele", "Dire Dawa", "Jimma", "Dessie", "Shashemene",
    "Arba Minch", "Sodo", "Jijiga", "Harar", "Dilla",
    "Wolaita Sodo", "Hosaena", "Asella", "Ambo", "Butajira",
]

TIME_PERIODS = ("morning", "afternoon", "evening", "night")
BUS_TYPE_FILTERS = ("economy", "business", "luxury")
AMENITY_FILTERS = ("wifi", "ac", "toilet", "charging", "snack")
SORT_KEYS = ("departure", "price-low", "price-high", "rating", "duration")

DEFAULT_PRICE_MAX = 500
ITEMS_PER_PAGE = 5

SEARCH_DATA_KEY = "searchData"
SELECTED_BUS_KEY = "selectedBus"


def suggest_cities(query, cities=ETHIOPIAN_CITIES):
    value = (query or "").strip().lower()
    if not value:
        return []
    return [c for c in cities if value in c.lower()]


# -------------------- SEARCH FORM --------------------
@dataclass
class SearchCriteria:
    from_city: str = ""
    to_city: str = ""
    departure_date: str = ""
    return_date: str = ""
    is_round_trip: bool = False

    @classmethod
    def from_form(cls, form):
        return cls(
            from_city=(form.get("from") or "").strip(),
            to_city=(form.get("to") or "").strip(),
            departure_date=form.get("departureDate") or "",
            return_date=form.get("returnDate") or "",
            is_round_trip=form.get("isRoundTrip") in ("1", "on", "true", True),
        )

    def to_dict(self):
        return {
            "from": self.from_city,
            "to": self.to_city,
            "departureDate": self.departure_date,
            "returnDate": self.return_date,
            "isRoundTrip": self.is_round_trip,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            from_city=data.get("from", ""),
            to_city=data.get("to", ""),
            departure_date=data.get("departureDate", ""),
            return_date=data.get("returnDate", ""),
            is_round_trip=bool(data.get("isRoundTrip")),
        )


def _parse_date(value):
    return datetime.strptime(value, "%Y-%m-%d").date()


def validate_search(criteria, today=None):
    """Return the first problem with the search form, or None when it is valid."""
    today = today or date.today()
    if not criteria.from_city or not criteria.to_city:
        return "Please select both departure and destination cities"
    if criteria.from_city == criteria.to_city:
        return "Departure and destination cities cannot be the same"
    if not criteria.departure_date:
        return "Please select a departure date"
    try:
        departure = _parse_date(criteria.departure_date)
    except ValueError:
        return "Please select a departure date"
    if departure < today:
        return "Departure date cannot be in the past"
    if criteria.is_round_trip:
        if not criteria.return_date:
            return "Please select a return date for round trip"
        try:
            returning = _parse_date(criteria.return_date)
        except ValueError:
            return "Please select a return date for round trip"
        if returning <= departure:
            return "Return date must be after departure date"
    return None


# -------------------- LISTING HELPERS --------------------
def format_duration(duration):
    hours = int(duration)
    minutes = int((duration - hours) * 60)
    return f"{hours}h {minutes}m"


def star_rating(rating):
    """(full, half, empty) star counts for a 0-5 rating."""
    full = int(rating)
    half = 1 if rating % 1 >= 0.5 else 0
    return full, half, 5 - full - half


def company_slug(name):
    return name.lower().replace(" ", "-")


def matches_bus_type(bus_type, wanted):
    label = bus_type.lower()
    if wanted == "economy":
        return "standard" in label or "economy" in label
    if wanted == "business":
        return "business" in label
    if wanted == "luxury":
        return "luxury" in label or "sleeper" in label
    return False


def _matches_amenity(names, wanted):
    if wanted == "ac":
        return "ac" in names or any("air" in n for n in names)
    if wanted == "charging":
        return any("charging" in n for n in names)
    return wanted in names


# -------------------- FILTER / SORT ENGINE --------------------
@dataclass
class FilterCriteria:
    time: list = field(default_factory=list)
    bus_type: list = field(default_factory=list)
    company: list = field(default_factory=list)
    amenities: list = field(default_factory=list)
    price_max: int = DEFAULT_PRICE_MAX

    @classmethod
    def from_args(cls, args):
        """Build criteria from a werkzeug MultiDict (or any mapping with getlist)."""
        try:
            price_max = int(args.get("priceMax", DEFAULT_PRICE_MAX))
        except (TypeError, ValueError):
            price_max = DEFAULT_PRICE_MAX
        return cls(
            time=[v for v in args.getlist("time") if v in TIME_PERIODS],
            bus_type=[v for v in args.getlist("busType") if v in BUS_TYPE_FILTERS],
            company=[v for v in args.getlist("company") if v],
            amenities=[v for v in args.getlist("amenity") if v in AMENITY_FILTERS],
            price_max=price_max,
        )

    def matches(self, bus):
        if self.time and bus["departurePeriod"] not in self.time:
            return False
        if bus["price"] > self.price_max:
            return False
        if self.company:
            slug = company_slug(bus["company"])
            if not any(c.lower() in slug for c in self.company):
                return False
        if self.bus_type and not any(matches_bus_type(bus["busType"], t) for t in self.bus_type):
            return False
        if self.amenities:
            names = [a["name"].lower() for a in bus["amenities"]]
            if not any(_matches_amenity(names, a) for a in self.amenities):
                return False
        return True


_SORTERS = {
    "departure": (lambda b: b["departureTime"], False),
    "price-low": (lambda b: b["price"], False),
    "price-high": (lambda b: b["price"], True),
    "rating": (lambda b: float(b["rating"]), True),
    "duration": (lambda b: b["duration"], False),
}


class SearchResultsManager:
    def __init__(self, source: DataSource, items_per_page=ITEMS_PER_PAGE):
        self.source = source
        self.items_per_page = items_per_page
        self.bus_data = source.list()
        self.filtered_data = list(self.bus_data)
        self.current_filters = FilterCriteria()
        self.current_sort = "departure"
        self.current_page = 1

    def apply_filters(self, criteria=None):
        if criteria is not None:
            self.current_filters = criteria
        self.filtered_data = [b for b in self.bus_data if self.current_filters.matches(b)]
        self.current_page = 1
        logger.debug(f"{len(self.filtered_data)} of {len(self.bus_data)} buses match filters")
        return self.filtered_data

    def sort_results(self, key=None):
        if key is not None:
            self.current_sort = key
        sorter = _SORTERS.get(self.current_sort)
        if sorter is None:
            return self.filtered_data
        keyfunc, reverse = sorter
        self.filtered_data.sort(key=keyfunc, reverse=reverse)
        return self.filtered_data

    def load_more_results(self):
        """Reveal the next page and return only the newly appended slice."""
        self.current_page += 1
        start = (self.current_page - 1) * self.items_per_page
        return self.filtered_data[start:self.current_page * self.items_per_page]

    def show_pages(self, page):
        self.current_page = 1
        while self.current_page < max(1, page) and self.has_more_results:
            self.load_more_results()

    @property
    def visible_results(self):
        return self.filtered_data[:self.current_page * self.items_per_page]

    @property
    def has_more_results(self):
        return self.current_page * self.items_per_page < len(self.filtered_data)

    @property
    def result_count(self):
        return len(self.filtered_data)

    def clear_all_filters(self):
        self.current_filters = FilterCriteria()
        self.filtered_data = list(self.bus_data)
        self.current_page = 1

    def find(self, bus_id):
        return next((b for b in self.bus_data if b["id"] == bus_id), None)
