# fixtures.py - synthetic data standing in for a backend
#
# Every generator is a DataSource so views and tests can swap in a
# StaticSource with known records.

import random
from datetime import datetime, timedelta

COMPANIES = [
    {"name": "Selam Bus", "logo": "SB", "color": "2563eb"},
    {"name": "Golden Bus", "logo": "GB", "color": "f59e0b"},
    {"name": "Sky Bus", "logo": "SK", "color": "10b981"},
    {"name": "Luxury Bus Lines", "logo": "LB", "color": "8b5cf6"},
    {"name": "Ethio Bus", "logo": "EB", "color": "f59e0b"},
    {"name": "Kibru Bus", "logo": "KB", "color": "ef4444"},
]
LISTING_BUS_TYPES = ["Higer Bus", "Business Class", "Standard Coach", "Luxury Sleeper", "Economy Coach"]
AMENITIES = [
    {"icon": "wifi", "name": "WiFi"},
    {"icon": "snowflake", "name": "AC"},
    {"icon": "restroom", "name": "Toilet"},
    {"icon": "plug", "name": "Charging"},
    {"icon": "tv", "name": "TV"},
    {"icon": "coffee", "name": "Snack"},
    {"icon": "bed", "name": "Sleeper"},
    {"icon": "utensils", "name": "Meal"},
]
DEPARTURE_TIMES = [
    ("06:00", "morning"), ("08:00", "morning"), ("10:30", "morning"),
    ("12:00", "afternoon"), ("14:00", "afternoon"), ("16:30", "afternoon"),
    ("18:00", "evening"), ("20:00", "evening"),
    ("22:00", "night"), ("23:30", "night"),
]

DEFAULT_FROM = "Addis Ababa"
DEFAULT_TO = "Hawassa"
DEFAULT_DEPARTURE_TERMINAL = "Autobus Tera"
DEFAULT_ARRIVAL_TERMINAL = "Main Terminal"

SAMPLE_ROUTES = [
    {"from": "Addis Ababa", "to": "Adama", "distance": 100, "duration": "2h 30m", "price": 200},
    {"from": "Addis Ababa", "to": "Hawassa", "distance": 275, "duration": "5h 30m", "price": 350},
    {"from": "Addis Ababa", "to": "Bahir Dar", "distance": 565, "duration": "10h 30m", "price": 450},
    {"from": "Addis Ababa", "to": "Gondar", "distance": 730, "duration": "13h 30m", "price": 500},
    {"from": "Addis Ababa", "to": "Mekele", "distance": 780, "duration": "14h 30m", "price": 550},
    {"from": "Addis Ababa", "to": "Dire Dawa", "distance": 515, "duration": "9h 30m", "price": 400},
]

ADMIN_COMPANIES = ["Selam Bus", "Sky Bus", "Golden Bus", "Ethio Bus"]
ADMIN_BUS_TYPES = ["Economy", "Business", "Luxury"]
ADMIN_AMENITIES = ["WiFi", "AC", "Toilet", "Charging Port", "Snack"]
BOOKING_STATUSES = ["pending", "confirmed", "cancelled", "completed"]


def calculate_arrival_time(departure_time, duration):
    hours, minutes = (int(x) for x in departure_time.split(":"))
    arrival = hours * 60 + minutes + duration * 60
    return f"{int(arrival // 60) % 24:02d}:{int(arrival % 60):02d}"


def _clock(rng):
    return f"{rng.randrange(24):02d}:{rng.randrange(60):02d}"


def _ethiopian_mobile(rng):
    return f"+2519{rng.randrange(10_000_000):08d}"


# -------------------- SOURCES --------------------
class DataSource:
    """list/filter/get contract shared by fixture generators and static data."""

    def list(self):
        raise NotImplementedError

    def filter(self, predicate):
        return [r for r in self.list() if predicate(r)]

    def get(self, record_id):
        return next((r for r in self.list() if r.get("id") == record_id), None)


class StaticSource(DataSource):
    def __init__(self, records):
        self._records = [dict(r) for r in records]

    def list(self):
        return list(self._records)


class RandomSource(DataSource):
    """Generates its records once per instance from the given rng."""

    def __init__(self, rng=None, count=None):
        self.rng = rng or random.Random()
        if count is not None:
            self.count = count
        self._records = None

    def list(self):
        if self._records is None:
            self._records = self.generate()
        return list(self._records)

    def generate(self):
        raise NotImplementedError


class RandomBusListings(RandomSource):
    count = 50

    def __init__(self, rng=None, count=None, from_city=DEFAULT_FROM, to_city=DEFAULT_TO):
        super().__init__(rng, count)
        self.from_city = from_city or DEFAULT_FROM
        self.to_city = to_city or DEFAULT_TO

    def generate(self):
        rng = self.rng
        listings = []
        for i in range(self.count):
            company = rng.choice(COMPANIES)
            time, period = rng.choice(DEPARTURE_TIMES)
            duration = 3.5 + rng.random() * 2
            amenities = rng.sample(AMENITIES, 3 + rng.randrange(4))
            listings.append({
                "id": f"bus-{i + 1}",
                "company": company["name"],
                "logo": company["logo"],
                "color": company["color"],
                "busType": rng.choice(LISTING_BUS_TYPES),
                "departureTime": time,
                "departurePeriod": period,
                "arrivalTime": calculate_arrival_time(time, duration),
                "duration": round(duration, 2),
                "rating": round(3 + rng.random() * 2, 1),
                "price": 120 + rng.randrange(200),
                "seatsAvailable": 10 + rng.randrange(30),
                "amenities": [dict(a) for a in amenities],
                "departureLocation": self.from_city,
                "departureTerminal": DEFAULT_DEPARTURE_TERMINAL,
                "arrivalLocation": self.to_city,
                "arrivalTerminal": DEFAULT_ARRIVAL_TERMINAL,
            })
        return listings


class RandomAdminBookings(RandomSource):
    count = 50

    def __init__(self, rng=None, count=None, now=None):
        super().__init__(rng, count)
        self.now = now or datetime.utcnow()

    def _days_ago(self, days):
        return self.now - timedelta(seconds=self.rng.randrange(days * 24 * 3600))

    def generate(self):
        rng = self.rng
        bookings = []
        for i in range(1, self.count + 1):
            route = rng.choice(SAMPLE_ROUTES)
            seats = rng.randrange(4) + 1
            base_price = 200 + rng.randrange(300)
            bookings.append({
                "id": f"SLM-{i:06d}",
                "customer": {
                    "name": f"Customer {i}",
                    "email": f"customer{i}@email.com",
                    "phone": _ethiopian_mobile(rng),
                },
                "route": {"from": route["from"], "to": route["to"]},
                "date": self._days_ago(30).date().isoformat(),
                "time": _clock(rng),
                "seats": seats,
                "amount": seats * base_price,
                "status": rng.choice(BOOKING_STATUSES),
                "createdAt": self._days_ago(30).isoformat(),
            })
        return bookings


class RandomAdminBuses(RandomSource):
    count = 20
    capacities = {"Economy": 45, "Business": 30, "Luxury": 20}
    prices = {"Economy": 200, "Business": 350, "Luxury": 500}

    def generate(self):
        rng = self.rng
        buses = []
        for i in range(1, self.count + 1):
            company = rng.choice(ADMIN_COMPANIES)
            bus_type = rng.choice(ADMIN_BUS_TYPES)
            buses.append({
                "id": f"BUS-{i:03d}",
                "company": company,
                "type": bus_type,
                "model": f"{company} Model {i}",
                "capacity": self.capacities[bus_type],
                "amenities": [a for a in ADMIN_AMENITIES if rng.random() > 0.5],
                "status": "active" if rng.random() > 0.2 else "maintenance",
                "route": {"from": DEFAULT_FROM, "to": rng.choice(SAMPLE_ROUTES)["to"]},
                "departureTime": _clock(rng),
                "price": self.prices[bus_type],
            })
        return buses


class RandomAdminUsers(RandomSource):
    count = 30

    def __init__(self, rng=None, count=None, now=None):
        super().__init__(rng, count)
        self.now = now or datetime.utcnow()

    def generate(self):
        rng = self.rng
        users = []
        for i in range(1, self.count + 1):
            joined = self.now - timedelta(seconds=rng.randrange(365 * 24 * 3600))
            users.append({
                "id": f"USER-{i:04d}",
                "name": f"User {i}",
                "email": f"user{i}@email.com",
                "phone": _ethiopian_mobile(rng),
                "type": rng.choice(["customer", "admin"]),
                "status": rng.choice(["active", "inactive"]),
                "joinDate": joined.date().isoformat(),
                "bookings": rng.randrange(10),
            })
        return users
