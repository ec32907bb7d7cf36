# backoffice.py - admin dashboard aggregation, filters, search and CSV export

import csv
import io
import json
import logging
import math
import random
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from fixtures import SAMPLE_ROUTES, RandomAdminBookings, RandomAdminBuses, RandomAdminUsers

logger = logging.getLogger(__name__)

PAGE_SIZES = {"bookings": 10, "buses": 8, "users": 10}
REVENUE_STATUSES = ("confirmed", "completed")


@dataclass
class Page:
    items: list
    page: int
    total_pages: int
    total_items: int

    @property
    def pages(self):
        return range(1, self.total_pages + 1)


def paginate(items, page=1, per_page=10):
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return Page(items=items[start:start + per_page], page=page,
                total_pages=total_pages, total_items=len(items))


def _month_ago(today):
    year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
    day = min(today.day, 28) if month == 2 else min(today.day, 30)
    return date(year, month, day)


def to_csv(records):
    """Header is the first record's keys; nested values are JSON-encoded."""
    if not records:
        return ""
    headers = list(records[0].keys())
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(headers)
    for row in records:
        values = []
        for header in headers:
            value = row.get(header)
            values.append(json.dumps(value) if isinstance(value, (dict, list)) else value)
        writer.writerow(values)
    return buf.getvalue()


class AdminManager:
    def __init__(self, bookings, buses, users, routes=None, today=None):
        self.bookings = bookings.list()
        self.buses = buses.list()
        self.users = users.list()
        self.routes = list(routes or SAMPLE_ROUTES)
        self.today = today or date.today()

    def dataset(self, kind):
        return {"bookings": self.bookings, "buses": self.buses, "users": self.users}[kind]

    # ---- dashboard ----
    def dashboard_stats(self):
        return {
            "total_revenue": sum(b["amount"] for b in self.bookings if b["status"] in REVENUE_STATUSES),
            "total_bookings": len(self.bookings),
            "active_users": sum(1 for u in self.users if u["status"] == "active"),
            "active_buses": sum(1 for b in self.buses if b["status"] == "active"),
            "pending_bookings": sum(1 for b in self.bookings if b["status"] == "pending"),
        }

    def recent_activity(self, limit=5):
        return sorted(self.bookings, key=lambda b: b["createdAt"], reverse=True)[:limit]

    def top_routes(self, limit=5):
        stats = OrderedDict()
        for booking in self.bookings:
            key = f"{booking['route']['from']} - {booking['route']['to']}"
            entry = stats.setdefault(key, {"route": key, "bookings": 0, "revenue": 0})
            entry["bookings"] += 1
            entry["revenue"] += booking["amount"]
        return sorted(stats.values(), key=lambda s: s["bookings"], reverse=True)[:limit]

    def revenue_series(self, days=30, rng=None):
        rng = rng or random.Random()
        labels, data = [], []
        for i in range(days - 1, -1, -1):
            day = self.today - timedelta(days=i)
            labels.append(day.strftime("%b %d"))
            data.append(rng.randrange(50000) + 20000)
        return {"labels": labels, "data": data}

    # ---- filters ----
    def filter_bookings(self, status=None, date_range=None, on_date=None):
        filtered = list(self.bookings)
        if status:
            filtered = [b for b in filtered if b["status"] == status]
        if date_range == "today":
            filtered = [b for b in filtered if b["date"] == self.today.isoformat()]
        elif date_range == "week":
            since = (self.today - timedelta(days=7)).isoformat()
            filtered = [b for b in filtered if b["date"] >= since]
        elif date_range == "month":
            since = _month_ago(self.today).isoformat()
            filtered = [b for b in filtered if b["date"] >= since]
        if on_date:
            filtered = [b for b in filtered if b["date"] == on_date]
        return filtered

    def filter_buses(self, company=None, bus_type=None):
        filtered = list(self.buses)
        if company:
            filtered = [b for b in filtered if company.lower() in b["company"].lower()]
        if bus_type:
            filtered = [b for b in filtered if b["type"].lower() == bus_type.lower()]
        return filtered

    def filter_users(self, user_type=None, status=None):
        filtered = list(self.users)
        if user_type:
            filtered = [u for u in filtered if u["type"] == user_type]
        if status:
            filtered = [u for u in filtered if u["status"] == status]
        return filtered

    # ---- global search ----
    def search(self, query):
        q = (query or "").strip().lower()
        if not q:
            return {"bookings": [], "buses": [], "users": []}

        def hit(*values):
            return any(q in (v or "").lower() for v in values)

        return {
            "bookings": [
                b for b in self.bookings
                if hit(b["id"], b["customer"]["name"], b["customer"]["email"], b["customer"]["phone"],
                       b["route"]["from"], b["route"]["to"])
            ],
            "buses": [
                b for b in self.buses
                if hit(b["id"], b["company"], b["model"], b["route"]["from"], b["route"]["to"])
            ],
            "users": [
                u for u in self.users
                if hit(u["id"], u["name"], u["email"], u["phone"])
            ],
        }

    def export(self, kind):
        rows = self.dataset(kind)
        logger.info(f"Exporting {len(rows)} {kind} records")
        return to_csv(rows)


def build_admin_manager(seed, now=None):
    """Fixture-backed manager; the same seed yields the same data set."""
    now = now or datetime.utcnow()
    rng = random.Random(seed)
    return AdminManager(
        bookings=RandomAdminBookings(rng, now=now),
        buses=RandomAdminBuses(rng),
        users=RandomAdminUsers(rng, now=now),
        today=now.date(),
    )
