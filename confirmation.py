# confirmation.py - booking confirmation view model, QR payload and PDF ticket

import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime

import qrcode
from PIL import Image, ImageDraw, ImageFont

from payment import METHOD_LABELS

logger = logging.getLogger(__name__)

# A4 in millimetres, drawn at 5 px/mm
PAGE_MM = (210, 297)
PX_PER_MM = 5
PDF_DPI = 127
# the footer starts at 280 mm
CONTENT_BOTTOM_MM = 270
CONTINUED_TOP_MM = 30
PAYMENT_BLOCK_MM = 60

BLUE = (59, 130, 246)
DARK = (31, 41, 55)
GRAY = (107, 114, 128)
BLACK = (0, 0, 0)


def format_time(value):
    """'14:05' -> '2:05 PM'."""
    hours, minutes = value.split(":")
    hour = int(hours)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes} {suffix}"


def calculate_duration(departure_time, arrival_time):
    dep_h, dep_m = (int(x) for x in departure_time.split(":"))
    arr_h, arr_m = (int(x) for x in arrival_time.split(":"))
    start = dep_h * 60 + dep_m
    end = arr_h * 60 + arr_m
    if end < start:  # overnight
        end += 24 * 60
    minutes = end - start
    return f"{minutes // 60}h {minutes % 60}m"


@dataclass
class BookingConfirmation:
    reference: str
    route: dict
    bus: dict
    passengers: list
    pricing: dict
    payment_method: str
    payment_id: str
    timestamp: str
    requires_verification: bool = False

    @classmethod
    def from_payment_data(cls, data):
        passengers = []
        for p in data.get("passengers", []):
            passengers.append({
                "name": p.get("name", ""),
                "seat": p.get("seatNumber") or p.get("seat", ""),
                "gender": (p.get("gender") or "").capitalize(),
                "age": p.get("age", ""),
            })
        return cls(
            reference=data["reference"],
            route=data["route"],
            bus=data["bus"],
            passengers=passengers,
            pricing=data["pricing"],
            payment_method=data.get("paymentMethod", ""),
            payment_id=data.get("paymentId", ""),
            timestamp=data.get("timestamp") or datetime.now().isoformat(),
            requires_verification=bool(data.get("requiresVerification")),
        )

    @property
    def payment_method_label(self):
        return METHOD_LABELS.get(self.payment_method, self.payment_method)

    @property
    def trip_date(self):
        day = datetime.strptime(self.route["departureDate"], "%Y-%m-%d")
        return day.strftime("%A, %B %d, %Y")

    @property
    def departure_time(self):
        return format_time(self.route["departureTime"])

    @property
    def arrival_time(self):
        return format_time(self.route["arrivalTime"])

    @property
    def duration(self):
        return calculate_duration(self.route["departureTime"], self.route["arrivalTime"])

    def qr_payload(self):
        return json.dumps({
            "reference": self.reference,
            "route": self.route,
            "passengers": self.passengers,
            "total": self.pricing["total"],
            "timestamp": self.timestamp,
        })

    def qr_image(self):
        qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_H, box_size=8, border=2)
        qr.add_data(self.qr_payload())
        qr.make(fit=True)
        return qr.make_image(fill_color="#1f2937", back_color="#ffffff").get_image().convert("RGB")

    def qr_png(self):
        buf = io.BytesIO()
        self.qr_image().save(buf, format="PNG")
        return buf.getvalue()

    @property
    def ticket_filename(self):
        return f"SelamBus_Ticket_{self.reference}.pdf"

    def ticket_pages(self):
        """Lay the ticket out as pages of (x_mm, y_mm, text, size, fill, anchor) entries.

        Content that would run into the footer moves to a fresh page; the
        payment block is never split.
        """
        pages = [[]]
        y = 0

        def text(x_mm, y_mm, value, size=12, fill=BLACK, anchor="ls"):
            pages[-1].append((x_mm, y_mm, value, size, fill, anchor))

        def ensure_room(height):
            nonlocal y
            if y + height > CONTENT_BOTTOM_MM:
                pages.append([])
                text(105, 20, f"SelamBus E-Ticket {self.reference} (continued)", size=14, fill=BLUE, anchor="ms")
                y = CONTINUED_TOP_MM

        text(105, 20, "SelamBus E-Ticket", size=20, fill=BLUE, anchor="ms")
        booked_on = datetime.fromisoformat(self.timestamp).date().isoformat()
        text(20, 35, f"Booking Reference: {self.reference}")
        text(20, 45, f"Booking Date: {booked_on}")

        text(20, 60, "Trip Details", size=16, fill=DARK)
        for i, line in enumerate([
            f"From: {self.route['from']}",
            f"To: {self.route['to']}",
            f"Date: {self.route['departureDate']}",
            f"Departure: {self.route['departureTime']}",
            f"Arrival: {self.route['arrivalTime']}",
            f"Bus Company: {self.bus['company']}",
            f"Bus Type: {self.bus['type']}",
        ]):
            text(20, 70 + i * 10, line)

        text(20, 145, "Passengers", size=16, fill=DARK)
        y = 155
        for i, p in enumerate(self.passengers, start=1):
            ensure_room(0)
            text(20, y, f"{i}. {p['name']} - Seat {p['seat']}")
            y += 10

        ensure_room(PAYMENT_BLOCK_MM)
        text(20, y + 10, "Payment Details", size=16, fill=DARK)
        pricing = self.pricing
        for i, line in enumerate([
            f"Base Fare: ETB {pricing['baseFare']}",
            f"Taxes: ETB {pricing['tax']}",
            f"Convenience Fee: ETB {pricing['convenienceFee']}",
            f"Total: ETB {pricing['total']}",
            f"Payment Method: {self.payment_method_label}",
        ], start=2):
            text(20, y + i * 10, line)
        return pages

    def ticket_pdf(self):
        width, height = (d * PX_PER_MM for d in PAGE_MM)
        images = []
        for number, entries in enumerate(self.ticket_pages(), start=1):
            page = Image.new("RGB", (width, height), "white")
            draw = ImageDraw.Draw(page)

            def text(x_mm, y_mm, value, size=12, fill=BLACK, anchor="ls"):
                font = ImageFont.load_default(size=size * 2)
                draw.text((x_mm * PX_PER_MM, y_mm * PX_PER_MM), value, fill=fill, font=font, anchor=anchor)

            for entry in entries:
                text(*entry)
            draw.line((20 * PX_PER_MM, 25 * PX_PER_MM, 190 * PX_PER_MM, 25 * PX_PER_MM), fill=BLUE, width=2)
            if number == 1:
                qr = self.qr_image().resize((50 * PX_PER_MM, 50 * PX_PER_MM))
                page.paste(qr, (140 * PX_PER_MM, 35 * PX_PER_MM))

            text(20, 280, "Important: Please arrive at the terminal 30 minutes before departure time.", size=10, fill=GRAY)
            text(20, 285, "Carry a valid ID for verification. Contact support@selambus.com for assistance.", size=10, fill=GRAY)
            images.append(page)

        buf = io.BytesIO()
        images[0].save(buf, format="PDF", resolution=PDF_DPI, save_all=True, append_images=images[1:])
        logger.info(f"Ticket rendered for {self.reference} ({len(images)} page(s))")
        return buf.getvalue()
