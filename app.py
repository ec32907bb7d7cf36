# app.py - SelamBus intercity bus booking (SQLite: db.db)
# Run:  python app.py
# Requires: pip install -e .

from flask import Flask, render_template, request, redirect, url_for, flash, jsonify, send_file, abort, session
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager, login_user, logout_user, login_required, current_user, UserMixin
from passlib.hash import bcrypt
from jinja2 import DictLoader
from datetime import datetime, date, timedelta
from functools import wraps
import io, logging, math, os, random, secrets, threading, time
from sqlalchemy.exc import IntegrityError

import accounts
import backoffice
import pages
import payment
import search
import seatmap
from confirmation import BookingConfirmation
from fixtures import RandomBusListings

APP_SECRET = os.environ.get("SELAMBUS_SECRET", "change-this-secret")
DB_PATH = os.environ.get("SELAMBUS_DATABASE_URI", "sqlite:///db.db")  # <-- uses db.db in project root
API_DELAY = float(os.environ.get("SELAMBUS_API_DELAY", "1.5"))
PAYMENT_DELAY = float(os.environ.get("SELAMBUS_PAYMENT_DELAY", "2"))
LOG_LEVEL = os.environ.get("SELAMBUS_LOG_LEVEL", "INFO")
FIXTURE_SEED = int(os.environ.get("SELAMBUS_FIXTURE_SEED") or random.randrange(2 ** 31))
CANCEL_CUTOFF_MINUTES = 30     # default; can be updated via admin settings
MAX_UPLOAD_BYTES = 6 * 1024 * 1024  # request cap; receipts themselves must stay under 5MB

SEARCH_SEED_KEY = "searchSeed"
SEAT_SELECTION_KEY = "seatSelection"
PAYMENT_REFERENCE_KEY = "paymentReference"

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.update(
    SECRET_KEY=APP_SECRET,
    SQLALCHEMY_DATABASE_URI=DB_PATH,
    SQLALCHEMY_TRACK_MODIFICATIONS=False,
    PERMANENT_SESSION_LIFETIME=accounts.SESSION_LIFETIME,
    MAX_CONTENT_LENGTH=MAX_UPLOAD_BYTES,
    REMEMBER_COOKIE_DURATION=accounts.SESSION_LIFETIME,
    API_DELAY=API_DELAY,
    PAYMENT_DELAY=PAYMENT_DELAY,
    FIXTURE_SEED=FIXTURE_SEED,
    RNG=random.Random(),
    SLEEP=time.sleep,
    LISTINGS_SOURCE=None,  # a fixtures.DataSource; None means fresh random listings per search
)
app.jinja_env.loader = DictLoader(pages.TEMPLATES)

db = SQLAlchemy(app)
login_manager = LoginManager(app)
login_manager.login_view = "login"
login_manager.login_message_category = "warning"

# payment references currently inside the gateway
_payments_in_flight = set()
_payments_lock = threading.Lock()

# -------------------- MODELS --------------------
class User(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone = db.Column(db.String(20), unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), default="customer")  # 'customer', 'admin'
    provider = db.Column(db.String(20))  # google | facebook for social sign-in
    wallet_balance = db.Column(db.Float, default=0.0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    bookings = db.relationship("Booking", back_populates="user", order_by="Booking.created_at.desc()")
    transactions = db.relationship("Transaction", back_populates="user", order_by="Transaction.date.desc()")

    @property
    def name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def avatar(self):
        return accounts.avatar_url(self.first_name, self.last_name)

    def set_password(self, password):
        self.password_hash = bcrypt.hash(password)

    def check_password(self, password):
        return bcrypt.verify(password, self.password_hash)

class Booking(db.Model):
    __tablename__ = "bookings"
    id = db.Column(db.Integer, primary_key=True)
    reference = db.Column(db.String(20), unique=True, index=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    from_city = db.Column(db.String(80), nullable=False)
    to_city = db.Column(db.String(80), nullable=False)
    travel_date = db.Column(db.Date, nullable=False)
    departure_time = db.Column(db.String(5), nullable=False)
    company = db.Column(db.String(120))
    bus_type = db.Column(db.String(60))
    seats = db.Column(db.String(255))
    passenger_count = db.Column(db.Integer, default=1)
    amount = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(20))
    payment_id = db.Column(db.String(40))
    status = db.Column(db.String(20), default="confirmed")  # pending | confirmed | completed | cancelled
    details = db.Column(db.JSON)  # the paymentData the confirmation page was built from
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", back_populates="bookings")

    def departure_dt(self):
        return datetime.combine(self.travel_date, datetime.strptime(self.departure_time, "%H:%M").time())

class Transaction(db.Model):
    __tablename__ = "transactions"
    id = db.Column(db.String(32), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # payment | refund | deposit | withdrawal
    amount = db.Column(db.Float, nullable=False)
    date = db.Column(db.DateTime, default=datetime.utcnow)
    description = db.Column(db.String(255))

    user = db.relationship("User", back_populates="transactions")

class CancellationRequest(db.Model):
    __tablename__ = "cancellation_requests"
    id = db.Column(db.Integer, primary_key=True)
    reference = db.Column(db.String(20), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

# -------------------- HELPERS --------------------
@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))

def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated or current_user.role != "admin":
            abort(403)
        return f(*args, **kwargs)
    return wrapper

def _simulate_api_call():
    if app.config["API_DELAY"]:
        app.config["SLEEP"](app.config["API_DELAY"])

def _transaction_id():
    return f"TX{int(time.time() * 1000)}{secrets.randbelow(10000):04d}"

def _safe_next(url):
    return url if url and url.startswith("/") and not url.startswith("//") else None

def _start_session(user, remember):
    login_user(user, remember=remember, duration=accounts.SESSION_LIFETIME)
    session.permanent = remember
    session[accounts.SESSION_KEY] = accounts.session_stamp(user.id)
    logger.info(f"User {user.email} signed in (remember={remember})")

def _end_session():
    logout_user()
    session.pop(accounts.SESSION_KEY, None)

@app.before_request
def check_session_expiry():
    if request.endpoint in (None, "static") or not current_user.is_authenticated:
        return None
    stamp = session.get(accounts.SESSION_KEY)
    if stamp is None:
        # restored from the remember cookie
        session[accounts.SESSION_KEY] = accounts.session_stamp(current_user.id)
        return None
    try:
        expired = accounts.session_expired(stamp)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Discarding unreadable session for user {current_user.get_id()}: {e!r}")
        _end_session()
        return redirect(url_for("login"))
    if expired:
        logger.info(f"Session expired for user {current_user.get_id()}")
        _end_session()
        flash("Your session has expired. Please log in again.", "warning")
        return redirect(url_for("login"))
    return None

@app.context_processor
def inject_helpers():
    return {
        "star_rating": search.star_rating,
        "format_duration": search.format_duration,
        "method_labels": payment.METHOD_LABELS,
    }

# -------------------- SEARCH --------------------
@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "POST":
        criteria = search.SearchCriteria.from_form(request.form)
        problem = search.validate_search(criteria)
        if problem:
            flash(problem, "danger")
            return render_template("index.html", criteria=criteria, cities=search.ETHIOPIAN_CITIES,
                                   today=date.today().isoformat())
        session[search.SEARCH_DATA_KEY] = criteria.to_dict()
        session[SEARCH_SEED_KEY] = app.config["RNG"].randrange(2 ** 31)
        session.pop(search.SELECTED_BUS_KEY, None)
        logger.info(f"Search {criteria.from_city} -> {criteria.to_city} on {criteria.departure_date}")
        return redirect(url_for("search_results"))
    criteria = search.SearchCriteria.from_dict(session.get(search.SEARCH_DATA_KEY) or {})
    return render_template("index.html", criteria=criteria, cities=search.ETHIOPIAN_CITIES,
                           today=date.today().isoformat())

@app.route("/api/cities")
def api_cities():
    return jsonify(search.suggest_cities(request.args.get("q", "")))

def _results_manager():
    source = app.config["LISTINGS_SOURCE"]
    if source is None:
        seed = session.get(SEARCH_SEED_KEY)
        if seed is None:
            seed = session[SEARCH_SEED_KEY] = app.config["RNG"].randrange(2 ** 31)
        search_data = session.get(search.SEARCH_DATA_KEY) or {}
        # same seed, same listings: a selected id resolves to the bus the user saw
        source = RandomBusListings(random.Random(seed), from_city=search_data.get("from"),
                                   to_city=search_data.get("to"))
    return search.SearchResultsManager(source)

@app.route("/search")
def search_results():
    manager = _results_manager()
    criteria = search.FilterCriteria.from_args(request.args)
    manager.apply_filters(criteria)
    sort_key = request.args.get("sort", "departure")
    manager.sort_results(sort_key if sort_key in search.SORT_KEYS else "departure")
    try:
        page = int(request.args.get("page", 1))
    except ValueError:
        page = 1
    manager.show_pages(page)

    more_url = None
    if manager.has_more_results:
        args = request.args.to_dict(flat=False)
        args["page"] = [manager.current_page + 1]
        more_url = url_for("search_results", **args)

    companies = sorted({b["company"] for b in manager.bus_data})
    return render_template(
        "results.html", manager=manager, filters=criteria, more_url=more_url, companies=companies,
        search_data=session.get(search.SEARCH_DATA_KEY) or {}, cities=search.ETHIOPIAN_CITIES,
        today=date.today().isoformat(), company_slug=search.company_slug,
    )

def _seat_class_for(bus):
    label = (bus or {}).get("busType", "")
    for bus_class in ("luxury", "business", "economy"):
        if search.matches_bus_type(label, bus_class):
            return bus_class
    return "economy"

@app.route("/search/select/<bus_id>", methods=["POST"])
def select_bus(bus_id):
    bus = _results_manager().find(bus_id)
    if bus is None:
        abort(404)
    session[search.SELECTED_BUS_KEY] = bus
    session[SEAT_SELECTION_KEY] = {"busType": _seat_class_for(bus), "selectedSeats": [], "forms": {}}
    session.pop(seatmap.BOOKING_DATA_KEY, None)
    logger.info(f"Selected {bus['id']} ({bus['company']} {bus['departureTime']})")
    return redirect(url_for("seats"))

# -------------------- SEATS --------------------
def _seat_manager():
    return seatmap.SeatMapManager.from_dict(session.get(SEAT_SELECTION_KEY), notify=flash)

@app.route("/seats", methods=["GET", "POST"])
def seats():
    manager = _seat_manager()
    if request.method == "POST":
        manager.update_forms(request.form)
        if request.form.get("toggle"):
            manager.toggle_seat(request.form["toggle"])
        elif "clear" in request.form:
            manager.clear_all_seats()
        elif "switch" in request.form:
            try:
                manager.switch_bus_class(request.form.get("busType"))
            except ValueError as e:
                flash(str(e), "danger")
        elif "proceed" in request.form:
            if manager.proceed_to_payment(session) is not None:
                session.pop(SEAT_SELECTION_KEY, None)
                session.pop(PAYMENT_REFERENCE_KEY, None)
                return redirect(url_for("payment_page"))
        session[SEAT_SELECTION_KEY] = manager.to_dict()
        return redirect(url_for("seats"))
    return render_template("seats.html", manager=manager, bus=session.get(search.SELECTED_BUS_KEY),
                           layouts=seatmap.LAYOUTS, prices=seatmap.SEAT_PRICES)

# -------------------- PAYMENT --------------------
def _payment_context(booking_data, method, errors=None):
    route, bus = payment.trip_summary(session.get(search.SEARCH_DATA_KEY), session.get(search.SELECTED_BUS_KEY))
    pricing = payment.price_breakdown(booking_data)
    reference = session.get(PAYMENT_REFERENCE_KEY)
    if reference is None:
        reference = session[PAYMENT_REFERENCE_KEY] = payment.generate_reference(rng=app.config["RNG"])
    return dict(
        booking=booking_data, route=route, bus=bus, pricing=pricing, reference=reference,
        method=method, methods=payment.PAYMENT_METHODS, errors=errors or {},
        pay_label=payment.pay_button_label(method, pricing["total"]),
        card_fee=round(pricing["total"] * payment.CARD_FEE_RATE),
    )

def _record_booking(user, data):
    route, pricing = data["route"], data["pricing"]
    booking = Booking(
        reference=data["reference"],
        user_id=user.id,
        from_city=route["from"],
        to_city=route["to"],
        travel_date=datetime.strptime(route["departureDate"], "%Y-%m-%d").date(),
        departure_time=route["departureTime"],
        company=data["bus"]["company"],
        bus_type=data["bus"]["type"],
        seats=", ".join(data["selectedSeats"]),
        passenger_count=len(data["passengers"]),
        amount=pricing["total"],
        payment_method=data["paymentMethod"],
        payment_id=data["paymentId"],
        status="pending" if data["requiresVerification"] else "confirmed",
        details=data,
    )
    tx = Transaction(id=_transaction_id(), user_id=user.id, type="payment", amount=-pricing["total"],
                     description=f"Payment for booking {data['reference']}")
    db.session.add_all([booking, tx])
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(f"Booking {data['reference']} already recorded")
        return None
    logger.info(f"Booking {booking.reference} recorded for {user.email}")
    return booking

@app.route("/payment", methods=["GET", "POST"])
def payment_page():
    booking_data = session.get(seatmap.BOOKING_DATA_KEY)
    if not booking_data:
        flash("Please select your seats first", "warning")
        return redirect(url_for("seats"))

    if request.method == "GET":
        method = request.args.get("method", "telebirr")
        if method not in payment.PAYMENT_METHODS:
            method = "telebirr"
        return render_template("payment.html", **_payment_context(booking_data, method))

    method = request.form.get("paymentMethod", "telebirr")
    receipt = None
    upload = request.files.get("bankReceipt")
    if upload is not None and upload.filename:
        upload.stream.seek(0, os.SEEK_END)
        receipt = payment.Receipt(filename=upload.filename, content_type=upload.mimetype,
                                  size=upload.stream.tell())

    ctx = _payment_context(booking_data, method if method in payment.PAYMENT_METHODS else "telebirr")
    reference = ctx["reference"]
    with _payments_lock:
        if reference in _payments_in_flight:
            flash("A payment is already being processed", "warning")
            return redirect(url_for("payment_page", method=ctx["method"]))
        _payments_in_flight.add(reference)

    processor = payment.PaymentProcessor(rng=app.config["RNG"], sleep=app.config["SLEEP"],
                                         delay=app.config["PAYMENT_DELAY"])
    try:
        record = processor.process_payment(method, request.form, receipt)
    except payment.PaymentValidationError as e:
        ctx["errors"] = e.errors
        return render_template("payment.html", **ctx)
    except payment.PaymentError as e:
        flash(str(e), "danger")
        return render_template("payment.html", **ctx)
    finally:
        with _payments_lock:
            _payments_in_flight.discard(reference)

    if not record.success:
        # re-render so the entered details survive the retry
        flash(record.message, "danger")
        return render_template("payment.html", **ctx)

    data = payment.merge_payment(booking_data, record, reference, ctx["route"], ctx["bus"], ctx["pricing"])
    session[payment.PAYMENT_DATA_KEY] = data
    session.pop(seatmap.BOOKING_DATA_KEY, None)
    session.pop(PAYMENT_REFERENCE_KEY, None)
    if current_user.is_authenticated:
        _record_booking(current_user, data)
    flash(record.message, "success")
    return redirect(url_for("confirmation"))

# -------------------- CONFIRMATION --------------------
def _current_confirmation():
    data = session.get(payment.PAYMENT_DATA_KEY)
    return BookingConfirmation.from_payment_data(data) if data else None

def _png(conf):
    return send_file(io.BytesIO(conf.qr_png()), mimetype="image/png")

def _pdf(conf):
    return send_file(io.BytesIO(conf.ticket_pdf()), mimetype="application/pdf",
                     as_attachment=True, download_name=conf.ticket_filename)

@app.route("/confirmation")
def confirmation():
    conf = _current_confirmation()
    if conf is None:
        flash("No booking found. Please complete your booking first.", "warning")
        return redirect(url_for("index"))
    requested = CancellationRequest.query.filter_by(reference=conf.reference).first() is not None
    return render_template("confirmation.html", conf=conf, cancellation_requested=requested,
                           qr_url=url_for("confirmation_qr"), pdf_url=url_for("confirmation_pdf"),
                           actions=True)

@app.route("/confirmation/qr.png")
def confirmation_qr():
    conf = _current_confirmation()
    if conf is None:
        abort(404)
    return _png(conf)

@app.route("/confirmation/ticket.pdf")
def confirmation_pdf():
    conf = _current_confirmation()
    if conf is None:
        abort(404)
    logger.info(f"Ticket download for {conf.reference}")
    return _pdf(conf)

@app.route("/confirmation/email", methods=["POST"])
def confirmation_email():
    if _current_confirmation() is None:
        abort(404)
    _simulate_api_call()
    flash("Ticket sent to your email successfully!", "success")
    return redirect(url_for("confirmation"))

@app.route("/confirmation/sms", methods=["POST"])
def confirmation_sms():
    if _current_confirmation() is None:
        abort(404)
    _simulate_api_call()
    flash("Ticket details sent via SMS successfully!", "success")
    return redirect(url_for("confirmation"))

@app.route("/confirmation/cancel", methods=["POST"])
def confirmation_cancel():
    conf = _current_confirmation()
    if conf is None:
        abort(404)
    if CancellationRequest.query.filter_by(reference=conf.reference).first():
        flash("Cancellation has already been requested for this booking", "info")
        return redirect(url_for("confirmation"))
    user_id = current_user.id if current_user.is_authenticated else None
    db.session.add(CancellationRequest(reference=conf.reference, user_id=user_id))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        flash("Cancellation has already been requested for this booking", "info")
        return redirect(url_for("confirmation"))
    logger.info(f"Cancellation requested for {conf.reference}")
    flash("Booking cancellation request submitted successfully! "
          "You will receive a confirmation email within 24 hours.", "success")
    return redirect(url_for("confirmation"))

def _owned_booking(reference):
    b = Booking.query.filter_by(reference=reference).first_or_404()
    if b.user_id != current_user.id and current_user.role != "admin":
        abort(403)
    return b

@app.route("/booking/<reference>")
@login_required
def booking_detail(reference):
    b = _owned_booking(reference)
    conf = BookingConfirmation.from_payment_data(b.details)
    return render_template("confirmation.html", conf=conf, booking=b, actions=False,
                           qr_url=url_for("booking_qr", reference=reference),
                           pdf_url=url_for("booking_pdf", reference=reference))

@app.route("/booking/<reference>/qr.png")
@login_required
def booking_qr(reference):
    return _png(BookingConfirmation.from_payment_data(_owned_booking(reference).details))

@app.route("/booking/<reference>/ticket.pdf")
@login_required
def booking_pdf(reference):
    return _pdf(BookingConfirmation.from_payment_data(_owned_booking(reference).details))

# -------------------- AUTH --------------------
@app.route("/register", methods=["GET", "POST"])
def register():
    if request.method == "POST":
        errors = accounts.validate_registration(request.form)
        email = (request.form.get("email") or "").strip().lower()
        phone = accounts.normalize_phone(request.form.get("phoneNumber"))
        if not errors:
            _simulate_api_call()
            if User.query.filter_by(email=email).first():
                errors["email"] = "Email address is already registered"
            elif User.query.filter_by(phone=phone).first():
                errors["phoneNumber"] = "Phone number is already registered"
        if errors:
            return render_template("register.html", errors=errors, form=request.form)

        u = User(first_name=request.form["firstName"].strip(), last_name=request.form["lastName"].strip(),
                 email=email, phone=phone, role="customer")
        u.set_password(request.form["password"])
        db.session.add(u)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            flash("Registration failed. Please try again.", "danger")
            return redirect(url_for("register"))
        logger.info(f"Registered {email}")
        flash("Account created successfully! Please log in.", "success")
        return redirect(url_for("login"))
    return render_template("register.html", errors={}, form={})

@app.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        identifier = (request.form.get("email") or "").strip()
        password = request.form.get("password") or ""
        errors = accounts.validate_login(identifier, password)
        if not errors:
            _simulate_api_call()
            user = User.query.filter(
                (User.email == identifier.lower()) | (User.phone == accounts.normalize_phone(identifier))
            ).first()
            if user and user.check_password(password):
                _start_session(user, remember=bool(request.form.get("rememberMe")))
                flash("Login successful!", "success")
                return redirect(_safe_next(request.args.get("next")) or url_for("profile"))
            logger.warning(f"Failed sign-in for {identifier}")
            errors = {"email": "Invalid email/phone or password"}
        return render_template("login.html", errors=errors, form=request.form)
    return render_template("login.html", errors={}, form={})

@app.route("/logout")
@login_required
def logout():
    _end_session()
    flash("Logged out successfully!", "info")
    return redirect(url_for("index"))

@app.route("/forgot-password", methods=["GET", "POST"])
def forgot_password():
    errors = {}
    if request.method == "POST":
        email = (request.form.get("email") or "").strip().lower()
        if not accounts.validate_email(email):
            errors["email"] = "Please enter a valid email address"
        else:
            _simulate_api_call()
            if User.query.filter_by(email=email).first() is None:
                errors["email"] = "Email address not found"
            else:
                flash("Password reset instructions sent to your email!", "success")
                return redirect(url_for("login"))
    return render_template("forgot.html", errors=errors)

@app.route("/auth/social/<provider>", methods=["POST"])
def social_login(provider):
    if provider not in ("google", "facebook"):
        abort(404)
    _simulate_api_call()
    email = f"user@{provider}.com"
    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(first_name=provider.capitalize(), last_name="User", email=email,
                    role="customer", provider=provider)
        user.set_password(secrets.token_urlsafe(16))  # no local password
        db.session.add(user)
        db.session.commit()
    _start_session(user, remember=False)
    flash(f"Login successful with {provider}!", "success")
    return redirect(url_for("profile"))

# -------------------- PROFILE --------------------
def _filter_user_bookings(status, date_range):
    qry = Booking.query.filter_by(user_id=current_user.id)
    if status:
        qry = qry.filter(Booking.status == status)
    today = date.today()
    if date_range == "today":
        qry = qry.filter(Booking.travel_date == today)
    elif date_range == "week":
        qry = qry.filter(Booking.travel_date >= today - timedelta(days=7))
    elif date_range == "month":
        qry = qry.filter(Booking.travel_date >= today - timedelta(days=30))
    return qry.order_by(Booking.created_at.desc()).all()

@app.route("/profile")
@login_required
def profile():
    tab = request.args.get("tab", "overview")
    status = request.args.get("status", "")
    date_range = request.args.get("range", "")
    bookings = current_user.bookings
    transactions = current_user.transactions
    stats = {
        "total_bookings": len(bookings),
        "total_spent": sum(b.amount for b in bookings if b.status != "cancelled"),
        "wallet_balance": current_user.wallet_balance,
        "total_deposits": sum(t.amount for t in transactions if t.type == "deposit"),
        "total_withdrawals": sum(abs(t.amount) for t in transactions if t.type == "withdrawal"),
    }
    return render_template(
        "profile.html", tab=tab, stats=stats, recent=bookings[:5], transactions=transactions,
        bookings=_filter_user_bookings(status, date_range), status=status, date_range=date_range,
        cutoff=CANCEL_CUTOFF_MINUTES,
    )

@app.route("/profile/bookings/<reference>/cancel", methods=["POST"])
@login_required
def profile_cancel_booking(reference):
    b = _owned_booking(reference)
    if b.status == "cancelled":
        flash("Booking is already cancelled", "info")
        return redirect(url_for("profile", tab="bookings"))
    # enforce cancellation cutoff
    if b.departure_dt() - datetime.now() <= timedelta(minutes=CANCEL_CUTOFF_MINUTES):
        flash(f"Cannot cancel within {CANCEL_CUTOFF_MINUTES} minutes of departure.", "warning")
        return redirect(url_for("profile", tab="bookings"))
    b.status = "cancelled"
    b.user.wallet_balance += b.amount
    db.session.add(Transaction(id=_transaction_id(), user_id=b.user_id, type="refund", amount=b.amount,
                               description=f"Refund for cancelled booking {b.reference}"))
    db.session.commit()
    logger.info(f"Booking {b.reference} cancelled, refunded ETB {b.amount}")
    flash("Booking cancelled successfully. Refund processed.", "success")
    return redirect(url_for("profile", tab="bookings"))

@app.route("/profile/edit", methods=["POST"])
@login_required
def profile_edit():
    first_name = (request.form.get("firstName") or "").strip()
    last_name = (request.form.get("lastName") or "").strip()
    email = (request.form.get("email") or "").strip().lower()
    phone = accounts.normalize_phone(request.form.get("phone"))
    if len(first_name) < 2 or len(last_name) < 2:
        flash("First and last name must be at least 2 characters", "danger")
    elif not accounts.validate_email(email):
        flash("Please enter a valid email address", "danger")
    elif phone and not accounts.validate_phone(phone):
        flash("Please enter a valid phone number", "danger")
    else:
        current_user.first_name, current_user.last_name = first_name, last_name
        current_user.email, current_user.phone = email, phone or None
        try:
            db.session.commit()
            flash("Profile updated successfully!", "success")
        except IntegrityError:
            db.session.rollback()
            flash("Email or phone number is already in use", "danger")
    return redirect(url_for("profile", tab="settings"))

@app.route("/profile/password", methods=["POST"])
@login_required
def profile_password():
    new_password = request.form.get("newPassword") or ""
    if not current_user.check_password(request.form.get("currentPassword") or ""):
        flash("Current password is incorrect", "danger")
    elif new_password != request.form.get("confirmPassword"):
        flash("New passwords do not match!", "danger")
    elif len(new_password) < 8:
        flash("Password must be at least 8 characters long!", "danger")
    else:
        current_user.set_password(new_password)
        db.session.commit()
        flash("Password changed successfully!", "success")
    return redirect(url_for("profile", tab="settings"))

@app.route("/profile/funds", methods=["POST"])
@login_required
def profile_add_funds():
    try:
        amount = float(request.form.get("amount", ""))
    except ValueError:
        amount = 0
    if not math.isfinite(amount) or amount <= 0:
        flash("Please enter a valid amount!", "danger")
        return redirect(url_for("profile", tab="wallet"))
    method = request.form.get("paymentMethod", "telebirr")
    _simulate_api_call()
    current_user.wallet_balance += amount
    db.session.add(Transaction(id=_transaction_id(), user_id=current_user.id, type="deposit", amount=amount,
                               description=f"Wallet deposit via {payment.METHOD_LABELS.get(method, method)}"))
    db.session.commit()
    flash(f"ETB {amount:,g} added to your wallet!", "success")
    return redirect(url_for("profile", tab="wallet"))

# -------------------- ADMIN --------------------
def _admin_data():
    return backoffice.build_admin_manager(app.config["FIXTURE_SEED"])

def _page_arg():
    try:
        return int(request.args.get("page", 1))
    except ValueError:
        return 1

@app.route("/admin")
@login_required
@admin_required
def admin_dashboard():
    manager = _admin_data()
    return render_template("admin/index.html", stats=manager.dashboard_stats(),
                           recent=manager.recent_activity(), top_routes=manager.top_routes(),
                           registered_users=User.query.count(), booking_count=Booking.query.count())

@app.route("/admin/revenue.json")
@login_required
@admin_required
def admin_revenue():
    return jsonify(_admin_data().revenue_series(rng=app.config["RNG"]))

@app.route("/admin/bookings")
@login_required
@admin_required
def admin_bookings():
    rows = _admin_data().filter_bookings(status=request.args.get("status"), date_range=request.args.get("range"),
                                         on_date=request.args.get("date"))
    page = backoffice.paginate(rows, _page_arg(), backoffice.PAGE_SIZES["bookings"])
    return render_template("admin/bookings.html", page=page)

@app.route("/admin/buses")
@login_required
@admin_required
def admin_buses():
    rows = _admin_data().filter_buses(company=request.args.get("company"), bus_type=request.args.get("type"))
    page = backoffice.paginate(rows, _page_arg(), backoffice.PAGE_SIZES["buses"])
    return render_template("admin/buses.html", page=page)

@app.route("/admin/users")
@login_required
@admin_required
def admin_users():
    rows = _admin_data().filter_users(user_type=request.args.get("type"), status=request.args.get("status"))
    page = backoffice.paginate(rows, _page_arg(), backoffice.PAGE_SIZES["users"])
    return render_template("admin/users.html", page=page)

@app.route("/admin/search")
@login_required
@admin_required
def admin_search():
    q = request.args.get("q", "")
    return render_template("admin/search.html", q=q, results=_admin_data().search(q))

@app.route("/admin/export/<kind>.csv")
@login_required
@admin_required
def admin_export(kind):
    if kind not in backoffice.PAGE_SIZES:
        abort(404)
    body = _admin_data().export(kind).encode("utf-8")
    return send_file(io.BytesIO(body), mimetype="text/csv", as_attachment=True,
                     download_name=f"{kind}_{date.today().isoformat()}.csv")

@app.route("/admin/settings", methods=["GET", "POST"])
@login_required
@admin_required
def admin_settings():
    global CANCEL_CUTOFF_MINUTES
    if request.method == "POST":
        try:
            CANCEL_CUTOFF_MINUTES = max(0, int(request.form.get("cutoff")))
            flash("Settings updated", "success")
        except (TypeError, ValueError):
            flash("Invalid cutoff", "danger")
        return redirect(url_for("admin_settings"))
    return render_template("admin/settings.html", cutoff=CANCEL_CUTOFF_MINUTES)

# -------------------- CONTACT --------------------
@app.route("/contact", methods=["GET", "POST"])
def contact():
    if request.method == "POST":
        fields = [(request.form.get(k) or "").strip() for k in ("name", "email", "phone", "message")]
        if not all(fields):
            flash("Please fill in all contact form fields", "danger")
            return render_template("contact.html", form=request.form)
        logger.info(f"Contact message from {fields[1]}")
        flash("Thanks! Your message has been sent.", "success")
        return redirect(url_for("contact"))
    return render_template("contact.html", form={})

# -------------------- ERRORS --------------------
@app.errorhandler(413)
def too_large(e):
    flash("File size must be less than 5MB", "danger")
    if request.endpoint == "payment_page":
        return redirect(url_for("payment_page", method="bank"))
    return redirect(request.path)

@app.errorhandler(403)
def forbidden(e):
    return render_template("errors/403.html"), 403

@app.errorhandler(404)
def not_found(e):
    return render_template("errors/404.html"), 404

# -------------------- DB INIT & SEED --------------------
def seed_defaults():
    # Seed a default admin if not present
    if not User.query.filter_by(email="admin@selambus.com").first():
        admin = User(first_name="Admin", last_name="SelamBus", email="admin@selambus.com",
                     phone="+251911000000", role="admin")
        admin.set_password("Admin123!")
        db.session.add(admin)
    db.session.commit()

with app.app_context():
    db.create_all()
    seed_defaults()

if __name__ == "__main__":
    app.run(debug=True)
