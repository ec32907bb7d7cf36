"""Accounts, profile, admin and contact pages."""

import csv
import io
import logging
from datetime import date, datetime, timedelta

import app as selambus
from accounts import SESSION_KEY
from conftest import ADMIN, CUSTOMER, add_booking, login

REGISTRATION = {
    "firstName": "Sara", "lastName": "Tesfaye", "email": "sara@example.com", "phoneNumber": "+251 922 334 455",
    "password": "Strong#2024", "confirmPassword": "Strong#2024", "terms": "1",
}


class TestRegistration:
    def test_register_then_login_by_phone(self, client, flask_app):
        resp = client.post("/register", data=REGISTRATION)
        assert resp.headers["Location"].endswith("/login")
        with flask_app.app_context():
            user = selambus.User.query.filter_by(email="sara@example.com").one()
            assert user.phone == "+251922334455"
            assert user.password_hash != REGISTRATION["password"]
            assert user.role == "customer"

        resp = login(client, "+251922334455", REGISTRATION["password"])
        assert resp.headers["Location"].endswith("/profile")

    def test_duplicate_email(self, client, customer_id):
        resp = client.post("/register", data=dict(REGISTRATION, email=CUSTOMER["email"]))
        assert resp.status_code == 200
        assert b"Email address is already registered" in resp.data

    def test_duplicate_phone(self, client, customer_id):
        resp = client.post("/register", data=dict(REGISTRATION, phoneNumber=CUSTOMER["phone"]))
        assert b"Phone number is already registered" in resp.data

    def test_field_errors(self, client, flask_app):
        resp = client.post("/register", data=dict(REGISTRATION, confirmPassword="nope", terms=""))
        assert b"Passwords do not match" in resp.data
        assert b"You must agree to the terms and conditions" in resp.data
        with flask_app.app_context():
            assert selambus.User.query.count() == 1


class TestLogin:
    def test_success_redirects_to_next(self, client, customer_id):
        resp = client.post("/login?next=/admin/users", data={"email": CUSTOMER["email"], "password": CUSTOMER["password"]})
        assert resp.headers["Location"].endswith("/admin/users")

    def test_offsite_next_ignored(self, client, customer_id):
        resp = client.post("/login?next=//evil.example", data={"email": CUSTOMER["email"], "password": CUSTOMER["password"]})
        assert resp.headers["Location"].endswith("/profile")

    def test_wrong_password(self, client, customer_id):
        resp = login(client, CUSTOMER["email"], "Wrong123!")
        assert resp.status_code == 200
        assert b"Invalid email/phone or password" in resp.data

    def test_remember_me_sets_cookie(self, client, customer_id):
        resp = login(client, CUSTOMER["phone"], CUSTOMER["password"], remember=True)
        assert any(c.startswith("remember_token=") for c in resp.headers.getlist("Set-Cookie"))

    def test_logout(self, customer_client):
        resp = customer_client.get("/logout", follow_redirects=True)
        assert b"Logged out successfully!" in resp.data
        assert customer_client.get("/profile").status_code == 302

    def test_forgot_password(self, client, customer_id):
        resp = client.post("/forgot-password", data={"email": "nobody@example.com"})
        assert b"Email address not found" in resp.data
        resp = client.post("/forgot-password", data={"email": CUSTOMER["email"]}, follow_redirects=True)
        assert b"Password reset instructions sent to your email!" in resp.data

    def test_social_login_reuses_account(self, client, flask_app):
        resp = client.post("/auth/social/google", follow_redirects=True)
        assert b"Login successful with google!" in resp.data
        client.get("/logout")
        client.post("/auth/social/google")
        with flask_app.app_context():
            assert selambus.User.query.filter_by(provider="google").count() == 1
        assert client.post("/auth/social/twitter").status_code == 404


class TestSessionExpiry:
    def test_expired_session_logs_out(self, customer_client):
        with customer_client.session_transaction() as sess:
            stale = datetime.now() - timedelta(hours=25)
            sess[SESSION_KEY] = dict(sess[SESSION_KEY], timestamp=stale.isoformat())
        resp = customer_client.get("/profile")
        assert resp.headers["Location"].endswith("/login")
        resp = customer_client.get("/login")
        assert b"Your session has expired. Please log in again." in resp.data
        assert customer_client.get("/profile").status_code == 302

    def test_corrupt_stamp_discarded(self, customer_client, caplog):
        caplog.set_level(logging.WARNING, logger="app")
        with customer_client.session_transaction() as sess:
            sess[SESSION_KEY] = {"user": 1, "timestamp": "not a date"}
        resp = customer_client.get("/profile")
        assert resp.headers["Location"].endswith("/login")
        assert "Discarding unreadable session" in caplog.text
        with customer_client.session_transaction() as sess:
            assert SESSION_KEY not in sess

    def test_missing_stamp_is_renewed(self, customer_client):
        with customer_client.session_transaction() as sess:
            del sess[SESSION_KEY]
        assert customer_client.get("/profile").status_code == 200
        with customer_client.session_transaction() as sess:
            assert "timestamp" in sess[SESSION_KEY]


class TestProfile:
    def test_cancel_refunds_to_wallet(self, customer_client, flask_app, customer_id):
        ref = add_booking(flask_app, customer_id)
        resp = customer_client.post(f"/profile/bookings/{ref}/cancel", follow_redirects=True)
        assert b"Booking cancelled successfully. Refund processed." in resp.data
        with flask_app.app_context():
            user = selambus.db.session.get(selambus.User, customer_id)
            assert user.wallet_balance == 298
            assert [t.type for t in user.transactions] == ["refund"]
            assert user.bookings[0].status == "cancelled"
        resp = customer_client.post(f"/profile/bookings/{ref}/cancel", follow_redirects=True)
        assert b"Booking is already cancelled" in resp.data

    def test_cancel_inside_cutoff_refused(self, customer_client, flask_app, customer_id, monkeypatch):
        ref = add_booking(flask_app, customer_id)
        monkeypatch.setattr(selambus, "CANCEL_CUTOFF_MINUTES", 10 ** 7)
        resp = customer_client.post(f"/profile/bookings/{ref}/cancel", follow_redirects=True)
        assert b"Cannot cancel within" in resp.data
        with flask_app.app_context():
            assert selambus.Booking.query.one().status == "confirmed"

    def test_other_users_booking_forbidden(self, client, flask_app, customer_id):
        ref = add_booking(flask_app, customer_id)
        login(client, ADMIN["email"], ADMIN["password"])
        assert client.get(f"/booking/{ref}").status_code == 200
        client.get("/logout")
        client.post("/register", data=REGISTRATION)
        login(client, REGISTRATION["email"], REGISTRATION["password"])
        assert client.get(f"/booking/{ref}").status_code == 403
        assert client.post(f"/profile/bookings/{ref}/cancel").status_code == 403

    def test_booking_filters(self, customer_client, flask_app, customer_id):
        add_booking(flask_app, customer_id, reference="SLM-250101-AAAA", travel_date=date.today())
        add_booking(flask_app, customer_id, reference="SLM-250101-BBBB", status="cancelled",
                    travel_date=date.today() - timedelta(days=60))
        resp = customer_client.get("/profile?tab=bookings&range=today")
        assert b"SLM-250101-AAAA" in resp.data
        assert b"SLM-250101-BBBB" not in resp.data
        resp = customer_client.get("/profile?tab=bookings&status=cancelled")
        assert b"SLM-250101-BBBB" in resp.data
        assert b"SLM-250101-AAAA" not in resp.data

    def test_add_funds(self, customer_client, flask_app, customer_id):
        resp = customer_client.post("/profile/funds", data={"amount": "500", "paymentMethod": "cbebirr"},
                                    follow_redirects=True)
        assert b"ETB 500 added to your wallet!" in resp.data
        assert b"Wallet deposit via CBE Birr" in resp.data
        resp = customer_client.post("/profile/funds", data={"amount": "-5"}, follow_redirects=True)
        assert b"Please enter a valid amount!" in resp.data
        with flask_app.app_context():
            assert selambus.db.session.get(selambus.User, customer_id).wallet_balance == 500

    def test_add_funds_rejects_non_finite_amounts(self, customer_client, flask_app, customer_id):
        for amount in ("nan", "inf", "-inf"):
            resp = customer_client.post("/profile/funds", data={"amount": amount}, follow_redirects=True)
            assert resp.status_code == 200
            assert b"Please enter a valid amount!" in resp.data
        with flask_app.app_context():
            user = selambus.db.session.get(selambus.User, customer_id)
            assert user.wallet_balance == 0
            assert user.transactions == []

    def test_change_password(self, customer_client):
        resp = customer_client.post("/profile/password", follow_redirects=True, data={
            "currentPassword": "Wrong123!", "newPassword": "Another#1", "confirmPassword": "Another#1"})
        assert b"Current password is incorrect" in resp.data
        resp = customer_client.post("/profile/password", follow_redirects=True, data={
            "currentPassword": CUSTOMER["password"], "newPassword": "short", "confirmPassword": "short"})
        assert b"Password must be at least 8 characters long!" in resp.data
        resp = customer_client.post("/profile/password", follow_redirects=True, data={
            "currentPassword": CUSTOMER["password"], "newPassword": "Another#1", "confirmPassword": "Another#1"})
        assert b"Password changed successfully!" in resp.data
        customer_client.get("/logout")
        assert login(customer_client, CUSTOMER["email"], "Another#1").status_code == 302

    def test_edit_profile(self, customer_client, flask_app, customer_id):
        resp = customer_client.post("/profile/edit", follow_redirects=True, data={
            "firstName": "Abebech", "lastName": "Kebede", "email": "ABEBECH@example.com", "phone": "0911 55 66 77"})
        assert b"Profile updated successfully!" in resp.data
        with flask_app.app_context():
            user = selambus.db.session.get(selambus.User, customer_id)
            assert (user.first_name, user.email, user.phone) == ("Abebech", "abebech@example.com", "0911556677")

    def test_edit_profile_duplicate_email(self, customer_client):
        resp = customer_client.post("/profile/edit", follow_redirects=True, data={
            "firstName": "Abebe", "lastName": "Kebede", "email": ADMIN["email"], "phone": ""})
        assert b"Email or phone number is already in use" in resp.data


class TestAdmin:
    def test_access(self, client, customer_id):
        assert client.get("/admin").status_code == 302
        login(client, CUSTOMER["email"], CUSTOMER["password"])
        assert client.get("/admin").status_code == 403
        assert client.get("/admin/export/bookings.csv").status_code == 403

    def test_dashboard(self, admin_client):
        resp = admin_client.get("/admin")
        assert resp.status_code == 200
        assert b"Admin Dashboard" in resp.data
        assert b"Registered accounts: 1" in resp.data

    def test_revenue_series(self, admin_client):
        series = admin_client.get("/admin/revenue.json").get_json()
        assert len(series["labels"]) == len(series["data"]) == 30

    def test_listing_pages(self, admin_client):
        assert b"50 records" in admin_client.get("/admin/bookings").data
        assert b"20 records" in admin_client.get("/admin/buses").data
        assert b"30 records" in admin_client.get("/admin/users").data
        assert admin_client.get("/admin/bookings?page=99").status_code == 200

    def test_search(self, admin_client):
        resp = admin_client.get("/admin/search?q=SLM-000007")
        assert b"Bookings (1)" in resp.data

    def test_export(self, admin_client):
        resp = admin_client.get("/admin/export/users.csv")
        assert resp.mimetype == "text/csv"
        rows = list(csv.reader(io.StringIO(resp.data.decode("utf-8"))))
        assert rows[0][:3] == ["id", "name", "email"]
        assert len(rows) == 31
        assert admin_client.get("/admin/export/payments.csv").status_code == 404

    def test_settings(self, admin_client):
        resp = admin_client.post("/admin/settings", data={"cutoff": "45"}, follow_redirects=True)
        assert b"Settings updated" in resp.data
        assert selambus.CANCEL_CUTOFF_MINUTES == 45
        resp = admin_client.post("/admin/settings", data={"cutoff": "soon"}, follow_redirects=True)
        assert b"Invalid cutoff" in resp.data
        assert selambus.CANCEL_CUTOFF_MINUTES == 45


class TestContact:
    def test_missing_fields(self, client):
        resp = client.post("/contact", data={"name": "Abebe", "email": "a@b.co"})
        assert b"Please fill in all contact form fields" in resp.data

    def test_sent(self, client):
        data = {"name": "Abebe", "email": "a@b.co", "phone": "0911223344", "message": "Hello"}
        resp = client.post("/contact", data=data, follow_redirects=True)
        assert b"Thanks! Your message has been sent." in resp.data


def test_unknown_page(client):
    resp = client.get("/nowhere")
    assert resp.status_code == 404
    assert b"404 - Not Found" in resp.data
