# accounts.py - sign-in/registration rules and session expiry

import re
from datetime import datetime, timedelta
from urllib.parse import quote_plus

SESSION_KEY = "selambus_session"
SESSION_LIFETIME = timedelta(hours=24)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^(\+251|0)?[1-9]\d{8}$")
SPECIAL_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')


def validate_email(email):
    return bool(EMAIL_RE.match(email or ""))


def validate_phone(phone):
    return bool(PHONE_RE.match(re.sub(r"\s", "", phone or "")))


def normalize_phone(phone):
    return re.sub(r"\s", "", phone or "")


def validate_password_strength(password):
    return all((
        re.search(r"[A-Z]", password),
        re.search(r"[a-z]", password),
        re.search(r"\d", password),
        SPECIAL_RE.search(password),
    ))


def password_strength(password):
    """Meter value shown under the register form: weak, medium or strong."""
    score = 0
    score += len(password) >= 8
    score += len(password) >= 12
    score += bool(re.search(r"[a-z]", password))
    score += bool(re.search(r"[A-Z]", password))
    score += bool(re.search(r"\d", password))
    score += bool(SPECIAL_RE.search(password))
    if score <= 2:
        return "weak"
    if score <= 4:
        return "medium"
    return "strong"


def validate_login(identifier, password):
    errors = {}
    if not validate_email(identifier) and not validate_phone(identifier):
        errors["email"] = "Please enter a valid email or phone number"
    elif len(password or "") < 6:
        errors["password"] = "Password must be at least 6 characters"
    return errors


def validate_registration(form):
    errors = {}
    first_name = (form.get("firstName") or "").strip()
    last_name = (form.get("lastName") or "").strip()
    password = form.get("password") or ""

    if len(first_name) < 2:
        errors["firstName"] = "First name must be at least 2 characters"
    if len(last_name) < 2:
        errors["lastName"] = "Last name must be at least 2 characters"
    if not validate_email((form.get("email") or "").strip()):
        errors["email"] = "Please enter a valid email address"
    if not validate_phone((form.get("phoneNumber") or "").strip()):
        errors["phoneNumber"] = "Please enter a valid phone number"
    if len(password) < 8:
        errors["password"] = "Password must be at least 8 characters"
    elif not validate_password_strength(password):
        errors["password"] = "Password must contain uppercase, lowercase, number, and special character"
    if password != form.get("confirmPassword"):
        errors["confirmPassword"] = "Passwords do not match"
    if not form.get("terms"):
        errors["terms"] = "You must agree to the terms and conditions"
    return errors


def avatar_url(first_name, last_name, size=128):
    name = quote_plus(f"{first_name}+{last_name}")
    return f"https://ui-avatars.com/api/?name={name}&background=3b82f6&color=fff&size={size}"


# -------------------- SESSION STAMP --------------------
def session_stamp(user_id, now=None):
    return {"user": user_id, "timestamp": (now or datetime.utcnow()).isoformat()}


def session_expired(stamp, now=None, lifetime=SESSION_LIFETIME):
    """True once the stamp is older than the lifetime.

    Raises ValueError/KeyError/TypeError for a corrupt stamp; callers treat
    that as signed out.
    """
    started = datetime.fromisoformat(stamp["timestamp"])
    return (now or datetime.utcnow()) - started >= lifetime
