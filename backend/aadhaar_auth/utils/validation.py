"""
Input shape checks shared by the verification flows
"""
import re

AADHAAR_PATTERN = re.compile(r"^[0-9]{12}$")
OTP_PATTERN = re.compile(r"^[0-9]{6}$")

PASSWORD_MIN_LENGTH = 8


def is_valid_account_id(account_id: str) -> bool:
    """Exactly 12 ASCII digits"""
    return bool(account_id) and AADHAAR_PATTERN.fullmatch(account_id) is not None


def is_valid_otp_code(code: str) -> bool:
    """Exactly 6 ASCII digits"""
    return bool(code) and OTP_PATTERN.fullmatch(code) is not None


def is_strong_password(password: str) -> bool:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit"""
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        return False
    return (
        re.search(r"[a-z]", password) is not None
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"[0-9]", password) is not None
    )


def username_from_display_name(display_name: str) -> str:
    """Provider username: display name lower-cased with everything outside [a-z0-9] removed"""
    return re.sub(r"[^a-z0-9]", "", (display_name or "").lower())
