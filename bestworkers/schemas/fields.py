import re

from bestworkers.config import settings

EMAIL_PATTERN = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")
PIN_LENGTH = settings.pin_length


def clean_email(value: str) -> str:
    return value.strip().lower()


def normalize_email(value: str) -> str:
    cleaned = clean_email(value)
    if not EMAIL_PATTERN.match(cleaned):
        raise ValueError("Please add a valid email")
    return cleaned


def normalize_mobile(value: str) -> str:
    digits = re.sub(r"\D", "", str(value))
    if len(digits) != 10:
        raise ValueError("Please add a valid 10-digit mobile number")
    return digits


def normalize_pin(value: str) -> str:
    cleaned = str(value).strip()
    if len(cleaned) != PIN_LENGTH or not cleaned.isdigit():
        raise ValueError(f"PIN must be {PIN_LENGTH} digits")
    return cleaned


def normalize_name(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Please add a name")
    return cleaned
