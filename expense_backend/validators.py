# expense_backend/validators.py
"""Input validation for users and expenses.

The credential checks are plain predicates; the expense check returns a
``ValidationResult`` so handlers can turn a failure into a 400 without
touching the database.
"""
import math
import re
from datetime import date, datetime, timezone
from typing import NamedTuple, Optional

from dateutil.parser import isoparse

PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Z])(?=.*[!@#$%^&*])(?=.{8,})", re.ASCII)
EMAIL_PATTERN = re.compile(r"^[\w-]+(\.[\w-]+)*@([\w-]+\.)+[a-zA-Z]{2,7}$", re.ASCII)

PASSWORD_MESSAGE = (
    "Password must be at least 8 characters long, contain at least one "
    "capital letter and one special character."
)
EMAIL_MESSAGE = "Invalid email format."

REQUIRED_EXPENSE_FIELDS = ("title", "amount", "date", "category")


def validate_password(candidate) -> bool:
    if not isinstance(candidate, str):
        return False
    return PASSWORD_PATTERN.match(candidate) is not None


def validate_email(candidate) -> bool:
    if not isinstance(candidate, str):
        return False
    # fullmatch: "$" alone would accept a trailing newline
    return EMAIL_PATTERN.fullmatch(candidate) is not None


class ValidationResult(NamedTuple):
    ok: bool
    data: dict
    message: Optional[str] = None


def _fail(message: str) -> ValidationResult:
    return ValidationResult(False, {}, message)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _utc_date(moment: datetime) -> date:
    # Offset-aware timestamps are stored by their UTC calendar day
    if moment.tzinfo is not None and moment.utcoffset() is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def parse_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return _utc_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return _utc_date(isoparse(value.strip()))
    except (ValueError, OverflowError):
        return None


def validate_expense(payload: dict, partial: bool = False) -> ValidationResult:
    """Check and normalize an expense payload.

    With ``partial=True`` (updates) only the keys present are checked, but a
    present required field may still not be blanked out. Unknown keys,
    including any client supplied ``userId``, are dropped.
    """
    if not isinstance(payload, dict):
        return _fail("Expense payload must be an object")

    if not partial:
        missing = [f for f in REQUIRED_EXPENSE_FIELDS if _is_blank(payload.get(f))]
        if missing:
            return _fail(f"Expense validation failed: {', '.join(missing)} required")

    data = {}
    for field in ("title", "category"):
        if field in payload:
            value = payload[field]
            if _is_blank(value) or not isinstance(value, str):
                return _fail(f"Expense validation failed: {field} required")
            data[field] = value.strip()

    if "amount" in payload:
        amount = parse_amount(payload["amount"])
        if amount is None:
            return _fail(
                f'Expense validation failed: amount: Cast to Number failed for value "{payload["amount"]}"'
            )
        data["amount"] = amount

    if "date" in payload:
        parsed = parse_date(payload["date"])
        if parsed is None:
            return _fail(
                f'Expense validation failed: date: Cast to Date failed for value "{payload["date"]}"'
            )
        data["date"] = parsed

    if "description" in payload:
        description = payload["description"]
        if description is not None and not isinstance(description, str):
            return _fail("Expense validation failed: description must be text")
        data["description"] = description

    if "imageUrl" in payload:
        image_url = payload["imageUrl"]
        if image_url is not None and not isinstance(image_url, str):
            return _fail("Expense validation failed: imageUrl must be text")
        data["imageUrl"] = image_url or None

    return ValidationResult(True, data)
