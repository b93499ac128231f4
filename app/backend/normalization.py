"""
Normalization utilities for credit item values returned by the language model.

Handles:
- Currency strings and numbers to integer cents
- Date strings to ISO ``YYYY-MM-DD``
- Account type, bureau and account-number cleanup
"""

import logging
import math
import re
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

CREDIT_ITEM_TYPES = (
    "COLLECTION",
    "CHARGE_OFF",
    "LATE_PAYMENT",
    "JUDGMENT",
    "BANKRUPTCY",
    "REPOSSESSION",
    "FORECLOSURE",
    "TAX_LIEN",
    "STUDENT_LOAN",
    "CREDIT_CARD",
    "AUTO_LOAN",
    "MORTGAGE",
    "PERSONAL_LOAN",
    "OTHER",
)

# Spellings seen in model output that do not map directly onto a type name
_TYPE_ALIASES = {
    "COLLECTIONS": "COLLECTION",
    "CHARGEOFF": "CHARGE_OFF",
    "CHARGED_OFF": "CHARGE_OFF",
    "LATE_PAYMENTS": "LATE_PAYMENT",
    "LATE": "LATE_PAYMENT",
    "REPO": "REPOSSESSION",
    "LIEN": "TAX_LIEN",
    "STUDENT_LOANS": "STUDENT_LOAN",
    "REVOLVING": "CREDIT_CARD",
    "AUTO": "AUTO_LOAN",
    "INSTALLMENT": "PERSONAL_LOAN",
}

BUREAUS = ("Experian", "Equifax", "TransUnion")

_BUREAU_LOOKUP = {name.lower(): name for name in BUREAUS}


def parse_currency(value: Any) -> float | None:
    """
    Parse a currency string to float using price-parser.

    Handles formats such as "$1,234.56", "1,234 USD" and "1234.56".
    Returns None when no amount can be found.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None

    value = value.strip()
    if not value:
        return None

    try:
        from price_parser import Price

        price = Price.fromstring(value)
        if price.amount_float is not None:
            return price.amount_float

        # Fallback: plain number without currency symbol
        cleaned = re.sub(r"[^\d.\-]", "", value)
        if cleaned:
            return float(cleaned)
        return None

    except (ValueError, AttributeError):
        return None


def amount_to_cents(value: Any) -> int | None:
    """
    Normalize an extracted amount to integer cents.

    Numbers are already cents (that is what the model is asked for) and are
    rounded. Strings of bare digits are cents as well; any other string is
    read as a currency amount in dollars.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(round(value))
    if not isinstance(value, str):
        return None

    value = value.strip()
    if not value:
        return None
    if re.fullmatch(r"-?\d+", value):
        return int(value)

    dollars = parse_currency(value)
    if dollars is None or not math.isfinite(dollars):
        return None
    return int(round(dollars * 100))


def parse_date(value: Any) -> str | None:
    """
    Parse various date formats to YYYY-MM-DD.

    Returns None if parsing fails.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)

    value = value.strip()
    if not value:
        return None

    # ISO date, possibly with a time part
    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})", value)
    if match:
        year, month, day = match.groups()
        try:
            return datetime(int(year), int(month), int(day)).strftime("%Y-%m-%d")
        except ValueError:
            return None

    # US format (MM/DD/YYYY)
    match = re.match(r"^(\d{1,2})/(\d{1,2})/(\d{4})$", value)
    if match:
        month, day, year = match.groups()
        try:
            return datetime(int(year), int(month), int(day)).strftime("%Y-%m-%d")
        except ValueError:
            return None

    # Month/year as printed on most reports (MM/YYYY)
    match = re.match(r"^(\d{1,2})/(\d{4})$", value)
    if match:
        month, year = match.groups()
        try:
            return datetime(int(year), int(month), 1).strftime("%Y-%m-%d")
        except ValueError:
            return None

    # Written formats
    try:
        from dateutil import parser

        dt = parser.parse(value, default=datetime(2000, 1, 1))
        return dt.strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        return None


def normalize_credit_type(value: Any) -> str:
    """Map a model-provided account type onto the closed type enumeration."""
    if not isinstance(value, str) or not value.strip():
        return "OTHER"
    key = re.sub(r"[\s\-/]+", "_", value.strip().upper())
    if key in CREDIT_ITEM_TYPES:
        return key
    return _TYPE_ALIASES.get(key, "OTHER")


def normalize_bureaus(value: Any) -> list[str]:
    """
    Normalize a bureau list to canonical names.

    Accepts a list or a comma/slash separated string. Unknown names are
    dropped and the first-seen order is kept.
    """
    if value is None:
        return []
    if isinstance(value, str):
        candidates = re.split(r"[,/;&]|\band\b", value)
    elif isinstance(value, (list, tuple, set)):
        candidates = list(value)
    else:
        return []

    bureaus: list[str] = []
    for candidate in candidates:
        if not isinstance(candidate, str):
            continue
        name = _BUREAU_LOOKUP.get(re.sub(r"[\s\-_]", "", candidate).lower())
        if name is None:
            if candidate.strip():
                logger.debug("Dropping unknown bureau name: %s", candidate)
            continue
        if name not in bureaus:
            bureaus.append(name)
    return bureaus


def normalize_account_last4(value: Any) -> str | None:
    """Keep the last four characters of an account number or mask."""
    if value is None or isinstance(value, bool):
        return None
    cleaned = re.sub(r"[^0-9A-Za-z*]", "", str(value))
    if not cleaned:
        return None
    return cleaned[-4:]
