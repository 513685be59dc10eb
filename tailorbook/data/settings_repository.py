from __future__ import annotations

import json
from typing import Dict, List

from ..models.shop_models import AppSettings
from .database import create_connection

_DEFAULT_TERMS = [
    "1. No refunds on custom stitched items.",
    "2. Please collect items within 30 days of due date.",
]

_DEFAULTS: Dict[str, str] = {
    "business_name": "Nizy Tailors",
    "business_tagline": "Professional Tailoring Services",
    "business_phone": "9876543210",
    "currency_symbol": "₹",
    "default_due_days": "7",
    "invoice_terms": json.dumps(_DEFAULT_TERMS),
    "owner_email": "",
    "owner_password_hash": "",
    "owner_password_salt": "",
}


def get_setting(key: str) -> str:
    key = key.strip()
    with create_connection() as connection:
        row = connection.execute(
            "SELECT value FROM settings WHERE key = ?",
            (key,),
        ).fetchone()

    if row is None:
        return _DEFAULTS.get(key, "")
    return row["value"]


def set_setting(key: str, value: str) -> None:
    key = key.strip()
    with create_connection() as connection:
        connection.execute(
            """
            INSERT INTO settings (key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        connection.commit()


def get_app_settings() -> AppSettings:
    business_name = get_setting("business_name").strip() or _DEFAULTS["business_name"]
    business_tagline = get_setting("business_tagline").strip()
    business_phone = get_setting("business_phone").strip()
    currency_symbol = get_setting("currency_symbol").strip() or _DEFAULTS["currency_symbol"]

    try:
        default_due_days = int(get_setting("default_due_days") or _DEFAULTS["default_due_days"])
    except ValueError:
        default_due_days = int(_DEFAULTS["default_due_days"])

    raw_terms = get_setting("invoice_terms") or _DEFAULTS["invoice_terms"]
    try:
        parsed_terms = json.loads(raw_terms)
    except json.JSONDecodeError:
        parsed_terms = list(_DEFAULT_TERMS)

    invoice_terms: List[str] = []
    if isinstance(parsed_terms, list):
        for entry in parsed_terms:
            text = str(entry).strip()
            if text:
                invoice_terms.append(text)

    return AppSettings(
        business_name=business_name,
        business_tagline=business_tagline,
        business_phone=business_phone,
        currency_symbol=currency_symbol,
        default_due_days=max(0, default_due_days),
        invoice_terms=invoice_terms,
    )


def update_app_settings(settings: AppSettings) -> AppSettings:
    set_setting("business_name", settings.business_name.strip())
    set_setting("business_tagline", settings.business_tagline.strip())
    set_setting("business_phone", settings.business_phone.strip())
    set_setting("currency_symbol", settings.currency_symbol.strip())
    set_setting("default_due_days", str(int(settings.default_due_days)))
    set_setting("invoice_terms", json.dumps([line.strip() for line in settings.invoice_terms if line.strip()]))
    return get_app_settings()
