"""
utils.py
Timestamps, number formatting, input parsing, table/CSV exports.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
import re
import pandas as pd

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def current_timestamp() -> str:
    """
    Local wall-clock time as 'YYYY-MM-DD HH:MM:SS'. Taken once when a booking is created.
    """
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def format_number(value: float) -> str:
    """
    Plain decimal text as stored in the record files: 1200 stays '1200', 1200.5 is '1200.5'.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def parse_int(text: str) -> int | None:
    # Optional sign and ASCII digits only ('1_0' and non-ASCII digits are rejected)
    if not isinstance(text, str) or not INT_PATTERN.fullmatch(text.strip()):
        return None
    return int(text.strip())


def parse_float(text: str) -> float | None:
    try:
        return float(text.strip())
    except (ValueError, AttributeError):
        return None


def parse_price(text: str) -> float | None:
    """Non-negative number, or None when the input is not one."""
    value = parse_float(text)
    if value is None or value < 0:
        return None
    return value


def blank_to_none(text: str | None) -> str | None:
    # Update forms: an empty field keeps the stored value
    if text is None or not text.strip():
        return None
    return text.strip()


def records_to_frame(records, columns: list[str]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame([asdict(r) for r in records])
    return df[columns]


def history_to_frame(entries) -> pd.DataFrame:
    columns = [
        "id", "customer_id", "vehicle_id", "service_ids", "date_time",
        "subtotal", "discount_percent", "total", "status",
    ]
    df = records_to_frame(entries, columns)
    if not df.empty:
        df["service_ids"] = df["service_ids"].map(lambda ids: ",".join(str(i) for i in ids))
    return df


def frame_to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")
