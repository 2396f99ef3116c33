"""
db.py
Flat-file record stores: one pipe-delimited text file per entity, loaded and rewritten whole.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Generic, Iterable, TypeVar

from config import Settings
from models import (
    COMPLETED,
    Customer,
    Discount,
    ServiceHistory,
    ServiceItem,
    Vehicle,
)
from utils import format_number, parse_float, parse_int

logger = logging.getLogger(__name__)

DELIMITER = "|"

R = TypeVar("R")


def _read_lines(path: Path) -> list[str]:
    """
    Lines split on '\\n' only, decoded one by one. Lines that are not valid UTF-8 are dropped.
    A missing or unreadable file reads as an empty store.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return []
    except OSError as exc:
        logger.warning("Cannot read %s, treating it as empty: %s", path, exc)
        return []

    chunks = raw.split(b"\n")
    if chunks and not chunks[-1]:
        chunks.pop()
    lines: list[str] = []
    for lineno, chunk in enumerate(chunks, start=1):
        try:
            lines.append(chunk.decode("utf-8"))
        except UnicodeDecodeError:
            logger.debug("Skipping undecodable line %d in %s: %r", lineno, path.name, chunk)
    return lines


def _write_lines(path: Path, lines: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes("".join(line + "\n" for line in lines).encode("utf-8"))


def _fields(line: str, count: int) -> list[str]:
    """Split a record line, padding missing trailing fields with empty text."""
    parts = line.split(DELIMITER)
    return (parts + [""] * count)[:count]


# ---------- Line codecs (parse returns None for a line to skip) ----------

def parse_customer(line: str) -> Customer | None:
    id_, name, phone, email = _fields(line, 4)
    cid = parse_int(id_)
    if cid is None:
        return None
    return Customer(cid, name, phone, email)


def format_customer(c: Customer) -> str:
    return DELIMITER.join([str(c.id), c.name, c.phone, c.email])


def parse_vehicle(line: str) -> Vehicle | None:
    id_, customer_id, reg_no, model, color = _fields(line, 5)
    vid = parse_int(id_)
    owner = parse_int(customer_id)
    if vid is None or owner is None:
        return None
    return Vehicle(vid, owner, reg_no, model, color)


def format_vehicle(v: Vehicle) -> str:
    return DELIMITER.join([str(v.id), str(v.customer_id), v.reg_no, v.model, v.color])


def parse_service(line: str) -> ServiceItem | None:
    id_, name, price = _fields(line, 3)
    sid = parse_int(id_)
    value = parse_float(price)
    if sid is None or value is None:
        return None
    return ServiceItem(sid, name, value)


def format_service(s: ServiceItem) -> str:
    return DELIMITER.join([str(s.id), s.name, format_number(s.price)])


def parse_discount(line: str) -> Discount | None:
    id_, name, percent, note = _fields(line, 4)
    did = parse_int(id_)
    value = parse_float(percent)
    if did is None or value is None:
        return None
    return Discount(did, name, value, note)


def format_discount(d: Discount) -> str:
    return DELIMITER.join([str(d.id), d.name, format_number(d.percent), d.note])


def parse_service_ids(text: str) -> list[int] | None:
    ids: list[int] = []
    for token in text.split(","):
        if not token:
            continue
        sid = parse_int(token)
        if sid is None:
            return None
        ids.append(sid)
    return ids


def parse_history(line: str) -> ServiceHistory | None:
    (id_, customer_id, vehicle_id, service_ids, date_time,
     subtotal, discount_id, discount_percent, total, status) = _fields(line, 10)
    ints = [parse_int(id_), parse_int(customer_id), parse_int(vehicle_id), parse_int(discount_id)]
    floats = [parse_float(subtotal), parse_float(discount_percent), parse_float(total)]
    ids = parse_service_ids(service_ids)
    if None in ints or None in floats or ids is None:
        return None
    hid, cid, vid, did = ints
    sub, pct, tot = floats
    return ServiceHistory(
        id=hid,
        customer_id=cid,
        vehicle_id=vid,
        service_ids=ids,
        date_time=date_time,
        subtotal=sub,
        discount_id=did,
        discount_percent=pct,
        total=tot,
        status=status,
    )


def format_history(h: ServiceHistory) -> str:
    return DELIMITER.join([
        str(h.id),
        str(h.customer_id),
        str(h.vehicle_id),
        ",".join(str(i) for i in h.service_ids),
        h.date_time,
        format_number(h.subtotal),
        str(h.discount_id),
        format_number(h.discount_percent),
        format_number(h.total),
        h.status,
    ])


# ---------- Stores ----------

class RecordStore(Generic[R]):
    """
    One entity file. Every call goes back to disk: nothing is cached between calls,
    and there is no locking, so two processes writing the same file can lose updates.
    """

    def __init__(self, path: Path, parse: Callable[[str], R | None], fmt: Callable[[R], str]):
        self.path = Path(path)
        self._parse = parse
        self._format = fmt

    def load(self) -> list[R]:
        records: list[R] = []
        for lineno, line in enumerate(_read_lines(self.path), start=1):
            if not line:
                continue
            record = self._parse(line)
            if record is None:
                logger.debug("Skipping malformed line %d in %s: %r", lineno, self.path.name, line)
                continue
            records.append(record)
        return records

    def save(self, records: Iterable[R]) -> None:
        """
        Rewrite the whole file. Duplicate ids keep their first occurrence; lines are written in id order.
        """
        unique: dict[int, R] = {}
        for r in records:
            unique.setdefault(r.id, r)
        _write_lines(self.path, [self._format(unique[k]) for k in sorted(unique)])

    def next_id(self) -> int:
        # Derived from the file on every call (max id on disk + 1)
        max_id = 0
        for line in _read_lines(self.path):
            rid = parse_int(line.split(DELIMITER, 1)[0])
            if rid is not None and rid > max_id:
                max_id = rid
        return max_id + 1

    def ensure_defaults(self, seed: list[R]) -> bool:
        """Write the seed records if the store loads empty. Returns True when it seeded."""
        if self.load():
            return False
        self.save(seed)
        logger.info("Seeded %s with %d default records", self.path.name, len(seed))
        return True


class HistoryStore(RecordStore[ServiceHistory]):
    def __init__(self, path: Path):
        super().__init__(path, parse_history, format_history)

    def append(self, entry: ServiceHistory) -> None:
        entries = self.load()
        entries.append(entry)
        self.save(entries)

    def mark_completed(self, history_id: int) -> bool:
        entries = self.load()
        for i, h in enumerate(entries):
            if h.id == history_id:
                entries[i] = replace(h, status=COMPLETED)
                self.save(entries)
                return True
        return False


def find_by_id(records: Iterable[R], record_id: int) -> R | None:
    for r in records:
        if r.id == record_id:
            return r
    return None


@dataclass(frozen=True)
class Stores:
    customers: RecordStore[Customer]
    vehicles: RecordStore[Vehicle]
    services: RecordStore[ServiceItem]
    discounts: RecordStore[Discount]
    history: HistoryStore


def open_stores(settings: Settings) -> Stores:
    return Stores(
        customers=RecordStore(settings.path_for("customers"), parse_customer, format_customer),
        vehicles=RecordStore(settings.path_for("vehicles"), parse_vehicle, format_vehicle),
        services=RecordStore(settings.path_for("services"), parse_service, format_service),
        discounts=RecordStore(settings.path_for("discounts"), parse_discount, format_discount),
        history=HistoryStore(settings.path_for("history")),
    )
