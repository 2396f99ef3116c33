"""
models.py
Lightweight domain records (customers, vehicles, services, discounts, history) and seed data.
"""

from __future__ import annotations
from dataclasses import dataclass, field

PENDING = "Pending"
COMPLETED = "Completed"

# Sentinel discount id meaning "no discount applied"
NO_DISCOUNT = -1


@dataclass(frozen=True)
class Customer:
    id: int
    name: str
    phone: str
    email: str


@dataclass(frozen=True)
class Vehicle:
    id: int
    customer_id: int  # not checked against the customer file
    reg_no: str
    model: str
    color: str


@dataclass(frozen=True)
class ServiceItem:
    id: int
    name: str
    price: float


@dataclass(frozen=True)
class Discount:
    id: int
    name: str
    percent: float
    note: str


@dataclass(frozen=True)
class ServiceHistory:
    id: int
    customer_id: int
    vehicle_id: int
    service_ids: list[int] = field(default_factory=list)  # selection order
    date_time: str = ""
    subtotal: float = 0.0
    discount_id: int = NO_DISCOUNT
    discount_percent: float = 0.0
    total: float = 0.0
    status: str = PENDING  # 'Pending' or 'Completed'


@dataclass(frozen=True)
class BillLine:
    service_id: int
    name: str
    price: float


@dataclass(frozen=True)
class Bill:
    history_id: int
    customer_id: int
    vehicle_id: int
    date_time: str
    lines: list[BillLine]
    subtotal: float
    discount_percent: float
    total: float
    status: str


# Seeded once when the catalog file is empty
DEFAULT_SERVICES = [
    ServiceItem(1, "Oil Change", 1200),
    ServiceItem(2, "Brake Inspection", 800),
    ServiceItem(3, "Wheel Alignment", 600),
    ServiceItem(4, "Car Wash", 500),
    ServiceItem(5, "Engine Tune-up", 2000),
    ServiceItem(6, "General Service", 1500),
]

DEFAULT_DISCOUNTS = [
    Discount(1, "New Year Offer", 10.0, "New Year 10% off"),
    Discount(2, "Diwali Special", 15.0, "Festival offer"),
    Discount(3, "Summer Sale", 5.0, "Flat 5% summer discount"),
]
