"""
billing.py
Booking workflow (customer + vehicle + services + optional discount -> history entry),
bill generation from a stored booking, and the close-out of a customer's pending work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from catalogs import (
    delete_customer,
    delete_vehicles_for_customer,
    ensure_default_discounts,
    ensure_default_services,
    find_owned_vehicle,
    get_customer,
)
from db import Stores, find_by_id
from models import COMPLETED, NO_DISCOUNT, PENDING, Bill, BillLine, ServiceHistory
from utils import current_timestamp

logger = logging.getLogger(__name__)


class BookingError(ValueError):
    """A booking precondition failed; nothing was written."""


@dataclass(frozen=True)
class CloseOutResult:
    customer_id: int
    completed: int
    vehicles_removed: int
    customer_removed: bool


def calc_total(subtotal: float, discount_percent: float) -> float:
    return subtotal - subtotal * (discount_percent / 100.0)


def book_service(
    stores: Stores,
    customer_id: int,
    vehicle_id: int,
    service_ids: list[int],
    discount_id: int | None = None,
) -> ServiceHistory:
    """
    Create a Pending history entry for the selected services.

    - customer must exist, and the vehicle must exist and belong to that customer
    - at least one service, every id present in the service catalog
    - discount_id None, 0, -1 or an unknown id all mean "no discount" (stored as -1, 0%)

    Raises BookingError before anything is written when a precondition fails.
    """
    ensure_default_services(stores)
    ensure_default_discounts(stores)

    if get_customer(stores, customer_id) is None:
        raise BookingError(f"Customer {customer_id} not found.")
    if find_owned_vehicle(stores, vehicle_id, customer_id) is None:
        raise BookingError(f"Vehicle {vehicle_id} not found or not owned by customer {customer_id}.")
    if not service_ids:
        raise BookingError("No services selected.")

    services = stores.services.load()
    subtotal = 0.0
    for sid in service_ids:
        item = find_by_id(services, sid)
        if item is None:
            raise BookingError(f"Invalid service id {sid}.")
        subtotal += item.price

    discount_percent = 0.0
    applied_discount = NO_DISCOUNT
    if discount_id not in (None, 0, NO_DISCOUNT):
        discount = find_by_id(stores.discounts.load(), discount_id)
        if discount is None:
            logger.warning("Discount %s not found, booking without discount", discount_id)
        else:
            applied_discount = discount.id
            discount_percent = discount.percent

    entry = ServiceHistory(
        id=stores.history.next_id(),
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        service_ids=list(service_ids),
        date_time=current_timestamp(),
        subtotal=subtotal,
        discount_id=applied_discount,
        discount_percent=discount_percent,
        total=calc_total(subtotal, discount_percent),
        status=PENDING,
    )
    stores.history.append(entry)
    logger.info("Booked history %d for customer %d (total %.2f)", entry.id, customer_id, entry.total)
    return entry


def list_history(stores: Stores) -> list[ServiceHistory]:
    return stores.history.load()


def get_history(stores: Stores, history_id: int) -> ServiceHistory | None:
    return find_by_id(stores.history.load(), history_id)


def mark_completed(stores: Stores, history_id: int) -> bool:
    return stores.history.mark_completed(history_id)


def generate_bill(stores: Stores, history_id: int) -> Bill | None:
    """
    Bill for a stored booking. Services deleted since booking are left out of the lines;
    subtotal and total stay as recorded.
    """
    entry = get_history(stores, history_id)
    if entry is None:
        return None

    services = stores.services.load()
    lines = []
    for sid in entry.service_ids:
        item = find_by_id(services, sid)
        if item is not None:
            lines.append(BillLine(item.id, item.name, item.price))

    return Bill(
        history_id=entry.id,
        customer_id=entry.customer_id,
        vehicle_id=entry.vehicle_id,
        date_time=entry.date_time,
        lines=lines,
        subtotal=entry.subtotal,
        discount_percent=entry.discount_percent,
        total=entry.total,
        status=entry.status,
    )


def complete_customer_services(stores: Stores, customer_id: int) -> CloseOutResult:
    """
    Mark every Pending entry of the customer Completed. Only when at least one changed,
    remove the customer's vehicles and then the customer.

    History is saved first; the vehicle and customer files are rewritten afterwards, one by one.
    """
    entries = stores.history.load()
    completed = 0
    for i, h in enumerate(entries):
        if h.customer_id == customer_id and h.status == PENDING:
            entries[i] = replace(h, status=COMPLETED)
            completed += 1

    if not completed:
        logger.info("No pending services for customer %d", customer_id)
        return CloseOutResult(customer_id, 0, 0, False)

    stores.history.save(entries)
    logger.info("Marked %d pending service(s) completed for customer %d", completed, customer_id)

    vehicles_removed = delete_vehicles_for_customer(stores, customer_id)

    customer_removed = delete_customer(stores, customer_id)
    return CloseOutResult(customer_id, completed, vehicles_removed, customer_removed)
