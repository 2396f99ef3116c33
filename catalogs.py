"""
catalogs.py
Customer, vehicle, service and discount operations on top of the record stores.

Update helpers take optional fields: only the ones passed (not None) overwrite the stored value.
Lookups that miss return None / False instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from db import Stores, find_by_id
from models import DEFAULT_DISCOUNTS, DEFAULT_SERVICES, Customer, Discount, ServiceItem, Vehicle

logger = logging.getLogger(__name__)


def _delete_by_id(store, record_id: int) -> bool:
    records = store.load()
    kept = [r for r in records if r.id != record_id]
    if len(kept) == len(records):
        return False
    store.save(kept)
    return True


def _update_by_id(store, record_id: int, changes: dict):
    changes = {k: v for k, v in changes.items() if v is not None}
    records = store.load()
    for i, r in enumerate(records):
        if r.id == record_id:
            records[i] = replace(r, **changes)
            store.save(records)
            return records[i]
    return None


# ---------- Customers ----------

def add_customer(stores: Stores, name: str, phone: str, email: str) -> Customer:
    customers = stores.customers.load()
    customer = Customer(stores.customers.next_id(), name, phone, email)
    customers.append(customer)
    stores.customers.save(customers)
    logger.info("Added customer %d", customer.id)
    return customer


def list_customers(stores: Stores) -> list[Customer]:
    return stores.customers.load()


def get_customer(stores: Stores, customer_id: int) -> Customer | None:
    return find_by_id(stores.customers.load(), customer_id)


def update_customer(
    stores: Stores,
    customer_id: int,
    name: str | None = None,
    phone: str | None = None,
    email: str | None = None,
) -> Customer | None:
    return _update_by_id(stores.customers, customer_id, {"name": name, "phone": phone, "email": email})


def delete_customer(stores: Stores, customer_id: int) -> bool:
    # Vehicles and history keep their references
    deleted = _delete_by_id(stores.customers, customer_id)
    if deleted:
        logger.info("Deleted customer %d", customer_id)
    return deleted


# ---------- Vehicles ----------

def register_vehicle(stores: Stores, customer_id: int, reg_no: str, model: str, color: str) -> Vehicle:
    vehicles = stores.vehicles.load()
    vehicle = Vehicle(stores.vehicles.next_id(), customer_id, reg_no, model, color)
    vehicles.append(vehicle)
    stores.vehicles.save(vehicles)
    logger.info("Registered vehicle %d for customer %d", vehicle.id, customer_id)
    return vehicle


def list_vehicles(stores: Stores) -> list[Vehicle]:
    return stores.vehicles.load()


def vehicles_for_customer(stores: Stores, customer_id: int) -> list[Vehicle]:
    return [v for v in stores.vehicles.load() if v.customer_id == customer_id]


def find_owned_vehicle(stores: Stores, vehicle_id: int, customer_id: int) -> Vehicle | None:
    for v in stores.vehicles.load():
        if v.id == vehicle_id and v.customer_id == customer_id:
            return v
    return None


def update_vehicle(
    stores: Stores,
    vehicle_id: int,
    customer_id: int | None = None,
    reg_no: str | None = None,
    model: str | None = None,
    color: str | None = None,
) -> Vehicle | None:
    changes = {"customer_id": customer_id, "reg_no": reg_no, "model": model, "color": color}
    return _update_by_id(stores.vehicles, vehicle_id, changes)


def delete_vehicle(stores: Stores, vehicle_id: int) -> bool:
    return _delete_by_id(stores.vehicles, vehicle_id)


def delete_vehicles_for_customer(stores: Stores, customer_id: int) -> int:
    vehicles = stores.vehicles.load()
    kept = [v for v in vehicles if v.customer_id != customer_id]
    removed = len(vehicles) - len(kept)
    if removed:
        stores.vehicles.save(kept)
        logger.info("Deleted %d vehicle(s) for customer %d", removed, customer_id)
    return removed


# ---------- Services ----------

def ensure_default_services(stores: Stores) -> bool:
    return stores.services.ensure_defaults(list(DEFAULT_SERVICES))


def add_service(stores: Stores, name: str, price: float) -> ServiceItem:
    if price < 0:
        raise ValueError("Price must be a number >= 0.")
    services = stores.services.load()
    service = ServiceItem(stores.services.next_id(), name, float(price))
    services.append(service)
    stores.services.save(services)
    logger.info("Added service %d (%s)", service.id, name)
    return service


def list_services(stores: Stores) -> list[ServiceItem]:
    ensure_default_services(stores)
    return stores.services.load()


def get_service(stores: Stores, service_id: int) -> ServiceItem | None:
    return find_by_id(stores.services.load(), service_id)


def update_service(
    stores: Stores,
    service_id: int,
    name: str | None = None,
    price: float | None = None,
) -> ServiceItem | None:
    """
    Price 0 is a real price here; pass None to keep the stored one.
    """
    if price is not None and price < 0:
        raise ValueError("Price must be a number >= 0.")
    return _update_by_id(stores.services, service_id, {"name": name, "price": price})


def delete_service(stores: Stores, service_id: int) -> bool:
    # Past bookings keep the id; their bills just omit it
    return _delete_by_id(stores.services, service_id)


# ---------- Discounts ----------

def ensure_default_discounts(stores: Stores) -> bool:
    return stores.discounts.ensure_defaults(list(DEFAULT_DISCOUNTS))


def add_discount(stores: Stores, name: str, percent: float, note: str = "") -> Discount:
    discounts = stores.discounts.load()
    discount = Discount(stores.discounts.next_id(), name, float(percent), note)
    discounts.append(discount)
    stores.discounts.save(discounts)
    logger.info("Added discount %d (%s)", discount.id, name)
    return discount


def list_discounts(stores: Stores) -> list[Discount]:
    ensure_default_discounts(stores)
    return stores.discounts.load()


def get_discount(stores: Stores, discount_id: int) -> Discount | None:
    return find_by_id(stores.discounts.load(), discount_id)


def update_discount(
    stores: Stores,
    discount_id: int,
    name: str | None = None,
    percent: float | None = None,
    note: str | None = None,
) -> Discount | None:
    return _update_by_id(stores.discounts, discount_id, {"name": name, "percent": percent, "note": note})


def delete_discount(stores: Stores, discount_id: int) -> bool:
    return _delete_by_id(stores.discounts, discount_id)
