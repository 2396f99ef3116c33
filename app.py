"""
app.py
Streamlit Car Service Management (single user, flat-file records).
Run: streamlit run app.py
"""

from __future__ import annotations

import streamlit as st

import billing
import catalogs
import db
import utils
from config import settings
from logging_config import setup_logging
from models import PENDING

st.set_page_config(page_title="Car Service Management", layout="wide")

CUSTOMER_COLUMNS = ["id", "name", "phone", "email"]
VEHICLE_COLUMNS = ["id", "customer_id", "reg_no", "model", "color"]
SERVICE_COLUMNS = ["id", "name", "price"]
DISCOUNT_COLUMNS = ["id", "name", "percent", "note"]


def init_once() -> db.Stores:
    # Open stores + seed default services/discounts if needed
    setup_logging(settings.log_level, settings.log_file)
    stores = db.open_stores(settings)
    catalogs.ensure_default_services(stores)
    catalogs.ensure_default_discounts(stores)
    return stores


def show_table(records, columns: list[str], empty_msg: str):
    if records:
        st.dataframe(utils.records_to_frame(records, columns), use_container_width=True, hide_index=True)
    else:
        st.caption(empty_msg)


def id_input(label: str, key: str) -> int | None:
    raw = st.text_input(label, key=key)
    if not raw.strip():
        return None
    value = utils.parse_int(raw)
    if value is None:
        st.error(f"{label} must be a whole number.")
    return value


# ---------- Pages ----------

def customers_page(stores: db.Stores):
    st.header("👥 Customers")

    customers = catalogs.list_customers(stores)
    show_table(customers, CUSTOMER_COLUMNS, "No customers found.")
    if customers:
        st.download_button(
            "Download customers.csv",
            data=utils.frame_to_csv_bytes(utils.records_to_frame(customers, CUSTOMER_COLUMNS)),
            file_name="customers.csv",
            mime="text/csv",
        )

    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("➕ Add Customer")
        name = st.text_input("Name", key="cust_add_name")
        phone = st.text_input("Phone", key="cust_add_phone")
        email = st.text_input("Email", key="cust_add_email")
        if st.button("Add customer", type="primary"):
            c = catalogs.add_customer(stores, name, phone, email)
            st.success(f"Customer added with ID: {c.id}")
            st.rerun()

    with col2:
        st.subheader("🔎 Search / Edit / Delete")
        cid = id_input("Customer ID", key="cust_edit_id")
        if cid is not None:
            c = catalogs.get_customer(stores, cid)
            if not c:
                st.warning("Customer not found.")
            else:
                st.write(f"**{c.name}** | {c.phone} | {c.email}")
                st.caption("Leave a field blank to keep the current value.")
                new_name = st.text_input("New name", key="cust_new_name")
                new_phone = st.text_input("New phone", key="cust_new_phone")
                new_email = st.text_input("New email", key="cust_new_email")
                if st.button("Update customer"):
                    catalogs.update_customer(
                        stores,
                        cid,
                        name=utils.blank_to_none(new_name),
                        phone=utils.blank_to_none(new_phone),
                        email=utils.blank_to_none(new_email),
                    )
                    st.success("Customer updated.")
                    st.rerun()

                delete_confirm = st.checkbox("Confirm delete", value=False, key="cust_del_confirm")
                if st.button("Delete customer", disabled=not delete_confirm):
                    catalogs.delete_customer(stores, cid)
                    st.success("Customer deleted.")
                    st.rerun()


def vehicles_page(stores: db.Stores):
    st.header("🚗 Vehicles")

    show_table(catalogs.list_vehicles(stores), VEHICLE_COLUMNS, "No vehicles found.")

    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("➕ Register Vehicle")
        owner = id_input("Owner customer ID", key="veh_add_owner")
        reg_no = st.text_input("Registration no.", key="veh_add_reg")
        model = st.text_input("Model", key="veh_add_model")
        color = st.text_input("Color", key="veh_add_color")
        if st.button("Register vehicle", type="primary", disabled=owner is None):
            v = catalogs.register_vehicle(stores, owner, reg_no, model, color)
            st.success(f"Vehicle registered with ID: {v.id}")
            st.rerun()

    with col2:
        st.subheader("✏️ Edit / Delete")
        vid = id_input("Vehicle ID", key="veh_edit_id")
        if vid is not None:
            v = db.find_by_id(catalogs.list_vehicles(stores), vid)
            if not v:
                st.warning("Vehicle not found.")
            else:
                st.write(f"Owner **{v.customer_id}** | {v.reg_no} | {v.model} | {v.color}")
                st.caption("Leave a field blank to keep the current value.")
                new_owner = st.text_input("New owner customer ID", key="veh_new_owner")
                new_reg = st.text_input("New registration no.", key="veh_new_reg")
                new_model = st.text_input("New model", key="veh_new_model")
                new_color = st.text_input("New color", key="veh_new_color")
                if st.button("Update vehicle"):
                    owner_id = utils.parse_int(new_owner) if new_owner.strip() else None
                    if new_owner.strip() and owner_id is None:
                        st.error("Owner customer ID must be a whole number.")
                    else:
                        catalogs.update_vehicle(
                            stores,
                            vid,
                            customer_id=owner_id,
                            reg_no=utils.blank_to_none(new_reg),
                            model=utils.blank_to_none(new_model),
                            color=utils.blank_to_none(new_color),
                        )
                        st.success("Vehicle updated.")
                        st.rerun()

                if st.button("Delete vehicle"):
                    catalogs.delete_vehicle(stores, vid)
                    st.success("Vehicle deleted.")
                    st.rerun()


def book_service_page(stores: db.Stores):
    st.header("🛠️ Book Service")

    customer_id = id_input("Customer ID", key="book_cust")
    if customer_id is None:
        return
    if not catalogs.get_customer(stores, customer_id):
        st.error("Customer not found.")
        return

    owned = catalogs.vehicles_for_customer(stores, customer_id)
    if not owned:
        st.info("This customer has no vehicles. Register one first.")
        return
    vehicle_labels = {f"{v.reg_no} {v.model} - ID {v.id}": v.id for v in owned}
    vehicle_id = vehicle_labels[st.selectbox("Vehicle", list(vehicle_labels.keys()))]

    services = catalogs.list_services(stores)
    service_labels = {f"{s.id}. {s.name} - Rs.{utils.format_number(s.price)}": s.id for s in services}
    chosen = st.multiselect("Services (in order)", list(service_labels.keys()))
    service_ids = [service_labels[label] for label in chosen]

    prices = {s.id: s.price for s in services}
    subtotal = sum(prices[sid] for sid in service_ids)
    st.write(f"Subtotal: **Rs.{subtotal:.2f}**")

    discounts = catalogs.list_discounts(stores)
    discount_labels = {"(none)": 0}
    discount_labels.update({f"{d.name} ({utils.format_number(d.percent)}%) - ID {d.id}": d.id for d in discounts})
    discount_id = discount_labels[st.selectbox("Discount", list(discount_labels.keys()))]

    if st.button("Book", type="primary"):
        try:
            entry = billing.book_service(stores, customer_id, vehicle_id, service_ids, discount_id)
        except billing.BookingError as exc:
            st.error(str(exc))
            return
        discount_amount = entry.subtotal - entry.total
        st.success(f"Booking saved with History ID: {entry.id}")
        st.write(
            f"Discount: {entry.discount_percent:.2f}% -> -Rs.{discount_amount:.2f} | "
            f"Total: **Rs.{entry.total:.2f}**"
        )


def history_page(stores: db.Stores):
    st.header("🧾 Service History")

    entries = billing.list_history(stores)
    if entries:
        df = utils.history_to_frame(entries)
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.download_button(
            "Download service_history.csv",
            data=utils.frame_to_csv_bytes(df),
            file_name="service_history.csv",
            mime="text/csv",
        )
    else:
        st.caption("No service history found.")
        return

    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("✅ Mark completed")
        pending = [h.id for h in entries if h.status == PENDING]
        if pending:
            hid = st.selectbox("Pending history ID", pending)
            if st.button("Mark completed"):
                billing.mark_completed(stores, hid)
                st.success("Marked completed.")
                st.rerun()
        else:
            st.caption("Nothing pending.")

    with col2:
        st.subheader("🧮 Generate bill")
        hid = id_input("History ID", key="bill_hid")
        if hid is not None:
            bill = billing.generate_bill(stores, hid)
            if not bill:
                st.warning("History ID not found.")
            else:
                render_bill(bill)


def render_bill(bill):
    st.markdown("**--- BILL ---**")
    st.write(f"History ID: {bill.history_id}")
    st.write(f"Customer ID: {bill.customer_id}")
    st.write(f"Vehicle ID: {bill.vehicle_id}")
    st.write(f"Date: {bill.date_time}")
    st.write("Services:")
    for line in bill.lines:
        st.write(f"- {line.name} : Rs.{utils.format_number(line.price)}")
    st.write(f"Subtotal: Rs.{utils.format_number(bill.subtotal)}")
    st.write(f"Discount: {utils.format_number(bill.discount_percent)}%")
    st.write(f"Total: Rs.{utils.format_number(bill.total)}")
    st.write(f"Status: {bill.status}")


def services_page(stores: db.Stores):
    st.header("🔧 Services")

    show_table(catalogs.list_services(stores), SERVICE_COLUMNS, "No services found.")

    st.divider()

    c1, c2, c3 = st.columns(3)
    with c1:
        st.subheader("Add")
        name = st.text_input("Service name", key="svc_add_name")
        price = st.text_input("Price", key="svc_add_price")
        if st.button("Add service", type="primary"):
            value = utils.parse_price(price)
            if value is None:
                st.error("Invalid price. Please enter a valid number (>= 0).")
            else:
                s = catalogs.add_service(stores, name, value)
                st.success(f"Service added with ID: {s.id}")
                st.rerun()

    with c2:
        st.subheader("Update")
        sid = id_input("Service ID", key="svc_upd_id")
        new_name = st.text_input("New name (blank to keep)", key="svc_upd_name")
        new_price = st.text_input("New price (blank to keep)", key="svc_upd_price")
        if st.button("Update service", disabled=sid is None):
            value = utils.parse_price(new_price) if new_price.strip() else None
            if new_price.strip() and value is None:
                st.error("Invalid price. Please enter a valid number (>= 0).")
            elif catalogs.update_service(stores, sid, name=utils.blank_to_none(new_name), price=value):
                st.success("Service updated.")
                st.rerun()
            else:
                st.warning("Service not found.")

    with c3:
        st.subheader("Delete")
        sid = id_input("Service ID", key="svc_del_id")
        if st.button("Delete service", disabled=sid is None):
            if catalogs.delete_service(stores, sid):
                st.success("Service deleted.")
                st.rerun()
            else:
                st.warning("Service not found.")


def discounts_page(stores: db.Stores):
    st.header("🏷️ Discounts")

    show_table(catalogs.list_discounts(stores), DISCOUNT_COLUMNS, "No discounts found.")

    st.divider()

    c1, c2, c3 = st.columns(3)
    with c1:
        st.subheader("Add")
        name = st.text_input("Discount name", key="disc_add_name")
        percent = st.text_input("Percent (e.g. 10 for 10%)", key="disc_add_pct")
        note = st.text_input("Note", key="disc_add_note")
        if st.button("Add discount", type="primary"):
            value = utils.parse_float(percent)
            if value is None:
                st.error("Percent must be numeric.")
            else:
                d = catalogs.add_discount(stores, name, value, note)
                st.success(f"Discount added with ID: {d.id}")
                st.rerun()

    with c2:
        st.subheader("Update")
        did = id_input("Discount ID", key="disc_upd_id")
        new_name = st.text_input("New name (blank to keep)", key="disc_upd_name")
        new_pct = st.text_input("New percent (blank to keep)", key="disc_upd_pct")
        new_note = st.text_input("New note (blank to keep)", key="disc_upd_note")
        if st.button("Update discount", disabled=did is None):
            value = utils.parse_float(new_pct) if new_pct.strip() else None
            if new_pct.strip() and value is None:
                st.error("Percent must be numeric.")
            elif catalogs.update_discount(
                stores,
                did,
                name=utils.blank_to_none(new_name),
                percent=value,
                note=utils.blank_to_none(new_note),
            ):
                st.success("Discount updated.")
                st.rerun()
            else:
                st.warning("Discount not found.")

    with c3:
        st.subheader("Delete")
        did = id_input("Discount ID", key="disc_del_id")
        if st.button("Delete discount", disabled=did is None):
            if catalogs.delete_discount(stores, did):
                st.success("Discount deleted.")
                st.rerun()
            else:
                st.warning("Discount not found.")


def close_out_page(stores: db.Stores):
    st.header("🏁 Close Out Customer")
    st.caption(
        "Marks all pending services of the customer as Completed. "
        "If any were pending, the customer's vehicles and the customer record are deleted."
    )

    cid = id_input("Customer ID", key="close_cid")
    confirm = st.checkbox("Confirm close out", value=False, key="close_confirm")
    if st.button("Close out", type="primary", disabled=cid is None or not confirm):
        result = billing.complete_customer_services(stores, cid)
        if not result.completed:
            st.info(f"No pending services found for customer {cid}.")
            return
        st.success(f"Marked {result.completed} pending service(s) for customer {cid} as Completed.")
        if result.vehicles_removed:
            st.write(f"All vehicles for customer {cid} deleted ({result.vehicles_removed}).")
        else:
            st.write(f"No vehicles found for customer {cid}.")
        if result.customer_removed:
            st.write(f"Customer {cid} deleted.")
        else:
            st.write(f"Customer {cid} not found.")


def main_app(stores: db.Stores):
    st.sidebar.title("🚘 Car Service")
    if settings.test_mode:
        st.sidebar.caption("Test mode: using test record files.")

    pages = {
        "Customers": customers_page,
        "Vehicles": vehicles_page,
        "Book Service": book_service_page,
        "Service History": history_page,
        "Services": services_page,
        "Discounts": discounts_page,
        "Close Out Customer": close_out_page,
    }
    if "page" not in st.session_state:
        st.session_state.page = "Customers"
    names = list(pages.keys())
    st.session_state.page = st.sidebar.radio("Navigate", names, index=names.index(st.session_state.page))

    pages[st.session_state.page](stores)


# --------- App entry ---------

def run():
    stores = init_once()
    main_app(stores)


if __name__ == "__main__":
    run()
