"""Record store tests: loading, saving, id allocation, test-mode paths."""

from pathlib import Path

from config import Settings
from db import find_by_id, parse_history
from models import DEFAULT_SERVICES, PENDING, Customer, ServiceHistory, ServiceItem


def write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_test_mode_redirects_all_files(tmp_path):
    prod = Settings(data_dir=tmp_path, test_mode=False)
    test = Settings(data_dir=tmp_path, test_mode=True)

    assert prod.path_for("customers") == tmp_path / "customers.txt"
    assert prod.path_for("history") == tmp_path / "service_history.txt"
    assert test.path_for("customers") == tmp_path / "tests" / "test_customers.txt"
    assert test.path_for("vehicles") == tmp_path / "tests" / "test_vehicles.txt"
    assert test.path_for("services") == tmp_path / "tests" / "test_services.txt"
    assert test.path_for("discounts") == tmp_path / "tests" / "test_discounts.txt"
    assert test.path_for("history") == tmp_path / "tests" / "test_service_history.txt"


def test_absent_file_loads_empty(stores):
    assert not stores.customers.path.exists()
    assert stores.customers.load() == []
    assert stores.history.load() == []


def test_next_id_on_absent_file_is_one(stores):
    assert stores.customers.next_id() == 1
    assert stores.vehicles.next_id() == 1
    assert stores.services.next_id() == 1
    assert stores.discounts.next_id() == 1
    assert stores.history.next_id() == 1


def test_next_id_uses_max_not_count(stores):
    write(stores.customers.path, "1|John|123|john@example.com\n2|Jane|456|jane@example.com\n")
    assert stores.customers.next_id() == 3

    stores.customers.save([Customer(7, "Zed", "", "")])
    assert stores.customers.next_id() == 8


def test_next_id_ignores_malformed_lines(stores):
    write(stores.services.path, "abc|Broken|10\n4|Car Wash|500\n\n")
    assert stores.services.next_id() == 5


def test_malformed_id_line_is_skipped(stores):
    write(stores.customers.path, "1|John|123|john@example.com\nx|Bad|000|bad@example.com\n")
    customers = stores.customers.load()
    assert len(customers) == 1
    assert customers[0].name == "John"


def test_malformed_numeric_field_skips_line_only(stores):
    write(stores.services.path, "1|Oil Change|cheap\n2|Brake Inspection|800\n3|No price\n")
    services = stores.services.load()
    assert services == [ServiceItem(2, "Brake Inspection", 800.0)]


def test_vehicle_without_owner_is_skipped(stores):
    write(stores.vehicles.path, "1\n2|1|KA01|Swift|Red\n")
    vehicles = stores.vehicles.load()
    assert [v.id for v in vehicles] == [2]


def test_missing_trailing_text_fields_default_empty(stores):
    write(stores.customers.path, "5|Solo\n")
    write(stores.discounts.path, "1|Promo|10\n")

    assert stores.customers.load() == [Customer(5, "Solo", "", "")]
    discount = stores.discounts.load()[0]
    assert discount.percent == 10.0
    assert discount.note == ""


def test_save_dedups_first_occurrence_wins(stores):
    stores.customers.save([
        Customer(1, "First", "111", "a@example.com"),
        Customer(1, "Second", "222", "b@example.com"),
    ])
    customers = stores.customers.load()
    assert customers == [Customer(1, "First", "111", "a@example.com")]


def test_save_writes_ascending_ids(stores):
    stores.customers.save([Customer(3, "C", "", ""), Customer(1, "A", "", ""), Customer(2, "B", "", "")])
    lines = stores.customers.path.read_text(encoding="utf-8").splitlines()
    assert lines == ["1|A||", "2|B||", "3|C||"]


def test_save_then_load_round_trip(stores):
    records = [Customer(1, "John", "123", "john@example.com"), Customer(2, "Jane", "456", "jane@example.com")]
    stores.customers.save(records)
    assert stores.customers.load() == records

    stores.customers.save(stores.customers.load())
    assert stores.customers.load() == records


def test_prices_written_as_plain_decimals(stores):
    stores.services.save([ServiceItem(1, "Oil Change", 1200), ServiceItem(2, "Polish", 1200.5)])
    lines = stores.services.path.read_text(encoding="utf-8").splitlines()
    assert lines == ["1|Oil Change|1200", "2|Polish|1200.5"]


def test_parse_history_line():
    h = parse_history("1|1|1|1,2|2023-10-10 10:00:00|2000|-1|0|2000|Pending")
    assert h is not None
    assert h.service_ids == [1, 2]
    assert h.date_time == "2023-10-10 10:00:00"
    assert h.subtotal == 2000
    assert h.discount_id == -1
    assert h.total == 2000
    assert h.status == "Pending"


def test_parse_history_rejects_bad_service_id():
    assert parse_history("1|1|1|1,x|2023-10-10 10:00:00|2000|-1|0|2000|Pending") is None
    assert parse_history("1|1|1") is None


def test_history_empty_service_list_round_trip(stores):
    entry = ServiceHistory(1, 2, 3, [], "2023-10-10 10:00:00", 0.0, -1, 0.0, 0.0, PENDING)
    stores.history.save([entry])
    assert stores.history.path.read_text(encoding="utf-8") == "1|2|3||2023-10-10 10:00:00|0|-1|0|0|Pending\n"
    assert stores.history.load() == [entry]


def test_history_append_and_mark_completed(stores):
    entry = ServiceHistory(1, 1, 1, [1, 2], "2023-10-10 10:00:00", 2000, -1, 0, 2000, PENDING)
    stores.history.append(entry)
    stores.history.append(ServiceHistory(2, 1, 1, [3], "2023-10-11 09:00:00", 600, -1, 0, 600, PENDING))

    assert stores.history.mark_completed(1) is True
    entries = stores.history.load()
    assert [h.status for h in entries] == ["Completed", "Pending"]
    assert entries[0].date_time == "2023-10-10 10:00:00"


def test_mark_completed_not_found_leaves_file_alone(stores):
    assert stores.history.mark_completed(42) is False
    assert not stores.history.path.exists()


def test_find_by_id_returns_first_match_or_none():
    records = [Customer(1, "A", "", ""), Customer(2, "B", "", "")]
    assert find_by_id(records, 2).name == "B"
    assert find_by_id(records, 9) is None


def test_undecodable_line_is_skipped(stores):
    stores.customers.path.parent.mkdir(parents=True, exist_ok=True)
    stores.customers.path.write_bytes(b"1|John|123|j@example.com\n2|Jos\xe9|456|x@example.com\n")

    assert [c.id for c in stores.customers.load()] == [1]
    assert stores.customers.next_id() == 2


def test_text_fields_keep_line_separator_like_characters(stores):
    records = [
        Customer(1, "Ann\u2028Lee", "123", "a@example.com"),
        Customer(2, "Bob\x0bRay", "456", "b@example.com\r"),
        Customer(3, "Cy\x85\x1cDee", "789", "c@example.com"),
    ]
    stores.customers.save(records)
    assert stores.customers.load() == records


def test_underscored_or_non_ascii_id_line_is_skipped(stores):
    write(stores.customers.path, "1_0|Under|1|u@example.com\n٣|Arabic|2|a@example.com\n4|Ok|3|o@example.com\n")
    assert [c.id for c in stores.customers.load()] == [4]
    assert stores.customers.next_id() == 5


def test_history_save_dedups_first_occurrence_wins(stores):
    first = ServiceHistory(1, 1, 1, [1], "2023-10-10 10:00:00", 1200, -1, 0, 1200, PENDING)
    second = ServiceHistory(1, 2, 2, [2], "2023-10-11 10:00:00", 800, -1, 0, 800, PENDING)
    later = ServiceHistory(2, 1, 1, [3], "2023-10-12 10:00:00", 600, -1, 0, 600, PENDING)

    stores.history.save([later, first, second])

    assert stores.history.load() == [first, later]


def test_ensure_defaults_replaces_file_with_only_malformed_lines(stores):
    write(stores.services.path, "x|Broken|10\n7|No price\n")

    assert stores.services.ensure_defaults(list(DEFAULT_SERVICES)) is True
    assert stores.services.load() == DEFAULT_SERVICES
    assert stores.services.next_id() == 7
