from datetime import date

import pytest

from railtrack.errors import ValidationError
from railtrack.records import ItemRecord

FULL = {
    "vendorName": "Acme Rail",
    "lotNumber": "L-2024-001",
    "itemType": "Fishplate",
    "manufactureDate": "2024-01-15",
    "supplyDate": "2024-02-01T10:30:00.000Z",
    "warrantyPeriod": "5 years",
}


def test_full_record():
    r = ItemRecord.from_json(FULL)
    assert r.vendor_name == "Acme Rail"
    assert r.manufacture_date == date(2024, 1, 15)
    assert r.supply_date == date(2024, 2, 1)
    assert r.fields() == [
        ("Vendor Name", "Acme Rail"),
        ("Lot Number", "L-2024-001"),
        ("Item Type", "Fishplate"),
        ("Manufacture Date", "01/15/2024"),
        ("Supply Date", "02/01/2024"),
        ("Warranty Period", "5 years"),
    ]


def test_optional_fields_omitted():
    r = ItemRecord.from_json({"vendorName": "A", "lotNumber": "L", "itemType": "T",
                              "manufactureDate": "", "warrantyPeriod": "  "})
    assert [label for label, _ in r.fields()] == ["Vendor Name", "Lot Number", "Item Type"]


def test_only_supply_date():
    r = ItemRecord.from_json({"vendorName": "A", "lotNumber": "L", "itemType": "T", "supplyDate": "2024-03-09"})
    assert r.fields("%d.%m.%Y")[-1] == ("Supply Date", "09.03.2024")


def test_missing_required_fields():
    with pytest.raises(ValidationError) as exc:
        ItemRecord.from_json({"vendorName": " ", "itemType": "T"})
    assert "vendorName" in str(exc.value) and "lotNumber" in str(exc.value)


@pytest.mark.parametrize("body", [None, [], "text"])
def test_body_must_be_object(body):
    with pytest.raises(ValidationError):
        ItemRecord.from_json(body)


def test_bad_date():
    with pytest.raises(ValidationError):
        ItemRecord.from_json(dict(FULL, manufactureDate="not a date"))


def test_non_string_field():
    with pytest.raises(ValidationError):
        ItemRecord.from_json(dict(FULL, vendorName={"x": 1}))


def test_numeric_lot_number_accepted():
    assert ItemRecord.from_json(dict(FULL, lotNumber=42)).lot_number == "42"
