"""The item record submitted when requesting a certificate."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from dateutil import parser as dateutil_parser

from .errors import ValidationError


def _text(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    value = value.strip()
    return value or None


def _date(data: dict, key: str) -> Optional[date]:
    raw = _text(data, key)
    if raw is None:
        return None
    try:
        return dateutil_parser.parse(raw).date()
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"{key} is not a valid date: {raw!r}") from e


@dataclass(frozen=True)
class ItemRecord:
    vendor_name: str
    lot_number: str
    item_type: str
    manufacture_date: Optional[date] = None
    supply_date: Optional[date] = None
    warranty_period: Optional[str] = None

    @classmethod
    def from_json(cls, data) -> "ItemRecord":
        """Build a record from a decoded ``/api/generate-pdf`` body.

        Blank optional fields are treated as absent.  Blank required fields are
        rejected so a certificate is never issued with empty identity lines.
        """

        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        required = {}
        missing = []
        for key in ("vendorName", "lotNumber", "itemType"):
            required[key] = _text(data, key)
            if required[key] is None:
                missing.append(key)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        return cls(
            vendor_name=required["vendorName"],
            lot_number=required["lotNumber"],
            item_type=required["itemType"],
            manufacture_date=_date(data, "manufactureDate"),
            supply_date=_date(data, "supplyDate"),
            warranty_period=_text(data, "warrantyPeriod"),
        )

    def fields(self, date_format: str = "%m/%d/%Y") -> List[Tuple[str, str]]:
        """Ordered ``(label, text)`` pairs printed on the certificate."""

        def fmt_date(d: date) -> str:
            return d.strftime(date_format)

        candidates = [
            ("Vendor Name", self.vendor_name, str),
            ("Lot Number", self.lot_number, str),
            ("Item Type", self.item_type, str),
            ("Manufacture Date", self.manufacture_date, fmt_date),
            ("Supply Date", self.supply_date, fmt_date),
            ("Warranty Period", self.warranty_period, str),
        ]
        return [(label, fmt(value)) for label, value, fmt in candidates if value is not None]

