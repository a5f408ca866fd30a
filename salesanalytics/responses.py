"""Response bodies, request validation and sales CSV parsing."""

from __future__ import annotations

import csv
import dataclasses
import json
from datetime import date, datetime
from enum import StrEnum

from .models import SalesRecord


class Status(StrEnum):
    SUCCESS = "S"
    ERROR = "E"


class ValidationError(ValueError):
    """A required request field is missing or blank."""


_HTML_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _json_default(value):
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_response(status, msg="", result=None):
    """Return the JSON body, leaving out an empty message, status or result."""
    body = {}
    if msg:
        body["msg"] = msg
    if status:
        body["status"] = str(status)
    if result is not None:
        body["result"] = result
    text = json.dumps(body, separators=(",", ":"), ensure_ascii=False, default=_json_default)
    return text.translate(_HTML_ESCAPES)


def validate_required(fields):
    """Raise :class:`ValidationError` for the first blank field."""
    for name, value in fields.items():
        if value is None or not str(value).strip():
            raise ValidationError(f"field '{name}' is required")


def _parse_uint(text: str) -> int:
    text = text.strip()
    if not text:
        return 0
    value = int(text)
    if value < 0:
        raise ValueError(f"invalid unsigned integer {text!r}")
    return value


def _parse_float(text: str) -> float:
    text = text.strip()
    return float(text) if text else 0.0


_CSV_FIELDS = {
    "Order ID": ("order_id", _parse_uint),
    "Product ID": ("product_id", str),
    "Customer ID": ("customer_id", str),
    "Product Name": ("product_name", str),
    "Category": ("category", str),
    "Region": ("region", str),
    "Date of Sale": ("date_of_sale", str),
    "Quantity Sold": ("quantity_sold", str),
    "Unit Price": ("unit_price", _parse_float),
    "Discount": ("discount", _parse_float),
    "Shipping Cost": ("shipping_cost", str),
    "Payment Method": ("payment_method", str),
    "Customer Name": ("customer_name", str),
    "Customer Email": ("customer_email", str),
    "Customer Address": ("customer_address", str),
}


def read_sales_csv(stream):
    """Parse a sales CSV with a header row into a list of :class:`SalesRecord`."""
    reader = csv.reader(stream)
    try:
        header = next(reader)
    except StopIteration:
        raise ValueError("empty csv file given") from None

    columns = [
        (position, name, *_CSV_FIELDS[name])
        for position, name in enumerate(header)
        if name in _CSV_FIELDS
    ]

    records = []
    for line_no, row in enumerate(reader, start=2):
        if not row:
            continue
        if len(row) != len(header):
            raise ValueError(f"record on line {line_no}: wrong number of fields")
        values = {}
        for position, name, attribute, convert in columns:
            try:
                values[attribute] = convert(row[position])
            except ValueError as exc:
                raise ValueError(
                    f"parse error on line {line_no}, column {name!r}: {exc}"
                ) from exc
        records.append(SalesRecord(**values))
    return records