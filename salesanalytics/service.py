"""Loading sales CSV data into the database and ranking products."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import String, func, literal, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .logging_setup import RequestLogger
from .models import Customer, Order, OrderDetail, Product
from .responses import read_sales_csv
from .settings import Settings

_log = logging.getLogger("salesanalytics")

_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_INT = re.compile(r"[+-]?[0-9]+")
_ZERO_TIME = datetime(1, 1, 1)


def _parse_date(text: str) -> datetime:
    if _DATE.fullmatch(text):
        try:
            return datetime.strptime(text, "%Y-%m-%d")
        except ValueError:
            pass
    return _ZERO_TIME


def _parse_int(text: str) -> int:
    return int(text) if _INT.fullmatch(text) else 0


def _parse_float(text: str) -> float:
    if text != text.strip() or "_" in text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def _bound(value):
    """Bind a date bound as a datetime when it parses, else as plain text."""
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return literal(value, String())


@dataclass
class ProductSales:
    """Total quantity sold of one product."""

    product_id: str
    product_name: str
    quantity: int


@dataclass
class SalesService:
    """Refreshes the sales tables and answers top-product queries."""

    engine: Engine
    settings: Settings = field(default_factory=Settings)

    def refresh_data(self, logger=None):
        """Load the CSV file named by ``[common] path`` into the database."""
        logger = logger or RequestLogger()
        logger.info("refresh_data(+)")
        path = self.settings.get("common", "path")
        try:
            with open(path, newline="", encoding="utf-8") as stream:
                records = read_sales_csv(stream)
        except OSError as exc:
            logger.error("CRRD:001", str(exc))
            raise
        except ValueError as exc:
            logger.error("CRRD:002", exc)
            raise
        self.refresh_from_records(records)
        logger.info("refresh_data(-)")

    def refresh_from_records(self, records):
        """Upsert customers, products, orders and order details from records."""
        customers, products, orders, details = {}, {}, {}, {}
        for record in records:
            customers[record.customer_id] = Customer(
                id=record.customer_id,
                name=record.customer_name,
                email=record.customer_email,
                address=record.customer_address,
            )
            products[record.product_id] = Product(
                product_id=record.product_id,
                product_name=record.product_name,
                category=record.category,
            )
            orders[record.order_id] = Order(
                order_id=record.order_id,
                customer_id=record.customer_id,
                date_of_sale=_parse_date(record.date_of_sale),
                payment_method=record.payment_method,
                region=record.region,
                shipping_cost=_parse_float(record.shipping_cost),
            )
            details[(record.order_id, record.product_id)] = OrderDetail(
                order_id=record.order_id,
                product_id=record.product_id,
                quantity_sold=_parse_int(record.quantity_sold),
                unit_price=record.unit_price,
                discount=record.discount,
            )
        for rows in (customers, products, orders, details):
            self._upsert(list(rows.values()))

    def _upsert(self, rows) -> None:
        if not rows:
            return
        try:
            with Session(self.engine) as session, session.begin():
                for row in rows:
                    session.merge(row)
        except SQLAlchemyError as exc:
            _log.error("upsert into %s failed: %s", type(rows[0]).__tablename__, exc)

    def top_products(self, start, end, limit=10, category=None, region=None):
        """Return products ranked by quantity sold between two dates."""
        if not limit:
            limit = 10
        quantity = func.sum(OrderDetail.quantity_sold).label("quantity")
        stmt = (
            select(Product.product_id, Product.product_name, quantity)
            .select_from(OrderDetail)
            .join(Product, Product.product_id == OrderDetail.product_id)
            .join(Order, Order.order_id == OrderDetail.order_id)
            .where(Order.date_of_sale.between(_bound(start), _bound(end)))
            .group_by(Product.product_id, Product.product_name)
            .order_by(quantity.desc(), Product.product_id)
        )
        if category is not None:
            stmt = stmt.where(Product.category == category)
        if region is not None:
            stmt = stmt.where(Order.region == region)
        if limit > 0:
            stmt = stmt.limit(limit)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).all()
        return [
            ProductSales(row.product_id, row.product_name or "", int(row.quantity or 0))
            for row in rows
        ]