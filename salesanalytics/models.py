"""Database tables and the flat sales record read from CSV."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

_KEY = String(191)


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(_KEY, primary_key=True)
    name: Mapped[str] = mapped_column(Text, default="")
    email: Mapped[str] = mapped_column(Text, default="")
    address: Mapped[str] = mapped_column(Text, default="")

    orders: Mapped[list[Order]] = relationship(back_populates="customer")


class Product(Base):
    __tablename__ = "products"

    product_id: Mapped[str] = mapped_column(_KEY, primary_key=True)
    product_name: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(Text, default="")

    order_details: Mapped[list[OrderDetail]] = relationship(back_populates="product")


class Order(Base):
    __tablename__ = "orders"

    order_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    customer_id: Mapped[Optional[str]] = mapped_column(
        _KEY,
        ForeignKey("customers.id", onupdate="CASCADE", ondelete="SET NULL"),
        index=True,
    )
    date_of_sale: Mapped[Optional[datetime]] = mapped_column(DateTime)
    region: Mapped[str] = mapped_column(Text, default="")
    shipping_cost: Mapped[float] = mapped_column(Float, default=0.0)
    payment_method: Mapped[str] = mapped_column(Text, default="")

    customer: Mapped[Optional[Customer]] = relationship(back_populates="orders")
    order_details: Mapped[list[OrderDetail]] = relationship(back_populates="order")


class OrderDetail(Base):
    __tablename__ = "order_details"

    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("orders.order_id", onupdate="CASCADE", ondelete="CASCADE"),
        primary_key=True,
        autoincrement=False,
    )
    product_id: Mapped[str] = mapped_column(
        _KEY,
        ForeignKey("products.product_id", onupdate="CASCADE", ondelete="SET NULL"),
        primary_key=True,
    )
    quantity_sold: Mapped[int] = mapped_column(Integer, default=0)
    unit_price: Mapped[float] = mapped_column(Float, default=0.0)
    discount: Mapped[float] = mapped_column(Float, default=0.0)

    product: Mapped[Product] = relationship(back_populates="order_details")
    order: Mapped[Order] = relationship(back_populates="order_details")


@dataclass
class SalesRecord:
    """One row of the sales CSV file."""

    order_id: int = 0
    product_id: str = ""
    customer_id: str = ""
    product_name: str = ""
    category: str = ""
    region: str = ""
    date_of_sale: str = ""
    quantity_sold: str = ""
    unit_price: float = 0.0
    discount: float = 0.0
    shipping_cost: str = ""
    payment_method: str = ""
    customer_name: str = ""
    customer_email: str = ""
    customer_address: str = ""


def create_schema(engine):
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine)