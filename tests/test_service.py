from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from salesanalytics.database import create_db_engine
from salesanalytics.models import Customer, Order, OrderDetail, Product, SalesRecord, create_schema
from salesanalytics.service import ProductSales, SalesService
from salesanalytics.settings import Settings

HEADER = (
    "Order ID,Product ID,Customer ID,Product Name,Category,Region,Date of Sale,"
    "Quantity Sold,Unit Price,Discount,Shipping Cost,Payment Method,Customer Name,"
    "Customer Email,Customer Address"
)
ROWS = [
    "1,P1,C1,Widget,Tools,North,2024-01-05,3,9.5,0.1,2.5,Card,Ann,ann@example.com,1 Main St",
    "2,P2,C2,Gadget,Toys,South,2024-01-10,5,4.0,0,1.0,Cash,Bob,bob@example.com,2 Main St",
    "3,P1,C1,Widget,Tools,South,2024-01-31,4,9.5,0,2.5,Card,Ann,ann@example.com,1 Main St",
    "4,P3,C2,Doohickey,Tools,North,2024-02-15,10,1.0,0,0.5,Cash,Bob,bob@example.com,2 Main St",
]


def _record(**values):
    base = dict(
        order_id=1, product_id="P1", customer_id="C1", product_name="Widget",
        category="Tools", region="North", date_of_sale="2024-01-05", quantity_sold="3",
        unit_price=9.5, discount=0.1, shipping_cost="2.5", payment_method="Card",
        customer_name="Ann", customer_email="ann@example.com", customer_address="1 Main St",
    )
    base.update(values)
    return SalesRecord(**base)


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text("\n".join([HEADER, *ROWS]) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def service(csv_path):
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    return SalesService(engine, Settings(files={"common": {"path": str(csv_path)}}))


def _count(engine, model):
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(model))


def test_refresh_data_loads_every_table(service):
    service.refresh_data()
    assert _count(service.engine, Customer) == 2
    assert _count(service.engine, Product) == 3
    assert _count(service.engine, Order) == len(ROWS)
    assert _count(service.engine, OrderDetail) == len(ROWS)


def test_refresh_twice_keeps_one_row_per_key(service):
    service.refresh_data()
    service.refresh_data()
    assert _count(service.engine, Order) == len(ROWS)


def test_refresh_data_missing_file(tmp_path):
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    missing = SalesService(engine, Settings(files={"common": {"path": str(tmp_path / "none.csv")}}))
    with pytest.raises(FileNotFoundError):
        missing.refresh_data()


def test_refresh_data_without_path_setting():
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    with pytest.raises(FileNotFoundError):
        SalesService(engine).refresh_data()


def test_refresh_data_bad_csv(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("Order ID,Product ID\nabc,P1\n", encoding="utf-8")
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    with pytest.raises(ValueError):
        SalesService(engine, Settings(files={"common": {"path": str(path)}})).refresh_data()


def test_later_record_wins(service):
    service.refresh_from_records([_record(), _record(product_name="Renamed")])
    with Session(service.engine) as session:
        assert session.get(Product, "P1").product_name == "Renamed"
    service.refresh_from_records([_record(product_name="Again")])
    with Session(service.engine) as session:
        assert session.get(Product, "P1").product_name == "Again"


def test_unparsable_fields_become_zero_values(service):
    service.refresh_from_records(
        [_record(date_of_sale="2024/01/05", quantity_sold="many", shipping_cost="free")]
    )
    with Session(service.engine) as session:
        order = session.get(Order, 1)
        detail = session.get(OrderDetail, (1, "P1"))
        assert order.date_of_sale == datetime(1, 1, 1)
        assert order.shipping_cost == 0.0
        assert detail.quantity_sold == 0


def test_fields_are_converted(service):
    service.refresh_from_records([_record(quantity_sold="12", shipping_cost="3.25")])
    with Session(service.engine) as session:
        order = session.get(Order, 1)
        assert order.date_of_sale == datetime(2024, 1, 5)
        assert order.shipping_cost == 3.25
        assert session.get(OrderDetail, (1, "P1")).quantity_sold == 12


def test_empty_records_store_nothing(service):
    service.refresh_from_records([])
    assert _count(service.engine, Customer) == 0


def test_top_products_ranks_by_quantity(service):
    service.refresh_data()
    result = service.top_products("2024-01-01", "2024-01-31")
    assert [p.product_id for p in result] == ["P1", "P2"]
    assert result[0] == ProductSales("P1", "Widget", 7)
    assert all(a.quantity >= b.quantity for a, b in zip(result, result[1:]))


def test_top_products_limit(service):
    service.refresh_data()
    assert [p.product_id for p in service.top_products("2024-01-01", "2024-12-31", 1)] == ["P3"]
    assert len(service.top_products("2024-01-01", "2024-12-31", 0)) == 3


def test_top_products_by_category(service):
    service.refresh_data()
    result = service.top_products("2024-01-01", "2024-12-31", category="Toys")
    assert result == [ProductSales("P2", "Gadget", 5)]


def test_top_products_by_region(service):
    service.refresh_data()
    result = service.top_products("2024-01-01", "2024-12-31", region="North")
    assert [(p.product_id, p.quantity) for p in result] == [("P3", 10), ("P1", 3)]


def test_top_products_outside_range(service):
    service.refresh_data()
    assert service.top_products("2023-01-01", "2023-12-31") == []