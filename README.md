# salesanalytics

A small service that loads a sales CSV export into a MySQL database and
answers "which products sold the most?" over an HTTP API.

On start-up it reads its settings, connects to the database, creates any
missing tables for customers, products, orders and order details, imports
the CSV once in a background thread, and then re-imports it on a fixed
interval while serving requests.

## Installation

```
pip install .
```

The server connects through SQLAlchemy's `mysql+pymysql` dialect, so the
PyMySQL driver has to be installed alongside the package when talking to
MySQL.

Tests are run with the `test` extra:

```
pip install ".[test]"
pytest
```

## Configuration

Settings are read from every `*.toml` file in the settings folder. Each
file becomes a section named after the file stem; every value in it must be
a string, otherwise loading fails. A missing key reads as an empty string.

`settings/common.toml`:

```toml
port = "8080"   # HTTP port, 8080 when unset
hours = "10"    # hours between automatic refreshes, 10 when unset
path = "./data/sales.csv"
```

`settings/dbconfig.toml`:

```toml
user = "user"
password = "password"
host = "localhost:3306"
db = "sales"
```

All four database values are required; the server refuses to start
without them.

Log output goes to a time-stamped file `logfile_YYYYMMDD_HHMMSS.log` in the
log folder, which is created if missing.

## Running

```
salesanalytics
```

Options:

- `--settings FOLDER` – folder holding the `*.toml` files (default `./settings`)
- `--log-dir FOLDER` – folder for log files (default `./log`)

The server listens on all interfaces. If the logger, settings or database
cannot be set up, an error is printed to standard error and the command
exits with status 1.

## The CSV file

The import expects a header row with these columns:

`Order ID`, `Product ID`, `Customer ID`, `Product Name`, `Category`,
`Region`, `Date of Sale` (`YYYY-MM-DD`), `Quantity Sold`, `Unit Price`,
`Discount`, `Shipping Cost`, `Payment Method`, `Customer Name`,
`Customer Email`, `Customer Address`.

Unknown columns are ignored and blank lines are skipped. A row with the
wrong number of fields, or a non-numeric `Order ID`, `Unit Price` or
`Discount`, fails the whole import. An unparseable date, quantity or
shipping cost is stored as the zero value instead.

Rows are upserted: an existing customer, product, order or order line with
the same key is updated in place.

## HTTP API

Every response body is one line of compact JSON with `msg` and `status`
(`"S"` on success, `"E"` on error), plus `result` when there is one. CORS
headers allowing any origin are sent with every response.

| Method | Path                          | Query parameters                              |
|--------|-------------------------------|-----------------------------------------------|
| POST   | `/api/refresh-data`           | none                                          |
| GET    | `/api/top-products`           | `start`, `end`, optional `limit`              |
| GET    | `/api/top-products/category`  | `start`, `end`, `category`, optional `limit`  |
| GET    | `/api/top-products/region`    | `start`, `end`, `region`, optional `limit`    |

`start` and `end` bound the sale date, inclusive. `limit` defaults to 10
when missing, zero or not an integer; a negative limit returns every
product. A missing required parameter gives HTTP 400; a database failure
gives HTTP 500. A failed refresh answers HTTP 200 with status `"E"`.

Example:

```
curl "http://localhost:8080/api/top-products/region?start=2024-01-01&end=2024-03-31&region=Europe&limit=5"
```

```json
{"msg":"OK","status":"S","result":[{"ProductID":"P100","ProductName":"Desk Lamp","Quantity":42}]}
```

Products with equal quantities are ordered by product id.

## Using it from Python

```python
from salesanalytics.database import create_db_engine
from salesanalytics.models import create_schema
from salesanalytics.service import SalesService
from salesanalytics.app import create_app

engine = create_db_engine("sqlite://")
create_schema(engine)
service = SalesService(engine)
app = create_app(service)
```

- `salesanalytics.settings.load_settings(folder)` returns a `Settings`
  whose `get(file_name, key)` looks a value up.
- `salesanalytics.database.build_dsn(settings)` and `connect(settings)`
  build the MySQL URL and open it, creating the tables.
- `salesanalytics.responses.read_sales_csv(stream)` parses the CSV into
  `SalesRecord` objects; `build_response` and `validate_required` produce
  the response bodies and check request fields.
- `SalesService.refresh_data(logger)` imports the file named by
  `[common] path`; `refresh_from_records(records)` upserts already parsed
  records.
- `SalesService.top_products(start, end, limit, category, region)` returns
  a list of `ProductSales` entries ordered by quantity sold, highest first.
- `salesanalytics.app.auto_refresh(service, hours, stop_event)` refreshes
  once, then every `hours` hours until the event is set.
- `salesanalytics.logging_setup.setup_logger(log_dir)` and `RequestLogger`
  write the tagged log lines.