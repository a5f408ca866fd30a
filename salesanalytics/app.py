"""HTTP API, background refresher and the command entry point."""

from __future__ import annotations

import argparse
import logging
import re
import sys
import threading
from http import HTTPStatus

from flask import Flask, Response, request
from sqlalchemy.exc import SQLAlchemyError

from .database import connect
from .logging_setup import LOGGER_NAME, RequestLogger, setup_logger
from .responses import Status, ValidationError, build_response, validate_required
from .service import SalesService
from .settings import load_settings

_log = logging.getLogger(LOGGER_NAME)

_CORS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Headers": (
        "Accept, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, "
        "Authorization, credentials"
    ),
}
_INT = re.compile(r"[+-]?[0-9]+")


def _parse_int(text) -> int:
    return int(text) if text and _INT.fullmatch(text) else 0


def _reply(body: str, status: int = HTTPStatus.OK) -> Response:
    response = Response(body + "\n", status=status, content_type="text/plain; charset=utf-8")
    response.headers.update(_CORS)
    return response


def _as_rows(products):
    return [
        {"ProductID": p.product_id, "ProductName": p.product_name, "Quantity": p.quantity}
        for p in products
    ]


def create_app(service):
    """Build the Flask application serving the ``/api`` routes."""
    app = Flask(__name__)

    def top_products(code, filter_names):
        logger = RequestLogger()
        logger.info(f"{code}(+)")
        args = request.args
        start = args.get("start", "")
        end = args.get("end", "")
        limit = _parse_int(args.get("limit", "")) or 10
        filters = {name: args.get(name, "") for name in filter_names}
        try:
            validate_required({"start": start, "end": end, **filters})
        except ValidationError as exc:
            logger.error(f"{code}:001", "Validation failed", exc)
            return _reply(
                build_response(Status.ERROR, f"{code}:001 {exc}"), HTTPStatus.BAD_REQUEST
            )
        try:
            products = service.top_products(start, end, limit, **filters)
        except SQLAlchemyError as exc:
            logger.error(f"{code}:002", "Failed to fetch data", exc)
            return _reply(
                build_response(Status.ERROR, f"{code}:002 {exc}"),
                HTTPStatus.INTERNAL_SERVER_ERROR,
            )
        logger.info(f"{code}(-)")
        return _reply(build_response(Status.SUCCESS, HTTPStatus.OK.phrase, _as_rows(products)))

    @app.post("/api/refresh-data")
    def refresh_data():
        logger = RequestLogger()
        logger.info("refresh_data_api(+)")
        try:
            service.refresh_data(logger)
        except (OSError, ValueError, SQLAlchemyError) as exc:
            logger.error("RDA:001", exc)
            return _reply(build_response(Status.ERROR, f"RDA:001 {exc}"))
        return _reply(build_response(Status.SUCCESS, "Process successfully completed"))

    @app.get("/api/top-products")
    def get_top_products():
        return top_products("CGTP", ())

    @app.get("/api/top-products/category")
    def get_top_products_by_category():
        return top_products("CGTPBC", ("category",))

    @app.get("/api/top-products/region")
    def get_top_products_by_region():
        return top_products("CGTPBR", ("region",))

    return app


def _run_refresh(service, logger, label: str) -> None:
    try:
        service.refresh_data(logger)
    except Exception as exc:  # keep the refresher alive whatever a run raises
        logger.error(f"{label} data refresh failed", exc)
    else:
        logger.info(f"{label} data refresh completed successfully")


def auto_refresh(service, hours=10, stop_event=None):
    """Refresh once now, then every ``hours`` hours until ``stop_event`` is set."""
    hours = hours or 10
    stop_event = stop_event or threading.Event()
    logger = RequestLogger()
    logger.info("Running initial data refresh...")
    _run_refresh(service, logger, "Initial")
    while not stop_event.wait(hours * 3600):
        logger.info(f"Starting scheduled {hours}-hour data refresh...")
        _run_refresh(service, logger, "Scheduled")


def _fail(message: str) -> int:
    _log.error(message)
    print(message, file=sys.stderr)
    return 1


def main(argv=None):
    """Start the sales analytics server."""
    parser = argparse.ArgumentParser(prog="salesanalytics", description="Sales analytics API server.")
    parser.add_argument("--settings", default="./settings", help="folder holding the *.toml files")
    parser.add_argument("--log-dir", default="./log", help="folder for log files")
    args = parser.parse_args(argv)

    try:
        handler = setup_logger(args.log_dir)
    except OSError as exc:
        return _fail(f"Failed to set up logger: {exc}")

    stop = threading.Event()
    try:
        try:
            settings = load_settings(args.settings)
        except (OSError, ValueError) as exc:
            return _fail(f"Failed to read settings folder: {exc}")
        try:
            engine = connect(settings)
        except (ValueError, ConnectionError, RuntimeError) as exc:
            return _fail(f"Failed to connect to the database: {exc}")

        service = SalesService(engine, settings)
        hours = _parse_int(settings.get("common", "hours")) or 10
        threading.Thread(
            target=auto_refresh, args=(service, hours, stop), daemon=True
        ).start()

        port_text = settings.get("common", "port") or "8080"
        try:
            port = int(port_text)
        except ValueError:
            return _fail(f"Failed to start server: invalid port {port_text!r}")

        print(f"🚀 Server running on port {port}...")
        try:
            create_app(service).run(host="0.0.0.0", port=port)
        except OSError as exc:
            return _fail(f"Failed to start server: {exc}")
        return 0
    finally:
        stop.set()
        logging.getLogger(LOGGER_NAME).removeHandler(handler)
        handler.close()