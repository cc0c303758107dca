"""HTTP API for subscriptions and the command that serves it."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from typing import Any, Optional

from flask import Flask, jsonify, request
from pydantic import BaseModel, ValidationError

from .config import ConfigError, load_config
from .logging_setup import make_logger
from .models import ErrorResponse, parse_month
from .repository import (
    RepositoryError,
    SqlSubscriptionRepository,
    SubscriptionFilter,
    SumFilter,
    open_database,
)
from .requests import CreateSubscriptionRequest, UpdateSubscriptionRequest
from .service import ServiceError, SubscriptionService

_NOT_FOUND = "subscription not found"


def parse_period(value: Optional[str]) -> Optional[date]:
    """Parse a ``YYYY-MM`` query value; empty or invalid values give None."""
    if not value:
        return None
    try:
        return parse_month(value)
    except ValueError:
        return None


def _error(message: str, status: int):
    return jsonify(ErrorResponse(message).to_dict()), status


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "body"
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


class _BadRequest(Exception):
    pass


def _bind(model: type[BaseModel]) -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise _BadRequest("invalid JSON body")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise _BadRequest(_validation_message(exc)) from exc


def _criteria_args() -> dict[str, Any]:
    return {
        "user_id": request.args.get("user_id", ""),
        "service_name": request.args.get("service_name", ""),
        "from_date": parse_period(request.args.get("from")),
        "to_date": parse_period(request.args.get("to")),
    }


def create_app(service: SubscriptionService) -> Flask:
    """Build the Flask application serving the subscription API."""
    app = Flask(__name__)
    failures = (ServiceError, RepositoryError)

    @app.post("/api/v1/subscriptions")
    def create_subscription():
        try:
            body = _bind(CreateSubscriptionRequest)
        except _BadRequest as exc:
            return _error(str(exc), 400)
        try:
            sub = service.create(body)
        except failures as exc:
            return _error(str(exc), 500)
        return jsonify(sub.to_response().to_dict()), 201

    @app.get("/api/v1/subscriptions/<subscription_id>")
    def get_subscription(subscription_id: str):
        try:
            sub = service.get_by_id(subscription_id)
        except failures as exc:
            return _error(str(exc), 500)
        if sub is None:
            return _error(_NOT_FOUND, 404)
        return jsonify(sub.to_response().to_dict()), 200

    @app.put("/api/v1/subscriptions/<subscription_id>")
    def update_subscription(subscription_id: str):
        try:
            body = _bind(UpdateSubscriptionRequest)
        except _BadRequest as exc:
            return _error(str(exc), 400)
        try:
            sub = service.update(subscription_id, body)
        except failures as exc:
            return _error(str(exc), 500)
        if sub is None:
            return _error(_NOT_FOUND, 404)
        return jsonify(sub.to_response().to_dict()), 200

    @app.delete("/api/v1/subscriptions/<subscription_id>")
    def delete_subscription(subscription_id: str):
        try:
            service.delete(subscription_id)
        except failures as exc:
            return _error(str(exc), 500)
        return jsonify({"message": "subscription deleted"}), 200

    @app.get("/api/v1/subscriptions")
    def list_subscriptions():
        try:
            subs = service.get_all(SubscriptionFilter(**_criteria_args()))
        except failures as exc:
            return _error(str(exc), 500)
        return jsonify([sub.to_response().to_dict() for sub in subs]), 200

    @app.get("/api/v1/summary")
    def summary():
        try:
            total = service.get_sum(SumFilter(**_criteria_args()))
        except failures as exc:
            return _error(str(exc), 500)
        return jsonify({"sum": total}), 200

    return app


def main(argv: Optional[list[str]] = None) -> int:
    """Load the configuration, connect to the database and serve the API."""
    parser = argparse.ArgumentParser(prog="subsvc", description="Run the subscription service.")
    parser.add_argument("--config-dir", default=".", help="directory holding config.yaml")
    parser.add_argument("--env-file", default=".env", help="file of environment variables")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config_dir, args.env_file)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger = make_logger()
    try:
        engine = open_database(config, logger)
    except RepositoryError as exc:
        logger.error(str(exc))
        return 1

    app = create_app(SubscriptionService(SqlSubscriptionRepository(engine)))
    try:
        app.run(host="0.0.0.0", port=config.port)
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())