"""Business rules for creating, changing and querying subscriptions."""

from __future__ import annotations

from typing import Optional

from .models import Subscription, parse_month
from .repository import RepositoryError, SubscriptionFilter, SubscriptionRepository, SumFilter
from .requests import CreateSubscriptionRequest, UpdateSubscriptionRequest


class ServiceError(Exception):
    """Raised when a subscription request cannot be carried out."""


def _parse(value: str, what: str):
    try:
        return parse_month(value)
    except ValueError as exc:
        raise ServiceError(f"failed to parse {what}: {exc}") from exc


class SubscriptionService:
    """Subscription operations on top of a repository."""

    def __init__(self, repository: SubscriptionRepository) -> None:
        self._repository = repository

    def create(self, request: CreateSubscriptionRequest) -> Subscription:
        """Store a new subscription built from the request."""
        start_date = _parse(request.start_date, "start date")
        end_date = _parse(request.end_date, "end date") if request.end_date else None
        subscription = Subscription(
            service_name=request.service_name,
            price=request.price,
            user_id=request.user_id,
            start_date=start_date,
            end_date=end_date,
        )
        try:
            return self._repository.create(subscription)
        except RepositoryError as exc:
            raise ServiceError(f"failed to create subscription: {exc}") from exc

    def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        """Return the subscription with this id, or None."""
        return self._repository.get_by_id(subscription_id)

    def update(self, subscription_id: str, request: UpdateSubscriptionRequest) -> Subscription:
        """Apply the fields present in the request; an empty end date clears it."""
        try:
            existing = self._repository.get_by_id(subscription_id)
        except RepositoryError as exc:
            raise ServiceError(f"failed to get subscription: {exc}") from exc
        if existing is None:
            raise ServiceError("subscription not found")

        if request.service_name is not None:
            existing.service_name = request.service_name
        if request.price is not None:
            existing.price = request.price
        if request.end_date is not None:
            existing.end_date = _parse(request.end_date, "end date") if request.end_date else None

        try:
            return self._repository.update(existing)
        except RepositoryError as exc:
            raise ServiceError(f"failed to update subscription: {exc}") from exc

    def delete(self, subscription_id: str) -> None:
        """Remove the subscription with this id."""
        self._repository.delete(subscription_id)

    def get_all(self, criteria: Optional[SubscriptionFilter] = None) -> list[Subscription]:
        """Return the subscriptions matching the criteria."""
        return self._repository.get_all(criteria or SubscriptionFilter())

    def get_sum(self, criteria: Optional[SumFilter] = None) -> int:
        """Return the total price of the matching subscriptions."""
        return self._repository.get_sum(criteria or SumFilter())