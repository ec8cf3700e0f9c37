"""Restaurant listing queries: filter selection to store query."""

from __future__ import annotations

from dataclasses import dataclass

from fireeats.application.interfaces.store import DocumentStore, Query
from fireeats.core.constants import COLLECTION_RESTAURANTS
from fireeats.domain.entities.catalog import price_string
from fireeats.domain.enums import SortField
from fireeats.domain.exceptions import ValidationException

DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class RestaurantFilters:
    """Filter and sort selection for the restaurant listing.

    Empty strings and None mean "no filter". price is a tier from 1 to 3;
    sort_by is a stored field name (see SortField).
    """

    category: str | None = None
    city: str | None = None
    price: int | None = None
    sort_by: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.category or self.city or self.price is not None)

    def describe(self) -> list[str]:
        """Labels for the active filters (category, city, price label)."""
        labels: list[str] = []
        if self.category:
            labels.append(self.category)
        if self.city:
            labels.append(self.city)
        if self.price is not None:
            labels.append(price_string(self.price))
        return labels


def build_query(
    store: DocumentStore,
    filters: RestaurantFilters | None = None,
    limit: int = DEFAULT_LIMIT,
) -> Query:
    """Build the restaurants query for filters.

    Starts from the restaurants collection limited to `limit` documents and
    adds an equality filter per active field, then an ascending sort.

    Raises:
        ValidationException: If price is not a tier 1-3 or sort_by is not sortable.
    """
    filters = filters or RestaurantFilters()
    query: Query = store.collection(COLLECTION_RESTAURANTS).limit(limit)
    if filters.category:
        query = query.where("category", "==", filters.category)
    if filters.city:
        query = query.where("city", "==", filters.city)
    if filters.price is not None:
        if not price_string(filters.price):
            raise ValidationException("Price must be between 1 and 3", field="price")
        query = query.where("price", "==", filters.price)
    if filters.sort_by:
        if filters.sort_by not in SortField.values():
            raise ValidationException(
                f"Cannot sort by {filters.sort_by!r}; expected one of {', '.join(SortField.values())}",
                field="sort_by",
            )
        query = query.order_by(filters.sort_by)
    return query
