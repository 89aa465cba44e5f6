"""Translate a built :class:`ListQuery` into a Django queryset.

API field names never reach the ORM directly: every endpoint declares a
mapping of public names to model lookups and anything outside it is a
client error.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from django.core.exceptions import FieldError, ValidationError as DjangoValidationError  # type: ignore
from django.db.models import Q, QuerySet  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

from shared.application.query_builder import ListQuery

logger = logging.getLogger(__name__)

_LOOKUPS = {"$gte": "gte", "$gt": "gt", "$lte": "lte", "$lt": "lt"}


def _resolve(name: str, field_map: Mapping[str, str], purpose: str) -> str:
    try:
        return field_map[name]
    except KeyError:
        raise ValidationError({purpose: [f"Unknown field '{name}'."]}) from None


def build_q(predicate: Mapping[str, Any], field_map: Mapping[str, str]) -> Q:
    """AND together every condition of ``predicate``."""

    condition = Q()
    for name, value in predicate.items():
        path = _resolve(name, field_map, "filter")
        if isinstance(value, Mapping):
            for operator, operand in value.items():
                lookup = _LOOKUPS.get(operator)
                if lookup is None:
                    raise ValidationError({"filter": [f"Unsupported operator '{operator}'."]})
                condition &= Q(**{f"{path}__{lookup}": operand})
        else:
            condition &= Q(**{path: value})
    return condition


def build_ordering(ordering: tuple[str, ...], field_map: Mapping[str, str]) -> list[str]:
    result = []
    for item in ordering:
        descending = item.startswith("-")
        path = _resolve(item.lstrip("-"), field_map, "sort")
        result.append(f"-{path}" if descending else path)
    return result


def filter_and_order(queryset: QuerySet, query: ListQuery, field_map: Mapping[str, str]) -> QuerySet:
    """Apply predicate and ordering; the page window is left to the caller."""

    try:
        return queryset.filter(build_q(query.predicate, field_map)).order_by(
            *build_ordering(query.ordering, field_map)
        )
    except (DjangoValidationError, FieldError, ArithmeticError, TypeError, ValueError) as exc:
        logger.info("Rejected list query %s: %s", query, exc)
        raise ValidationError({"filter": ["Invalid filter value."]}) from exc


def page_window(queryset: QuerySet, query: ListQuery) -> QuerySet:
    return queryset[query.offset:query.offset + query.page_size]
