"""View and serializer mixins shared by the list/detail endpoints."""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping

from rest_framework import serializers  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.query_builder import METADATA_FIELDS, ListQuery, QueryBuilder
from shared.infrastructure.querysets import filter_and_order, page_window

from .context import RequestContext


def parse_identifier(value: Any, label: str = "id") -> uuid.UUID:
    """Parse a resource identifier, rejecting malformed values with a 400."""

    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError({label: [f"Invalid {label} format."]}) from None


class RequestContextMixin:
    """Builds :class:`RequestContext` once per request, after authentication."""

    request_context: RequestContext | None = None

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        self.request_context = RequestContext.from_user(request.user)


class IdentifierLookupMixin:
    """Detail routes answer 400 (not 404) for malformed identifiers."""

    identifier_label = "id"

    def get_object(self):  # type: ignore
        lookup_url_kwarg = self.lookup_url_kwarg or self.lookup_field
        self.kwargs[lookup_url_kwarg] = parse_identifier(
            self.kwargs[lookup_url_kwarg], self.identifier_label
        )
        return super().get_object()


class ListQueryMixin:
    """``list`` driven by the query builder (filter, sort, fields, page).

    ``query_fields`` maps public field names to ORM lookups; only those can
    be filtered and sorted on.
    """

    query_fields: Mapping[str, str] = {}

    def get_list_query(self) -> ListQuery:
        try:
            return QueryBuilder(self.request.query_params.dict()).build()
        except ValueError as exc:
            raise ValidationError({"fields": [str(exc)]}) from exc

    def list(self, request, *args, **kwargs):  # type: ignore
        query = self.get_list_query()
        queryset = filter_and_order(self.get_queryset(), query, self.query_fields)
        total = queryset.count()
        serializer = self.get_serializer(
            page_window(queryset, query),
            many=True,
            fields=query.fields,
            exclude=query.excluded_fields,
        )
        return Response(
            {
                "count": total,
                "page": query.page,
                "limit": query.page_size,
                "results": serializer.data,
            }
        )


class ProjectedSerializerMixin:
    """Serializer accepting ``fields``/``exclude`` to project its output."""

    def __init__(self, *args, fields: Iterable[str] | None = None, exclude: Iterable[str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        if fields is not None:
            requested = set(fields)
            unknown = requested - set(self.fields)
            if unknown:
                raise ValidationError({"fields": [f"Unknown field '{name}'." for name in sorted(unknown)]})
            for name in set(self.fields) - requested:
                self.fields.pop(name)
        excluded = set(exclude or ())
        unknown = excluded - set(self.fields) - set(METADATA_FIELDS)
        if unknown:
            raise ValidationError({"fields": [f"Unknown field '{name}'." for name in sorted(unknown)]})
        for name in excluded:
            self.fields.pop(name, None)


class ProjectedModelSerializer(ProjectedSerializerMixin, serializers.ModelSerializer):
    pass
