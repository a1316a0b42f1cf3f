from typing import Any, Dict, Optional

from django.core.paginator import InvalidPage
from django.db.models import QuerySet
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class CustomPageNumberPagination(PageNumberPagination):
    """
    Page-number pagination with a metadata block:
    - `page` and `limit` (or `page_size`) query parameters
    - out-of-range pages are clamped instead of raising 404
    - extra top-level keys can ride along with the page (e.g. stats)
    """

    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100
    page_query_param = "page"

    def paginate_queryset(
        self, queryset: QuerySet, request, view=None
    ) -> Optional[list]:
        page_size = self.get_page_size(request)
        if not page_size:
            return None

        paginator = self.django_paginator_class(queryset, page_size)
        page_number = self.get_page_number(request, paginator)

        try:
            self.page = paginator.page(page_number)
        except InvalidPage:
            self.page = paginator.page(1)

        self.request = request
        return list(self.page)

    def get_paginated_response(
        self, data: list, extra: Optional[Dict[str, Any]] = None
    ) -> Response:
        payload = {
            "pagination": {
                "count": self.page.paginator.count,
                "total_pages": self.page.paginator.num_pages,
                "current_page": self.page.number,
                "page_size": self.page.paginator.per_page,
                "has_next": self.page.has_next(),
                "has_previous": self.page.has_previous(),
            },
            "links": {
                "next": self.get_next_link(),
                "previous": self.get_previous_link(),
            },
            "results": data,
        }
        if extra:
            payload.update(extra)
        return Response(payload)

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "properties": {
                "pagination": {"type": "object"},
                "links": {"type": "object"},
                "results": schema,
            },
        }

    def get_page_size(self, request) -> int:
        """
        Get the page size for the request with validation
        """
        for param in (self.page_size_query_param, "page_size"):
            try:
                page_size = int(request.query_params[param])
                if page_size > 0:
                    return min(page_size, self.max_page_size)
            except (KeyError, ValueError):
                continue

        return self.page_size

    def get_page_number(self, request, paginator) -> int:
        """
        Get the page number for the request with validation
        """
        page_number = request.query_params.get(self.page_query_param, 1)
        if page_number in self.last_page_strings:
            page_number = paginator.num_pages

        try:
            page_number = int(page_number)
            if page_number < 1:
                page_number = 1
            elif page_number > paginator.num_pages and paginator.num_pages > 0:
                page_number = paginator.num_pages
        except ValueError:
            page_number = 1

        return page_number
