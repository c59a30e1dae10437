"""
Query-string filters for the saved report list.
"""

import django_filters
from django.db.models import Q

from .models import CustomReport
from .registry import DATA_SOURCE_CHOICES


class CustomReportFilter(django_filters.FilterSet):
    dataSource = django_filters.ChoiceFilter(
        field_name="data_source", choices=DATA_SOURCE_CHOICES
    )
    isShared = django_filters.BooleanFilter(
        field_name="is_shared", widget=django_filters.widgets.BooleanWidget()
    )
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = CustomReport
        fields = ["dataSource", "isShared", "search"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(description__icontains=value)
        )


__all__ = ["CustomReportFilter"]
