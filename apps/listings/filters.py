import django_filters
from django.db.models import Q

from .models import Listing


class ListingFilter(django_filters.FilterSet):
    """Browse filters for listings"""

    category = django_filters.CharFilter(field_name="category")
    department = django_filters.CharFilter(field_name="department")
    seller = django_filters.UUIDFilter(field_name="seller__id")
    search = django_filters.CharFilter(method="filter_search")
    is_sold = django_filters.BooleanFilter()
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Listing
        fields = ["category", "department", "seller", "is_sold"]

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(title__icontains=value) | Q(description__icontains=value)
        )
