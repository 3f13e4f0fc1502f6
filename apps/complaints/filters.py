import django_filters

from .models import Complaint, ComplaintStatus, ComplaintType


class ComplaintFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ComplaintStatus.choices)
    type = django_filters.ChoiceFilter(choices=ComplaintType.choices)
    reported_user = django_filters.UUIDFilter(field_name="reported_user__id")
    reported_listing = django_filters.UUIDFilter(field_name="reported_listing__id")
    created_after = django_filters.DateTimeFilter(
        field_name="created_at", lookup_expr="gte"
    )
    created_before = django_filters.DateTimeFilter(
        field_name="created_at", lookup_expr="lte"
    )

    class Meta:
        model = Complaint
        fields = ["status", "type", "reported_user", "reported_listing"]
