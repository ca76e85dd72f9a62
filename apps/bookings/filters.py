import django_filters

from .models import Booking


class BookingFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    start_after = django_filters.DateFilter(field_name="end_date", lookup_expr="gte")
    end_before = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")
    guest_email = django_filters.CharFilter(lookup_expr="icontains")
    has_event = django_filters.BooleanFilter(field_name="google_event_id", lookup_expr="isnull", exclude=True)

    class Meta:
        model = Booking
        fields = ["status", "use_family_price"]
