import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    """
    ?status=OPEN&date=2024-05-01&min_total=10&max_total=100

    min_total/max_total work on the total_amount annotation,
    so the queryset must come from OrderQuerySet.with_totals().
    """
    status = django_filters.ChoiceFilter(choices=Order.Status.choices)
    date = django_filters.DateFilter(field_name="created_at", lookup_expr="date")
    min_total = django_filters.NumberFilter(field_name="total_amount", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total_amount", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status"]
