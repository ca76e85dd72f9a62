"""Housekeeping calendar endpoint."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import permissions, serializers, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.calendar_sync.adapter import get_calendar_adapter

from .services import project_month


class MonthQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100, required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)


class HousekeepingCalendarView(APIView):
    """Arrivals, departures and cleaning days of one month, without guest data."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        today = timezone.localdate()
        projection = project_month(
            query.validated_data.get("year", today.year),
            query.validated_data.get("month", today.month),
            adapter=get_calendar_adapter(),
        )
        return Response(projection.as_dict(), status=status.HTTP_200_OK)
