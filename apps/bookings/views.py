"""API views for the booking domain."""

from __future__ import annotations

from django.core.exceptions import ValidationError  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import filters, mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import BookingFilter
from .models import Booking
from .serializers import (
    BookingActionSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
)
from .services import (
    BookingTransitionError,
    approve_booking,
    cancel_booking,
    reject_booking,
    sync_booking_calendar,
    update_booking_dates,
)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Admin management of bookings: review, status changes and date edits."""

    queryset = Booking.objects.select_related("approved_by").all()
    permission_classes = [permissions.IsAdminUser]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = BookingFilter
    search_fields = ["booking_code", "guest_name", "guest_email"]
    ordering_fields = ["start_date", "created_at", "total_price"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "partial_update":
            return BookingUpdateSerializer
        if self.action in ("approve", "reject", "cancel"):
            return BookingActionSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def partial_update(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = update_booking_dates(
                booking,
                serializer.validated_data["start_date"],
                serializer.validated_data["end_date"],
                actor=request.user,
                use_family_price=serializer.validated_data.get("use_family_price"),
            )
        except BookingTransitionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except ValidationError as exc:
            return Response({"detail": exc.messages}, status=status.HTTP_400_BAD_REQUEST)
        return Response(BookingSerializer(booking).data)

    def _transition(self, request, handler):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = handler(booking, actor=request.user, note=serializer.validated_data["note"])
        except BookingTransitionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        return self._transition(request, approve_booking)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        return self._transition(request, reject_booking)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        return self._transition(request, cancel_booking)

    @action(detail=True, methods=["post"], url_path="sync")
    def sync(self, request, pk=None):  # type: ignore
        """Reconcile this booking with the calendar right away."""
        booking: Booking = self.get_object()  # type: ignore
        sync_booking_calendar(booking, request.user)
        booking.refresh_from_db()
        return Response(BookingSerializer(booking).data)
