"""API views for calendar sync, manual calendar entries and linking."""

from __future__ import annotations

from datetime import date

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.value_objects import DateInterval

from .adapter import GoogleCalendarAdapter, get_calendar_adapter
from .linking import EventLinkError, EventLinkService
from .models import CalendarConnection
from .reconciler import BookingCalendarReconciler
from .serializers import (
    CalendarConnectionSerializer,
    EventIdsSerializer,
    ExternalEventSerializer,
    ManualEventCreateSerializer,
    ManualEventUpdateSerializer,
    SingleEventSerializer,
)
from .services import (
    ManualEventError,
    create_manual_event,
    default_window,
    delete_manual_event,
    get_blocked_intervals,
    list_manual_events,
    set_informational,
    update_manual_event,
)


def _window_from_query(request) -> DateInterval:  # type: ignore
    window = default_window()
    try:
        start = date.fromisoformat(request.query_params.get("start", window.start.isoformat()))
        end = date.fromisoformat(request.query_params.get("end", window.end.isoformat()))
        return DateInterval(start, end)
    except ValueError:
        return window


class CalendarSyncView(APIView):
    """Run a full reconciliation of bookings with the calendar ("sync now")."""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request):  # type: ignore
        result = BookingCalendarReconciler(adapter=get_calendar_adapter()).reconcile(actor=request.user)
        return Response(result.as_dict(), status=status.HTTP_200_OK)


class CalendarConnectionView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):  # type: ignore
        return Response(CalendarConnectionSerializer(CalendarConnection.get_solo()).data)

    def put(self, request):  # type: ignore
        connection = CalendarConnection.get_solo()
        serializer = CalendarConnectionSerializer(connection, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if not serializer.validated_data.get("service_account_json"):
            serializer.validated_data.pop("service_account_json", None)
        serializer.save(updated_by=request.user)
        return Response(serializer.data)


class CalendarConnectionTestView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request):  # type: ignore
        outcome = GoogleCalendarAdapter().test_connection()
        code = status.HTTP_200_OK if outcome["ok"] else status.HTTP_400_BAD_REQUEST
        return Response(outcome, status=code)


class BlockedDatesView(APIView):
    """Occupied date ranges (approved bookings and blocking calendar entries)."""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request):  # type: ignore
        intervals = get_blocked_intervals(get_calendar_adapter(), _window_from_query(request))
        return Response(
            [{"start_date": interval.start, "end_date": interval.end} for interval in intervals]
        )


class CalendarEventViewSet(viewsets.ViewSet):
    """Manual calendar entries: list, create, edit, delete, group and ungroup."""

    permission_classes = [permissions.IsAdminUser]
    lookup_value_regex = r"[^/]+"

    def get_adapter(self):  # type: ignore
        if not hasattr(self, "_adapter"):
            self._adapter = get_calendar_adapter()
        return self._adapter

    def list(self, request):  # type: ignore
        events = list_manual_events(self.get_adapter(), _window_from_query(request))
        return Response(ExternalEventSerializer(events, many=True).data)

    def create(self, request):  # type: ignore
        serializer = ManualEventCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        event_id = create_manual_event(
            self.get_adapter(),
            summary=data["summary"],
            description=data["description"],
            start=data["start_date"],
            end=data["end_date"],
            is_info=data["is_info"],
            color_tag=data["color_tag"] or None,
        )
        if not event_id:
            return Response({"detail": "Calendar entry could not be created."}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"id": event_id}, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = ManualEventUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        if "start_date" in changes:
            changes["start"] = changes.pop("start_date")
            changes["end"] = changes.pop("end_date")
        try:
            updated = update_manual_event(self.get_adapter(), pk, **changes)
        except ManualEventError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if not updated:
            return Response({"detail": "Calendar entry could not be updated."}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"id": pk, "updated": True})

    def destroy(self, request, pk=None):  # type: ignore
        try:
            deleted = delete_manual_event(self.get_adapter(), pk)
        except ManualEventError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if not deleted:
            return Response({"detail": "Calendar entry could not be deleted."}, status=status.HTTP_502_BAD_GATEWAY)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post", "delete"], url_path="info")
    def info(self, request, pk=None):  # type: ignore
        """POST marks the entry as informational, DELETE makes it blocking again."""
        try:
            updated = set_informational(self.get_adapter(), pk, request.method == "POST")
        except ManualEventError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if not updated:
            return Response({"detail": "Calendar entry could not be updated."}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"id": pk, "is_info": request.method == "POST"})

    @action(detail=False, methods=["post"])
    def group(self, request):  # type: ignore
        serializer = EventIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            color = EventLinkService(adapter=self.get_adapter()).link(
                serializer.validated_data["event_ids"], actor=request.user
            )
        except EventLinkError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"color_tag": color}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"])
    def ungroup(self, request):  # type: ignore
        serializer = EventIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            colors = EventLinkService(adapter=self.get_adapter()).unlink(
                serializer.validated_data["event_ids"], actor=request.user
            )
        except EventLinkError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"colors": colors}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="ungroup-single")
    def ungroup_single(self, request):  # type: ignore
        serializer = SingleEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        colors = EventLinkService(adapter=self.get_adapter()).unlink_single(
            serializer.validated_data["event_id"], actor=request.user
        )
        return Response({"colors": colors}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="grouped")
    def grouped(self, request):  # type: ignore
        """Whether the given entries form one linked group."""
        serializer = EventIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        grouped = EventLinkService(adapter=self.get_adapter()).are_grouped(serializer.validated_data["event_ids"])
        return Response({"grouped": grouped})
