"""API views for conflict detection and suppression."""

from __future__ import annotations

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.calendar_sync.adapter import get_calendar_adapter

from .detector import ConflictDetector
from .ledger import ConflictLedger
from .models import IgnoredConflict
from .serializers import ConflictIgnoreSerializer, IgnoredConflictSerializer
from .services import check_and_notify


class ConflictListView(APIView):
    """Current conflicts (ignored ones are left out)."""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request):  # type: ignore
        conflicts = ConflictDetector(adapter=get_calendar_adapter()).find_all_conflicts()
        records = [conflict.to_record() for conflict in conflicts]
        return Response({"count": len(records), "results": records}, status=status.HTTP_200_OK)


class ConflictIgnoreView(APIView):
    """Ignore or un-ignore a conflict; GET lists the ignored ones."""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request):  # type: ignore
        ignored = IgnoredConflict.objects.select_related("ignored_by").order_by("-created_at")
        return Response(IgnoredConflictSerializer(ignored, many=True).data)

    def post(self, request):  # type: ignore
        serializer = ConflictIgnoreSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ledger = ConflictLedger()

        if data["action"] == ConflictIgnoreSerializer.ACTION_UNIGNORE:
            if not ledger.unignore(data["conflict_key"], data["conflict_type"]):
                return Response({"detail": "Conflict was not ignored."}, status=status.HTTP_404_NOT_FOUND)
            return Response({"ignored": False}, status=status.HTTP_200_OK)

        ledger.ignore(data["conflict_key"], data["conflict_type"], reason=data["reason"], actor=request.user)
        return Response({"ignored": True}, status=status.HTTP_200_OK)


class ConflictCheckView(APIView):
    """Run detection and notify admins about new HIGH conflicts."""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request):  # type: ignore
        result = check_and_notify(adapter=get_calendar_adapter())
        return Response(result.as_dict(), status=status.HTTP_200_OK)
