"""URL routing for conflicts."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import ConflictCheckView, ConflictIgnoreView, ConflictListView

urlpatterns = [
    path("", ConflictListView.as_view(), name="conflict-list"),
    path("ignore/", ConflictIgnoreView.as_view(), name="conflict-ignore"),
    path("check/", ConflictCheckView.as_view(), name="conflict-check"),
]
