"""Serializers for conflict endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import ConflictType, IgnoredConflict


class ConflictIgnoreSerializer(serializers.Serializer):
    ACTION_IGNORE = "ignore"
    ACTION_UNIGNORE = "unignore"

    conflict_key = serializers.CharField(max_length=2048)
    conflict_type = serializers.ChoiceField(choices=ConflictType.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    action = serializers.ChoiceField(choices=[ACTION_IGNORE, ACTION_UNIGNORE], default=ACTION_IGNORE)


class IgnoredConflictSerializer(serializers.ModelSerializer):
    ignored_by = serializers.StringRelatedField()

    class Meta:
        model = IgnoredConflict
        fields = ["id", "conflict_key", "conflict_type", "reason", "ignored_by", "created_at"]
