"""Serializers for transforming domain models to API responses."""

from rest_framework import serializers


class RegistrationSerializer(serializers.Serializer):
    """Serializer for the Registration domain model."""

    id = serializers.UUIDField(source="id.value")
    status = serializers.CharField(source="status.value")
    distance_id = serializers.UUIDField(source="distance_id.value")
    edition_id = serializers.UUIDField(source="edition_id.value")
    base_price_cents = serializers.IntegerField()
    fees_cents = serializers.IntegerField()
    tax_cents = serializers.IntegerField()
    total_cents = serializers.IntegerField(allow_null=True)
    expires_at = serializers.DateTimeField(allow_null=True)


class CleanupResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    cancelled_count = serializers.IntegerField()
