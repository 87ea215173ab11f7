import bleach
from rest_framework import serializers

from dashboard.services.mutations import RESOLVED_STATUSES
from dashboard.services.signatures import SIGNATURE_FILES


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class TransferSelectionSerializer(serializers.Serializer):
    requestId = serializers.CharField(max_length=64)
    branchId = serializers.CharField(required=False, allow_blank=True, max_length=64)
    roomId = serializers.CharField(required=False, allow_blank=True, max_length=64)


class ResolveIncidentSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RESOLVED_STATUSES)
    resolutionNotes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_resolutionNotes(self, v):
        return _clean(v)


class RelocateSerializer(serializers.Serializer):
    locationId = serializers.CharField(max_length=64)
    roomId = serializers.CharField(max_length=64)


class RelocationOptionsQuerySerializer(serializers.Serializer):
    locationId = serializers.CharField(required=False, allow_blank=True, max_length=64)


class SignatureSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=sorted(SIGNATURE_FILES))
    signature = serializers.CharField()
    guestId = serializers.CharField(required=False, allow_blank=True, max_length=64)


class RoomUpdateSerializer(serializers.Serializer):
    """Editable room fields; anything else in the body, server-managed fields included, is dropped."""
    roomNumber = serializers.CharField(required=False, max_length=32)
    capacity = serializers.IntegerField(required=False, min_value=0)
    roomType = serializers.CharField(required=False, max_length=64)
    amenities = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    recommendedFor = serializers.CharField(required=False, allow_blank=True, max_length=200)
    specialNote = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate_roomNumber(self, v):
        return _clean(v)

    def validate_roomType(self, v):
        return _clean(v)

    def validate_recommendedFor(self, v):
        return _clean(v)

    def validate_specialNote(self, v):
        return _clean(v)
