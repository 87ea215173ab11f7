from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dashboard.permissions import CanSubmitActions
from dashboard.serializers.actions import RoomUpdateSerializer, SignatureSerializer
from dashboard.services import mutations


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanSubmitActions])
def save_signature(request):
    """Accepts ``{kind: admin|service_user, signature: data URL, guestId?}``."""
    s = SignatureSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    result = mutations.save_signature(request.user, vd['kind'], vd['signature'], vd.get('guestId') or None)
    return Response({'ok': True, 'data': result})

save_signature.cls.throttle_scope = 'mutation'


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, CanSubmitActions])
def update_room(request, room_id: str):
    s = RoomUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    result = mutations.update_room(request.user, room_id, s.validated_data)
    return Response({'ok': True, 'data': result})

update_room.cls.throttle_scope = 'mutation'
