"""
Service user (resident) table and the relocation dialog.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dashboard.normalizers import normalize_service_user
from dashboard.permissions import CanSubmitActions
from dashboard.serializers.actions import RelocateSerializer, RelocationOptionsQuerySerializer
from dashboard.services import mutations
from dashboard.views.listing import list_response, parse_query, records_of


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_service_users(request):
    query = parse_query(request)
    records = records_of('service-users', normalize_service_user)
    return list_response(request, 'service-users', records,
                         params=('branch', 'company', 'status'), query=query)


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanSubmitActions])
def relocation_options(request, guest_id: str):
    """Locations of the resident's branch; with ``locationId`` also its free rooms."""
    q = RelocationOptionsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    choices = mutations.relocation_choices(guest_id, q.validated_data.get('locationId') or None)
    resident = choices['resident']
    return Response({
        'ok': True,
        'data': {
            'guestId': resident.id,
            'branchId': resident.branch_id,
            'currentLocationId': resident.current_location_id,
            'currentRoomId': resident.current_room_id,
            'locations': [l.to_dict() for l in choices['locations']],
            'rooms': [r.to_dict() for r in choices['rooms']],
        },
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanSubmitActions])
def relocate(request, guest_id: str):
    s = RelocateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    mutations.relocate_resident(request.user, guest_id, vd['locationId'], vd['roomId'])
    return Response({'ok': True, 'message': 'Guest relocated successfully.'})

relocate.cls.throttle_scope = 'mutation'
