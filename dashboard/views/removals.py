"""
In-transit transfer requests and other removal requests.

Approving a transfer needs a target branch and room chosen first
through the selection endpoint; approving or rejecting anything else is
a single call.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dashboard.normalizers import normalize_removal
from dashboard.permissions import IsManager
from dashboard.serializers.actions import TransferSelectionSerializer
from dashboard.services import mutations
from dashboard.services.selection import clear_selection, load_selection, select_transfer
from dashboard.views.listing import list_response, parse_query, records_of

PARAMS = ('status', 'branch')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_in_transit(request):
    query = parse_query(request)
    records = records_of('in-transit', normalize_removal)
    return list_response(request, 'in-transit', records, params=PARAMS, query=query)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_other_removals(request):
    query = parse_query(request)
    records = records_of('other-removals', normalize_removal)
    return list_response(request, 'other-removals', records, params=PARAMS, query=query)


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsManager])
def transfer_selection(request):
    """GET the current choice, POST the next step, DELETE to cancel."""
    if request.method == 'GET':
        return Response({'ok': True, 'data': load_selection(request.user).to_dict()})
    if request.method == 'DELETE':
        clear_selection(request.user)
        return Response({'ok': True, 'data': None}, status=status.HTTP_200_OK)

    s = TransferSelectionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        selection, choices = select_transfer(request.user, vd['requestId'],
                                             branch_id=vd.get('branchId') or None,
                                             room_id=vd.get('roomId') or None)
    except LookupError as exc:
        raise NotFound(str(exc)) from exc
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    return Response({
        'ok': True,
        'data': selection.to_dict(),
        'options': {
            'branches': [b.to_dict() for b in choices['branches']],
            'rooms': [r.to_dict() for r in choices['rooms']],
        },
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManager])
def approve_transfer(request, request_id: str):
    mutations.approve_transfer(request.user, request_id)
    return Response({'ok': True, 'message': 'Transfer approved.'})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManager])
def reject_transfer(request, request_id: str):
    mutations.reject_transfer(request.user, request_id)
    return Response({'ok': True, 'message': 'Transfer rejected.'})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManager])
def approve_other_removal(request, request_id: str):
    mutations.approve_other_removal(request.user, request_id)
    return Response({'ok': True, 'message': 'Removal request approved.'})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManager])
def reject_other_removal(request, request_id: str):
    mutations.reject_other_removal(request.user, request_id)
    return Response({'ok': True, 'message': 'Removal request rejected.'})


for _view in (transfer_selection, approve_transfer, reject_transfer,
              approve_other_removal, reject_other_removal):
    _view.cls.throttle_scope = 'mutation'
