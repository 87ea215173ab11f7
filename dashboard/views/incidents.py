from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dashboard.normalizers import normalize_incident
from dashboard.permissions import CanSubmitActions
from dashboard.serializers.actions import ResolveIncidentSerializer
from dashboard.services import mutations
from dashboard.views.listing import list_response, parse_query, records_of


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_incidents(request):
    query = parse_query(request)
    records = records_of('incidents', normalize_incident)
    return list_response(request, 'incidents', records,
                         params=('status', 'severity', 'branch'), query=query)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, CanSubmitActions])
def resolve_incident(request, incident_id: str):
    s = ResolveIncidentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    mutations.resolve_incident(request.user, incident_id, vd['status'], vd.get('resolutionNotes'))
    return Response({'ok': True, 'id': incident_id, 'status': vd['status']})

resolve_incident.cls.throttle_scope = 'mutation'
