from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from dashboard.normalizers import normalize_welfare_check
from dashboard.views.listing import list_response, parse_query, records_of


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_welfare_checks(request):
    """Weekly welfare checks; ``dateFrom``/``dateTo`` match overlapping weeks."""
    query = parse_query(request)
    records = records_of('welfare-checks', normalize_welfare_check)
    return list_response(request, 'welfare-checks', records, params=('status',), query=query)
