from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from dashboard.normalizers import normalize_basket
from dashboard.services.listing import ALL
from dashboard.views.listing import list_response, parse_query, records_of

STATUS_OPTIONS = [ALL, 'Out Of Stock', 'Requested', 'In Progress']


def branch_options(records) -> list:
    """Distinct branch names in collection order."""
    seen = []
    for r in records:
        if r.branch and r.branch not in seen:
            seen.append(r.branch)
    return [ALL] + seen


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_baskets(request):
    query = parse_query(request)
    records = records_of('baskets', normalize_basket)
    return list_response(
        request, 'baskets', records, params=('branch', 'status'), query=query,
        extra={'options': {'branches': branch_options(records), 'statuses': STATUS_OPTIONS}},
    )
