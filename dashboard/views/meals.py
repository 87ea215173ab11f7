"""
Meal tracking table.

The company filter only narrows the branch options; meal rows are
filtered by branch.  A branch that does not belong to the selected
company falls back to ``all``, so switching company clears the branch.
"""
from dataclasses import replace

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from dashboard.normalizers import normalize_company, normalize_meal_marking
from dashboard.services import collections
from dashboard.services.listing import ALL, is_unset
from dashboard.views.listing import list_response, parse_query, records_of

PARAMS = ('company', 'branch')
MEALS = ('breakfast', 'lunch', 'dinner')


def meal_stats(records) -> dict:
    stats = {'residents': len(records)}
    for meal in MEALS:
        stats[meal] = sum(1 for r in records if getattr(r.meals, meal).marked)
    return stats


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_meals(request):
    query = parse_query(request)
    criteria = query.criteria(PARAMS)
    records = records_of('meal-markings', normalize_meal_marking)
    companies = [normalize_company(c) for c in collections.load('companies')]

    company, branch = criteria.categorical['company'], criteria.categorical['branch']
    branches = []
    if not is_unset(company):
        branches = next((c.branches for c in companies if c.id == company), [])
        if not is_unset(branch) and branch not in {b.id for b in branches}:
            criteria = replace(criteria, categorical=dict(criteria.categorical, branch=ALL))

    return list_response(
        request, 'meals', records, query=query, criteria=criteria,
        summarize=lambda visible: {'stats': meal_stats(visible)},
        extra={
            'options': {
                'companies': [{'id': c.id, 'name': c.name} for c in companies],
                'branches': [b.to_dict() for b in branches],
            },
        },
    )
