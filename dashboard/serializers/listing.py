from datetime import datetime, time, timezone

from django.conf import settings
from rest_framework import serializers

from dashboard.services.listing import ALL, Criteria, DateRange

CATEGORY_PARAMS = ('status', 'branch', 'company', 'severity')


class ListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=200, default='')
    status = serializers.CharField(required=False, allow_blank=True, max_length=64, default=ALL)
    branch = serializers.CharField(required=False, allow_blank=True, max_length=64, default=ALL)
    company = serializers.CharField(required=False, allow_blank=True, max_length=64, default=ALL)
    severity = serializers.CharField(required=False, allow_blank=True, max_length=64, default=ALL)
    dateFrom = serializers.DateField(required=False, allow_null=True)
    dateTo = serializers.DateField(required=False, allow_null=True)
    page = serializers.IntegerField(required=False)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)

    def validate_search(self, v):
        return (v or '').strip()

    def validate(self, attrs):
        start, end = attrs.get('dateFrom'), attrs.get('dateTo')
        if start and end and start > end:
            raise serializers.ValidationError({'dateTo': 'End date is before start date.'})
        return attrs

    @property
    def page_size(self) -> int:
        return self.validated_data.get('pageSize') or settings.DASHBOARD_PAGE_SIZE

    def criteria(self, params=CATEGORY_PARAMS) -> Criteria:
        vd = self.validated_data
        start, end = vd.get('dateFrom'), vd.get('dateTo')
        # the "to" day is included up to its last instant
        return Criteria(
            search=vd.get('search') or '',
            categorical={name: vd.get(name) or ALL for name in params},
            date_range=DateRange(
                start=datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None,
                end=datetime.combine(end, time.max, tzinfo=timezone.utc) if end else None,
            ),
        )
