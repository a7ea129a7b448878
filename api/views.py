import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from analysis.normalize import ordered_window, parse_query_date
from .serializers import (
    ErrorResponseSerializer,
    FunnelSnapshotSerializer,
    ReportResponseSerializer,
    SnapshotListResponseSerializer,
)
from .services import reports, snapshots
from .services.dashboard import dashboard_overview

logger = logging.getLogger(__name__)

DASHBOARD_VIEWS = ('cohort', 'heatmap', 'inactive_today', 'weekly_cohort', 'weekly_cohort_detail')

START_DATE = OpenApiParameter('start_date', str, description='Window start, YYYY-MM-DD (swapped with end_date if later)')
END_DATE = OpenApiParameter('end_date', str, description='Window end, YYYY-MM-DD, inclusive')
BASE_DATE = OpenApiParameter('base_date', str, description='Cohort reference day; defaults to today')
TARGET_DATE = OpenApiParameter('target_date', str, description='Day checked for inactivity; defaults to yesterday')
WEEK_KEY = OpenApiParameter('week_key', str, description='Monday of the install week, YYYY-MM-DD')

ERROR_RESPONSES = {400: ErrorResponseSerializer, 500: ErrorResponseSerializer}


def _query_date(request, name):
    return parse_query_date(request.query_params.get(name))


def _query_window(request):
    """Return ``(start, end)``; either may be None. Reversed windows are swapped."""
    start = _query_date(request, 'start_date')
    end = _query_date(request, 'end_date')
    if start is not None and end is not None:
        start, end = ordered_window(start, end)
    return start, end


class ReportAPIView(GenericAPIView):
    """Base for the read-only report endpoints.

    ``parse`` turns query parameters into keyword arguments and raises
    ValueError on bad input (400); ``build`` computes the payload and any
    error it raises is logged and returned as a 500.
    """
    permission_classes = [AllowAny]
    serializer_class = ReportResponseSerializer
    report_name = 'report'

    def parse(self, request):
        return {}

    def build(self, **params):
        raise NotImplementedError

    def get(self, request):
        try:
            params = self.parse(request)
        except ValueError as e:
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        try:
            data = self.build(**params)
        except Exception as e:
            logger.error(f"Error building {self.report_name}: {e}", exc_info=True)
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({'success': True, 'data': data}, status=status.HTTP_200_OK)


class DashboardAPIView(ReportAPIView):
    """Overview funnel, or one of the sub-reports selected with ``view``.

    An unknown or missing ``view`` returns the overview.
    """
    report_name = 'dashboard'

    @extend_schema(
        parameters=[
            OpenApiParameter('view', str, enum=list(DASHBOARD_VIEWS), description='Sub-report; omit for the overview'),
            START_DATE, END_DATE, BASE_DATE, TARGET_DATE, WEEK_KEY,
        ],
        responses={200: ReportResponseSerializer, **ERROR_RESPONSES},
    )
    def get(self, request):
        return super().get(request)

    def parse(self, request):
        view = request.query_params.get('view')
        if view not in DASHBOARD_VIEWS:
            view = None
        params = {'view': view}
        if view == 'cohort':
            params['base_date'] = _query_date(request, 'base_date')
        elif view == 'inactive_today':
            params['target_date'] = _query_date(request, 'target_date')
        elif view == 'weekly_cohort_detail':
            params['week_key'] = _query_date(request, 'week_key')
            if params['week_key'] is None:
                raise ValueError('week_key is required for view=weekly_cohort_detail')
        elif view in (None, 'heatmap'):
            params['start'], params['end'] = _query_window(request)
        return params

    def build(self, view=None, **params):
        if view == 'cohort':
            return reports.monthly_cohort_report(params.get('base_date'))
        if view == 'heatmap':
            return reports.heatmap_report(params.get('start'), params.get('end'))
        if view == 'inactive_today':
            return reports.inactive_today_report(params.get('target_date'))
        if view == 'weekly_cohort':
            return reports.weekly_cohort_report()
        if view == 'weekly_cohort_detail':
            return reports.weekly_cohort_detail_report(params.get('week_key'))
        return dashboard_overview(params.get('start'), params.get('end'))


class MonthlyCohortAPIView(ReportAPIView):
    report_name = 'monthly cohort'

    @extend_schema(parameters=[BASE_DATE], responses={200: ReportResponseSerializer, **ERROR_RESPONSES})
    def get(self, request):
        return super().get(request)

    def parse(self, request):
        return {'base_date': _query_date(request, 'base_date')}

    def build(self, base_date=None):
        return reports.monthly_cohort_report(base_date)


class StoreHeatmapAPIView(ReportAPIView):
    report_name = 'store heatmap'

    @extend_schema(parameters=[START_DATE, END_DATE], responses={200: ReportResponseSerializer, **ERROR_RESPONSES})
    def get(self, request):
        return super().get(request)

    def parse(self, request):
        start, end = _query_window(request)
        return {'start': start, 'end': end}

    def build(self, start=None, end=None):
        return reports.heatmap_report(start, end)


class DailyUsageAPIView(ReportAPIView):
    report_name = 'daily usage'

    @extend_schema(parameters=[START_DATE, END_DATE], responses={200: ReportResponseSerializer, **ERROR_RESPONSES})
    def get(self, request):
        return super().get(request)

    def parse(self, request):
        start, end = _query_window(request)
        return {'start': start, 'end': end}

    def build(self, start=None, end=None):
        return reports.daily_usage_report(start, end)


class SnapshotListAPIView(ReportAPIView):
    """Stored funnel snapshots, filtered by ``scope`` and a date or date window."""
    serializer_class = FunnelSnapshotSerializer
    report_name = 'snapshot list'

    @extend_schema(
        parameters=[
            OpenApiParameter('scope', str, description="'overall' or 'owner:<owner_id>'"),
            OpenApiParameter('date', str, description='Single snapshot day, YYYY-MM-DD'),
            START_DATE, END_DATE,
        ],
        responses={200: SnapshotListResponseSerializer, **ERROR_RESPONSES},
    )
    def get(self, request):
        return super().get(request)

    def parse(self, request):
        day = _query_date(request, 'date')
        if day is not None:
            start = end = day
        else:
            start, end = _query_window(request)
        return {'scope': request.query_params.get('scope') or None, 'start': start, 'end': end}

    def build(self, scope=None, start=None, end=None):
        qs = snapshots.list_snapshots(scope, start, end)
        return self.get_serializer(qs, many=True).data
