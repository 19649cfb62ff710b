# services/portal-service/src/apps/api/views/safety_views.py
"""
Safety Report Functions
"""

import logging

from shared.common.permissions import IsPortalAdmin

from apps.core.services import SafetyReportService
from ..serializers import SafetyReportSerializer, SafetyReportInputSerializer
from .base import FunctionView

logger = logging.getLogger(__name__)


def serialize_report(report, with_aircraft: bool = False):
    context = {'reporter_names': SafetyReportService.reporter_names([report])}
    if with_aircraft:
        context['aircraft_details'] = SafetyReportService.aircraft_details(report)
    return SafetyReportSerializer(report, context=context).data


class GetAllSafetyReportsView(FunctionView):
    function_name = 'get_all_safety_reports'

    def invoke(self, request, body):
        reports = list(SafetyReportService.list_reports())
        return SafetyReportSerializer(
            reports,
            many=True,
            context={'reporter_names': SafetyReportService.reporter_names(reports)}
        ).data


class GetSafetyReportByIdView(FunctionView):
    function_name = 'get_safety_report_by_id'

    def invoke(self, request, body):
        self.require(body, 'id', message='Report ID is required')
        report = SafetyReportService.get_report(self.parse_id(body['id'], 'id'))
        return serialize_report(report, with_aircraft=True)


class CreateSafetyReportView(FunctionView):
    function_name = 'create_safety_report'

    def invoke(self, request, body):
        report = SafetyReportService.create_report(
            self.validated(SafetyReportInputSerializer, body)
        )
        return serialize_report(report)


class UpdateSafetyReportView(FunctionView):
    """Admin edits and admin review of a report."""

    function_name = 'update_safety_report'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        self.require(body, 'id', message='Report ID is required')
        report_data = self.require_mapping(body, 'reportData', 'Report data is required')
        report = SafetyReportService.update_report(
            self.parse_id(body['id'], 'id'),
            self.validated(SafetyReportInputSerializer, report_data, partial=True)
        )
        return serialize_report(report)


class DeleteSafetyReportView(FunctionView):
    function_name = 'delete_safety_report'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        self.require(body, 'id', message='Report ID is required')
        report_id = self.parse_id(body['id'], 'id')
        SafetyReportService.delete_report(report_id)
        return {'id': str(report_id)}
