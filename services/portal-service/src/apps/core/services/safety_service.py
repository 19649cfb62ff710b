# services/portal-service/src/apps/core/services/safety_service.py
"""
Safety Report Service
"""

import uuid
import logging
from typing import Dict, Any, List, Optional

from django.db import transaction

from ..models import Aircraft, SafetyReport
from .exceptions import SafetyReportNotFoundError
from .pilot_service import PilotService

logger = logging.getLogger(__name__)


class SafetyReportService:
    """
    Service class for safety reports and their admin review.
    """

    @classmethod
    def list_reports(cls):
        return SafetyReport.objects.all().order_by('-report_date', '-created_at')

    @classmethod
    def get_report(cls, report_id: uuid.UUID) -> SafetyReport:
        try:
            return SafetyReport.objects.get(id=report_id)
        except (SafetyReport.DoesNotExist, ValueError):
            raise SafetyReportNotFoundError(report_id)

    @classmethod
    def reporter_names(cls, reports: List[SafetyReport]) -> Dict[str, str]:
        """
        Map report id to the display name of its reporter.

        The free-text ``reported_by`` wins; otherwise the linked pilot's
        name; otherwise ``'Unknown'``.
        """
        pilot_names = PilotService.names_for(
            report.reporter_id for report in reports if not report.reported_by
        )
        names = {}
        for report in reports:
            names[str(report.id)] = (
                report.reported_by
                or pilot_names.get(str(report.reporter_id))
                or 'Unknown'
            )
        return names

    @classmethod
    def aircraft_details(cls, report: SafetyReport) -> Optional[Dict[str, Any]]:
        if not report.aircraft_id:
            return None
        aircraft = Aircraft.objects.filter(id=report.aircraft_id).values(
            'tail_number', 'make', 'model'
        ).first()
        return aircraft

    @classmethod
    @transaction.atomic
    def create_report(cls, report_data: Dict[str, Any]) -> SafetyReport:
        """
        Create a safety report.

        The reporter is resolved by name; a name with no pilot row gets a
        new pilot so the report stays linked.
        """
        reported_by = report_data.pop('reported_by', None) or 'Anonymous'
        reporter = PilotService.find_or_create_by_name(reported_by)

        report = SafetyReport.objects.create(
            reported_by=reported_by,
            reporter_id=reporter.id if reporter else None,
            **report_data
        )

        logger.info(
            f"Safety report {report.id} created",
            extra={'severity': report.severity, 'category': report.category}
        )
        return report

    @classmethod
    @transaction.atomic
    def update_report(cls, report_id: uuid.UUID, report_data: Dict[str, Any]) -> SafetyReport:
        report = cls.get_report(report_id)

        for field, value in report_data.items():
            setattr(report, field, value)
        report.save()

        logger.info(f"Safety report {report.id} updated: status={report.status}")
        return report

    @classmethod
    @transaction.atomic
    def delete_report(cls, report_id: uuid.UUID) -> None:
        report = cls.get_report(report_id)
        report.delete()
        logger.info(f"Safety report {report_id} deleted")
