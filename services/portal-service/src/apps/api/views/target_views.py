# services/portal-service/src/apps/api/views/target_views.py
"""
Route Target Time Functions
"""

from shared.common.permissions import IsPortalAdmin

from apps.core.services import RouteTargetService
from ..serializers import RouteTargetTimeSerializer, RouteTargetTimeWriteSerializer
from .base import FunctionView


class GetRouteTargetTimesView(FunctionView):
    function_name = 'get_route_target_times'

    def invoke(self, request, body):
        return RouteTargetTimeSerializer(RouteTargetService.list_targets(), many=True).data


class UpsertRouteTargetTimeView(FunctionView):
    function_name = 'upsert_route_target_time'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        target_data = self.require_mapping(body, 'p_target_data', 'Target data is required')
        partial = bool(target_data.get('id'))
        target = RouteTargetService.upsert_target(
            self.validated(RouteTargetTimeWriteSerializer, target_data, partial=partial)
        )
        return RouteTargetTimeSerializer(target).data


class DeleteRouteTargetTimeView(FunctionView):
    function_name = 'delete_route_target_time'
    permission_classes = [IsPortalAdmin]

    def invoke(self, request, body):
        self.require(body, 'p_target_id', message='Target ID is required')
        target_id = self.parse_id(body['p_target_id'], 'p_target_id')
        RouteTargetService.delete_target(target_id)
        return {'id': str(target_id)}
