# orders/views/stats.py

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.envelope import success_response
from orders.services.stats import order_stats
from permissions.capabilities import CAP_REPORTS_VIEW_ORDERS
from permissions.roles import HasCapability


class OrderStatsView(APIView):
    """
    Admin dashboard order statistics.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW_ORDERS

    @extend_schema(responses={200: OpenApiResponse(description="Order statistics")})
    def get(self, request):
        return success_response(order_stats())
