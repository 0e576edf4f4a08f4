# orders/views/orders.py

"""
PATH: orders/views/orders.py

ORDER ENDPOINTS

POST  /api/orders/                place an order (customer, company)
GET   /api/orders/                all orders, ?status= filter (admin)
GET   /api/orders/mine/           the caller's orders
GET   /api/orders/seller/         orders for the caller's farm (farmer)
GET   /api/orders/<id>/           owner, admin, or the supplying farmer
PATCH /api/orders/<id>/status/    admin or the supplying farmer

Views stay thin: validation and all writes live in orders.services.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.envelope import success_response
from backend.exceptions import AuthorizationError, NotFoundError
from orders.models import Order
from orders.serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)
from orders.services.order_lifecycle import transition_order
from orders.services.order_service import create_order
from permissions.capabilities import (
    CAP_ORDERS_FULFIL,
    CAP_ORDERS_PLACE,
    CAP_ORDERS_VIEW_ALL,
)
from permissions.roles import HasCapability, effective_capabilities_for


def _orders_queryset():
    return Order.objects.select_related("user", "farmer").prefetch_related("items")


def _farmer_id_for(user):
    profile = getattr(user, "farmer_profile", None)
    return getattr(profile, "id", None)


def _get_order(pk) -> Order:
    order = _orders_queryset().filter(pk=pk).first()
    if order is None:
        raise NotFoundError("Order not found.", order_id=str(pk))
    return order


class OrderListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    # read by HasCapability
    required_capability = None

    def get_permissions(self):
        # reset per request
        self.required_capability = None

        if self.request.method == "POST":
            self.required_capability = CAP_ORDERS_PLACE
            return [IsAuthenticated(), HasCapability()]

        self.required_capability = CAP_ORDERS_VIEW_ALL
        return [IsAuthenticated(), HasCapability()]

    @extend_schema(
        parameters=[OpenApiParameter("status", str, description="Filter by status")],
        responses={200: OrderSerializer(many=True)},
    )
    def get(self, request):
        qs = _orders_queryset()

        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        return success_response(OrderSerializer(qs, many=True).data)

    @extend_schema(
        request=OrderCreateSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(description="Validation or coupon error"),
            403: OpenApiResponse(description="Account type cannot place orders"),
            409: OpenApiResponse(description="Insufficient stock"),
        },
    )
    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = create_order(user=request.user, **serializer.to_service_kwargs())

        return success_response(
            OrderSerializer(_get_order(order.pk)).data,
            http_status=status.HTTP_201_CREATED,
        )


class MyOrdersView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OrderSerializer(many=True)})
    def get(self, request):
        qs = _orders_queryset().filter(user=request.user)
        return success_response(OrderSerializer(qs, many=True).data)


class SellerOrdersView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_FULFIL

    @extend_schema(responses={200: OrderSerializer(many=True)})
    def get(self, request):
        farmer_id = _farmer_id_for(request.user)
        if farmer_id is None:
            raise NotFoundError("No farm profile is linked to this account.")

        qs = _orders_queryset().filter(farmer_id=farmer_id)

        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        return success_response(OrderSerializer(qs, many=True).data)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OrderSerializer})
    def get(self, request, pk):
        order = _get_order(pk)
        user = request.user

        allowed = (
            order.user_id == user.id
            or CAP_ORDERS_VIEW_ALL in effective_capabilities_for(user)
            or (order.farmer_id is not None and order.farmer_id == _farmer_id_for(user))
        )
        if not allowed:
            raise AuthorizationError("You are not allowed to view this order.")

        return success_response(OrderSerializer(order).data)


class OrderStatusView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_FULFIL

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderSerializer,
            409: OpenApiResponse(description="Transition not allowed"),
        },
    )
    def patch(self, request, pk):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = _get_order(pk)
        user = request.user

        is_platform_admin = CAP_ORDERS_VIEW_ALL in effective_capabilities_for(user)
        if not is_platform_admin and order.farmer_id != _farmer_id_for(user):
            raise AuthorizationError("You are not allowed to update this order.")

        order = transition_order(
            order=order,
            target_status=serializer.validated_data["status"],
            actor=user,
        )
        return success_response(OrderSerializer(_get_order(order.pk)).data)
