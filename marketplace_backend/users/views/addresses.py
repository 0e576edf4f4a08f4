"""
ADDRESS BOOK VIEWS

GET  /api/auth/addresses/   list the caller's saved delivery addresses
POST /api/auth/addresses/   save a new one (is_default=True demotes the others)
"""

from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.envelope import success_response
from users.models import DeliveryAddress
from users.serializers import DeliveryAddressSerializer


class DeliveryAddressListView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DeliveryAddressSerializer

    @extend_schema(responses={200: DeliveryAddressSerializer(many=True)})
    def get(self, request):
        qs = DeliveryAddress.objects.filter(user=request.user)
        return success_response(DeliveryAddressSerializer(qs, many=True).data)

    @extend_schema(
        request=DeliveryAddressSerializer,
        responses={201: DeliveryAddressSerializer},
    )
    @transaction.atomic
    def post(self, request):
        serializer = DeliveryAddressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        is_first = not DeliveryAddress.objects.filter(user=request.user).exists()
        make_default = serializer.validated_data.get("is_default", False) or is_first

        if make_default:
            DeliveryAddress.objects.filter(user=request.user, is_default=True).update(
                is_default=False
            )

        address = serializer.save(user=request.user, is_default=make_default)
        return success_response(
            DeliveryAddressSerializer(address).data,
            http_status=status.HTTP_201_CREATED,
        )
