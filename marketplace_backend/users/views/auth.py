from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from backend.envelope import success_response
from users.serializers import RegisterSerializer, UserSerializer


class RegisterAnonThrottle(AnonRateThrottle):
    scope = "public_write"


class RegisterView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [RegisterAnonThrottle]
    serializer_class = RegisterSerializer

    @extend_schema(
        request=RegisterSerializer,
        responses={201: UserSerializer},
        description="Register a customer or company buyer account",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return success_response(
            UserSerializer(user).data,
            http_status=status.HTTP_201_CREATED,
        )
