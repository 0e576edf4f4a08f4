from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.envelope import success_response
from permissions.roles import effective_capabilities_for
from users.serializers import UserSerializer


class MeView(APIView):
    """
    Identity snapshot for the storefront: who is logged in and what they may do.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    @extend_schema(
        responses={200: UserSerializer},
        description="Get current authenticated user profile and capabilities",
    )
    def get(self, request):
        user = request.user
        data = dict(UserSerializer(user).data)
        data["is_authenticated"] = True
        data["capabilities"] = sorted(effective_capabilities_for(user))
        data["is_new_user"] = user.is_new_user()
        return success_response(data)
