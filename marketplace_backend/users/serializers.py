from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from permissions.capabilities import ROLE_COMPANY, ROLE_CUSTOMER
from users.models import DeliveryAddress

User = get_user_model()


# ---------------- REGISTER ----------------
class RegisterSerializer(serializers.ModelSerializer):
    """
    Self-service registration for buyers only.
    Farmer / company onboarding runs through its own approval workflow.
    """

    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    role = serializers.ChoiceField(
        choices=[ROLE_CUSTOMER, ROLE_COMPANY],
        required=False,
        default=ROLE_CUSTOMER,
    )

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "first_name",
            "last_name",
            "phone",
            "role",
        ]

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            first_name=validated_data.get("first_name", ""),
            last_name=validated_data.get("last_name", ""),
            phone=validated_data.get("phone", ""),
            role=validated_data.get("role", ROLE_CUSTOMER),
        )


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone",
            "role",
            "created_at",
        ]
        read_only_fields = fields


# ---------------- ADDRESS BOOK ----------------
class DeliveryAddressSerializer(serializers.ModelSerializer):
    missing_fields = serializers.SerializerMethodField()

    class Meta:
        model = DeliveryAddress
        fields = [
            "id",
            "title",
            "full_name",
            "address",
            "city",
            "district",
            "postal_code",
            "phone",
            "is_default",
            "missing_fields",
            "created_at",
        ]
        read_only_fields = ["id", "missing_fields", "created_at"]

    def get_missing_fields(self, obj) -> list[str]:
        return obj.missing_fields()
