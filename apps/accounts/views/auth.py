import logging
from datetime import timedelta
from typing import Any, Dict

from django.conf import settings
from django.contrib.auth import authenticate
from django.core.cache import cache
from django.utils import timezone
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.exceptions import (
    AccountLocked,
    InvalidCredentials,
    InvalidRefreshToken,
)
from apps.accounts.models import User
from apps.accounts.serializers import (
    LoginSerializer,
    RegisterSerializer,
    TokenResponseSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

MAX_FAILED_ATTEMPTS = 5


class RefreshSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


def get_tokens_for_user(user: User) -> Dict[str, Any]:
    """
    Generate JWT tokens for user with custom claims
    """
    refresh = RefreshToken.for_user(user)

    refresh["username"] = user.username
    refresh["role"] = user.role

    lifetime = settings.SIMPLE_JWT.get("ACCESS_TOKEN_LIFETIME", timedelta(hours=1))

    return {
        "access_token": str(refresh.access_token),
        "refresh_token": str(refresh),
        "expires_at": timezone.now() + lifetime,
        "token_type": "Bearer",
    }


@extend_schema_view(
    post=extend_schema(
        summary="User Login",
        description="Authenticate with username or email and return JWT tokens",
        request=LoginSerializer,
        responses={200: TokenResponseSerializer},
        tags=["Authentication"],
    )
)
class LoginView(APIView):
    """
    Login with a short lockout after repeated failures.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get_lockout_key(self, identifier: str) -> str:
        return f"lockout:{identifier}"

    def get_attempt_key(self, identifier: str) -> str:
        return f"attempts:{identifier}"

    def increment_failed_attempts(self, identifier: str) -> int:
        key = self.get_attempt_key(identifier)
        attempts = cache.get(key, 0) + 1
        cache.set(key, attempts, 900)  # 15 minutes

        if attempts >= MAX_FAILED_ATTEMPTS:
            cache.set(self.get_lockout_key(identifier), True, 1800)

        return attempts

    def clear_failed_attempts(self, identifier: str) -> None:
        cache.delete(self.get_attempt_key(identifier))
        cache.delete(self.get_lockout_key(identifier))

    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        identifier = serializer.validated_data["username"]
        password = serializer.validated_data["password"]

        if cache.get(self.get_lockout_key(identifier), False):
            logger.warning(f"Login refused for locked account {identifier}")
            raise AccountLocked()

        user = authenticate(request, username=identifier, password=password)

        if user is None:
            # Try with email if username failed
            user_obj = User.objects.filter(email=identifier.lower()).first()
            if user_obj is not None:
                user = authenticate(
                    request, username=user_obj.username, password=password
                )

        if user is None:
            attempts = self.increment_failed_attempts(identifier)
            logger.info(f"Failed login for {identifier} ({attempts} attempts)")
            raise InvalidCredentials()

        self.clear_failed_attempts(identifier)
        logger.info(f"User {user.username} logged in")

        return Response(
            {"user": UserSerializer(user).data, **get_tokens_for_user(user)},
            status=status.HTTP_200_OK,
        )


@extend_schema_view(
    post=extend_schema(
        summary="Sign Up",
        description="Create a student account",
        request=RegisterSerializer,
        responses={201: UserSerializer},
        tags=["Authentication"],
    )
)
class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"New account created: {user.username}")

        return Response(
            {"user": UserSerializer(user).data, **get_tokens_for_user(user)},
            status=status.HTTP_201_CREATED,
        )


class MeView(APIView):
    """
    Get current user information
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: UserSerializer}, tags=["Authentication"])
    def get(self, request: Request) -> Response:
        serializer = UserSerializer(request.user, context={"request": request})
        return Response(serializer.data, status=status.HTTP_200_OK)


@extend_schema_view(
    post=extend_schema(
        summary="Refresh Token",
        description="Exchange a refresh token for a fresh token pair",
        request=RefreshSerializer,
        responses={200: TokenResponseSerializer},
        tags=["Authentication"],
    )
)
class RefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        serializer = RefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            token = RefreshToken(serializer.validated_data["refresh_token"])
            user = User.objects.get(id=token.payload.get("user_id"), is_active=True)
        except (TokenError, User.DoesNotExist):
            raise InvalidRefreshToken()

        return Response(get_tokens_for_user(user), status=status.HTTP_200_OK)
