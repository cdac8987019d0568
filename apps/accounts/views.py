from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.utils.serializers import MessageSerializer
from apps.utils.throttle import BurstRateThrottle
from .services import AuthService
from .serializers import (
    LoginSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    TokenSerializer,
    UserSerializer,
)


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [BurstRateThrottle]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.register(**serializer.validated_data)
        return Response(TokenSerializer(result).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [BurstRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.authenticate(**serializer.validated_data)
        return Response(TokenSerializer(result).data, status=status.HTTP_200_OK)


class RefreshTokenView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [BurstRateThrottle]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.refresh_token(**serializer.validated_data)
        return Response(TokenSerializer(result).data, status=status.HTTP_200_OK)


class ResetPasswordView(APIView):
    """
    Authenticated users may only reset their own password.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if serializer.validated_data["cpf"] != request.user.cpf:
            raise PermissionDenied("You can only reset your own password.")

        AuthService.reset_password(**serializer.validated_data)
        return Response(
            MessageSerializer({"message": "Password reset successfully"}).data,
            status=status.HTTP_200_OK
        )


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)
