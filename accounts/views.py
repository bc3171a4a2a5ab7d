import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from courses.services.pagination import paginate_queryset_or_list
from lms_backend.clients import ClientsMixin
from lms_backend.exceptions import ValidationError

from .permissions import allowed
from .policy import Action
from .serializers import (
    BulkEmailSerializer,
    LmsTokenObtainPairSerializer,
    UpdateBatchesSerializer,
    UpdateRoleSerializer,
    UpdateStatusSerializer,
    UserDetailSerializer,
)
from .services import auth_service, user_service

logger = logging.getLogger(__name__)


class LoginView(TokenObtainPairView):
    serializer_class = LmsTokenObtainPairSerializer


class GoogleLoginView(ClientsMixin, APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        user, tokens, created = auth_service.google_login(
            request.data.get("credential") or request.data.get("id_token") or request.data.get("token"),
            self.clients.google_identity,
        )
        return Response({
            "success": True,
            "message": "Account created successfully." if created else "Logged in successfully.",
            "data": {**tokens, "user": UserDetailSerializer(user).data},
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        """
        Blacklist the refresh token. Accepts either 'refresh' or
        'refresh_token' in the body.
        """
        auth_service.logout(request.data.get("refresh") or request.data.get("refresh_token"))
        return Response({"success": True, "message": "Logged out successfully."})


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            "success": True,
            "message": "User retrieved successfully.",
            "data": UserDetailSerializer(request.user).data,
        })


# ----------------- USER ADMINISTRATION -----------------


@api_view(["GET"])
@permission_classes([allowed(Action.USER_MANAGE)])
def user_list_view(request):
    users = user_service.list_users(
        search=request.query_params.get("search"),
        role=request.query_params.get("role"),
        status=request.query_params.get("status"),
        batch=request.query_params.get("batch"),
    )
    return paginate_queryset_or_list(request, users, UserDetailSerializer, message="Users retrieved successfully.")


@api_view(["PUT", "PATCH"])
@permission_classes([allowed(Action.USER_MANAGE)])
def user_role_view(request, user_id):
    serializer = UpdateRoleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = user_service.update_role(
        request.user, user_service.get_user_or_404(user_id), serializer.validated_data["role"]
    )
    return Response({"success": True, "message": "User role updated successfully.", "data": UserDetailSerializer(user).data})


@api_view(["PUT", "PATCH"])
@permission_classes([allowed(Action.USER_MANAGE)])
def user_batches_view(request, user_id):
    serializer = UpdateBatchesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = user_service.update_batches(
        user_service.get_user_or_404(user_id),
        serializer.validated_data["batches"],
        serializer.validated_data["subscriptions"],
    )
    return Response({"success": True, "message": "User batches updated successfully.", "data": UserDetailSerializer(user).data})


@api_view(["PUT", "PATCH"])
@permission_classes([allowed(Action.USER_MANAGE)])
def user_status_view(request, user_id):
    serializer = UpdateStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = user_service.update_status(user_service.get_user_or_404(user_id), serializer.validated_data["status"])
    return Response({"success": True, "message": "User status updated successfully.", "data": UserDetailSerializer(user).data})


@api_view(["DELETE"])
@permission_classes([allowed(Action.USER_DELETE, "Only a Super Admin can delete users")])
def user_delete_view(request, user_id):
    user_service.delete_user(request.user, user_service.get_user_or_404(user_id))
    return Response({"success": True, "message": "User deleted successfully"})


@api_view(["GET"])
@permission_classes([allowed(Action.USER_EXPORT)])
def export_users_view(request):
    export_format = request.query_params.get("format", "csv").lower()
    if export_format != "csv":
        raise ValidationError("Unsupported format")
    users = user_service.list_users(
        search=request.query_params.get("search"),
        role=request.query_params.get("role"),
        status=request.query_params.get("status"),
        batch=request.query_params.get("batch"),
    )
    response = HttpResponse(user_service.export_users_csv(users), content_type="text/csv")
    response["Content-Disposition"] = 'attachment; filename="users.csv"'
    return response


class BulkEmailView(ClientsMixin, APIView):
    permission_classes = [allowed(Action.USER_BULK_EMAIL)]

    def post(self, request):
        serializer = BulkEmailSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError("Missing required fields")
        results = user_service.bulk_email(
            self.clients.mailer,
            serializer.validated_data["subject"],
            serializer.validated_data["body"],
            serializer.validated_data["user_ids"],
        )
        return Response({"success": True, "message": "Emails processed.", "data": results})
