from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.policy import Action, can
from courses.serializers import CourseSerializer, QuizListSerializer
from lms_backend.exceptions import AuthorizationError
from lms_backend.utils import get_or_404

from . import services
from .models import Batch
from .serializers import BatchSerializer


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def batch_list_view(request):
    if request.method == "POST":
        if not can(request.user, Action.BATCH_MANAGE):
            raise AuthorizationError("Not authorized to create batches")
        batch = services.create_batch(request.user, request.data)
        return Response({
            "success": True,
            "message": "Batch created successfully.",
            "data": BatchSerializer(batch).data,
        }, status=status.HTTP_201_CREATED)

    return Response({
        "success": True,
        "message": "Batches retrieved successfully.",
        "data": BatchSerializer(services.active_batches(), many=True).data,
    })


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def batch_detail_view(request, batch_id):
    batch = get_or_404(Batch.objects.select_related("created_by"), "Batch not found", pk=batch_id)

    if request.method == "GET":
        return Response({"success": True, "message": "Batch retrieved successfully.", "data": BatchSerializer(batch).data})

    if request.method == "DELETE":
        if not can(request.user, Action.BATCH_DELETE, batch):
            raise AuthorizationError("Only a Super Admin can delete batches")
        if services.delete_batch(batch):
            return Response({"success": True, "message": "Batch deleted successfully."})
        return Response({"success": True, "message": "Batch has assigned users and was deactivated instead."})

    if not can(request.user, Action.BATCH_MANAGE, batch):
        raise AuthorizationError("Not authorized to update batches")
    batch = services.update_batch(batch, request.data)
    return Response({"success": True, "message": "Batch updated successfully.", "data": BatchSerializer(batch).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def batch_courses_view(request, batch_id):
    batch = get_or_404(Batch.objects, "Batch not found", pk=batch_id)
    return Response({
        "success": True,
        "message": "Batch courses retrieved successfully.",
        "data": CourseSerializer(services.batch_courses(batch), many=True).data,
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def batch_quizzes_view(request, batch_id):
    batch = get_or_404(Batch.objects, "Batch not found", pk=batch_id)
    return Response({
        "success": True,
        "message": "Batch quizzes retrieved successfully.",
        "data": QuizListSerializer(services.batch_quizzes(batch), many=True).data,
    })
