from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from courses.models import Course, Lesson
from courses.serializers import ProgressSerializer
from courses.services.progress_service import course_progress, lesson_progress, record_progress
from lms_backend.utils import get_or_404, parse_bool


@api_view(["GET", "POST", "PUT"])
@permission_classes([IsAuthenticated])
def lesson_progress_view(request, lesson_id):
    """
    GET returns the caller's progress on a lesson; POST/PUT records it.
    Only the fields present in the body are changed.
    """
    lesson = get_or_404(
        Lesson.objects.select_related("chapter__section__course"), "Lesson not found", pk=lesson_id
    )
    if request.method == "GET":
        progress = lesson_progress(request.user, lesson)
        return Response({
            "success": True,
            "message": "Progress retrieved successfully.",
            "data": ProgressSerializer(progress).data if progress else None,
        })

    completed = request.data.get("completed")
    progress = record_progress(
        request.user,
        lesson,
        completed=None if completed is None else parse_bool(completed),
        progress_percentage=request.data.get("progress_percentage", request.data.get("progressPercentage")),
    )
    return Response({
        "success": True,
        "message": "Progress updated successfully.",
        "data": ProgressSerializer(progress).data,
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def course_progress_view(request, course_id):
    course = get_or_404(Course.objects, "Course not found", pk=course_id)
    summary = course_progress(request.user, course)
    summary["progress"] = ProgressSerializer(summary["progress"], many=True).data
    return Response({"success": True, "message": "Course progress retrieved successfully.", "data": summary})
