from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import allowed
from accounts.policy import Action, can
from batches.services import assign_batches_to_course
from courses.models import Course
from courses.serializers import CourseSerializer, EnrollmentSerializer
from courses.services import course_service
from courses.services.enrollment_service import enroll, user_enrollments
from courses.services.pagination import paginate_queryset_or_list
from lms_backend.clients import ClientsMixin
from lms_backend.exceptions import AuthorizationError, NotFoundError
from lms_backend.utils import get_or_404
from payments.services import checkout_details


def _visible_course(user, course_id) -> Course:
    course = get_or_404(Course.objects.select_related("created_by"), "Course not found", pk=course_id)
    if not course.is_published and not can(user, Action.COURSE_VIEW_UNPUBLISHED, course):
        raise NotFoundError("Course not found")
    return course


class CourseListCreateView(ClientsMixin, APIView):

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [allowed(Action.COURSE_CREATE)()]

    def get(self, request):
        courses = course_service.list_courses(
            request.user,
            status=request.query_params.get("status"),
            search=request.query_params.get("search"),
        )
        return paginate_queryset_or_list(
            request, courses, CourseSerializer, message="Courses retrieved successfully."
        )

    def post(self, request):
        course = course_service.create_course(
            request.user, request.data, self.clients.storage, thumbnail=request.FILES.get("thumbnail")
        )
        return Response({
            "success": True,
            "message": "Course created successfully.",
            "data": CourseSerializer(course).data,
        }, status=status.HTTP_201_CREATED)


class CourseDetailView(ClientsMixin, APIView):

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, course_id):
        course = _visible_course(request.user, course_id)
        data = CourseSerializer(course).data
        data.update(course_service.course_detail(course, request.user))
        return Response({"success": True, "message": "Course retrieved successfully.", "data": data})

    def put(self, request, course_id):
        course = get_or_404(Course.objects, "Course not found", pk=course_id)
        if not can(request.user, Action.COURSE_UPDATE, course):
            raise AuthorizationError("Not authorized to update this course")
        course = course_service.update_course(
            course, request.data, self.clients.storage, thumbnail=request.FILES.get("thumbnail")
        )
        return Response({
            "success": True,
            "message": "Course updated successfully.",
            "data": CourseSerializer(course).data,
        })

    patch = put

    def delete(self, request, course_id):
        course = get_or_404(Course.objects, "Course not found", pk=course_id)
        if not can(request.user, Action.COURSE_DELETE, course):
            raise AuthorizationError("Not authorized to delete this course")
        course_service.delete_course(course, self.clients.storage)
        return Response({"success": True, "message": "Course deleted successfully."})


class EnrollView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, course_id):
        """
        Enroll the authenticated user, or open a payment order when the
        course has to be bought first.
        """
        course = _visible_course(request.user, course_id)
        outcome = enroll(request.user, course, gateway=self.clients.payments, mailer=self.clients.mailer)
        if outcome.requires_payment:
            return Response({
                "success": True,
                "message": "Payment required to complete enrollment.",
                "data": {"requires_payment": True, **checkout_details(outcome.transaction)},
            }, status=status.HTTP_201_CREATED)
        return Response({
            "success": True,
            "message": "Enrolled successfully.",
            "data": {"requires_payment": False, "enrollment": EnrollmentSerializer(outcome.enrollment).data},
        }, status=status.HTTP_201_CREATED)


@api_view(["GET", "PUT"])
@permission_classes([IsAuthenticated])
def course_batches_view(request, course_id):
    """
    GET lists the batches assigned to a course; PUT replaces them.
    """
    course = get_or_404(Course.objects, "Course not found", pk=course_id)
    if request.method == "PUT":
        if not can(request.user, Action.COURSE_ASSIGN_BATCHES, course):
            raise AuthorizationError("Not authorized to assign batches")
        batches = assign_batches_to_course(course, request.data.get("batchIds", request.data.get("batch_ids")))
        message = "Batches assigned successfully."
    else:
        batches = [assignment.batch for assignment in course.batch_assignments.select_related("batch")]
        message = "Course batches retrieved successfully."
    return Response({
        "success": True,
        "message": message,
        "data": [{"id": batch.id, "name": batch.name} for batch in batches],
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_enrollments_view(request):
    return paginate_queryset_or_list(
        request,
        user_enrollments(request.user),
        EnrollmentSerializer,
        message="Enrollments retrieved successfully.",
    )
