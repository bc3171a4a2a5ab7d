from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.policy import Action, can
from courses.serializers import (
    QuestionSerializer,
    QuizAttemptSerializer,
    QuizBatchSerializer,
    QuizListSerializer,
    QuizSerializer,
    StudentQuizSerializer,
)
from courses.services import quiz_service
from courses.services.calendar_service import quiz_schedule
from courses.services.pagination import paginate_queryset_or_list
from lms_backend.exceptions import AuthorizationError


def _quiz_data(user, quiz):
    # Correct answers are only shown to users who can edit the quiz
    serializer_class = QuizSerializer if can(user, Action.QUIZ_UPDATE, quiz) else StudentQuizSerializer
    return serializer_class(quiz).data


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def quiz_list_view(request):
    if request.method == "POST":
        if not can(request.user, Action.QUIZ_CREATE):
            raise AuthorizationError("Not authorized to create quizzes")
        quiz = quiz_service.create_quiz(request.user, request.data)
        return Response({
            "success": True,
            "message": "Quiz created successfully.",
            "data": QuizSerializer(quiz).data,
        }, status=status.HTTP_201_CREATED)

    quizzes = quiz_service.list_quizzes(search=request.query_params.get("search"))
    return paginate_queryset_or_list(request, quizzes, QuizListSerializer, message="Quizzes retrieved successfully.")


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def quiz_detail_view(request, quiz_id):
    quiz = quiz_service.get_quiz_or_404(quiz_id)

    if request.method == "GET":
        quiz_service.require_quiz_access(request.user, quiz)
        return Response({"success": True, "message": "Quiz retrieved successfully.", "data": _quiz_data(request.user, quiz)})

    if request.method == "DELETE":
        if not can(request.user, Action.QUIZ_DELETE, quiz):
            raise AuthorizationError("Not authorized to delete this quiz")
        quiz.delete()
        return Response({"success": True, "message": "Quiz deleted successfully."})

    if not can(request.user, Action.QUIZ_UPDATE, quiz):
        raise AuthorizationError("Not authorized to update this quiz")
    quiz = quiz_service.update_quiz(quiz, request.data)
    return Response({"success": True, "message": "Quiz updated successfully.", "data": QuizSerializer(quiz).data})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def add_question_view(request, quiz_id):
    quiz = quiz_service.get_quiz_or_404(quiz_id)
    if not can(request.user, Action.QUIZ_UPDATE, quiz):
        raise AuthorizationError("Not authorized to add questions to this quiz")
    question = quiz_service.add_question(quiz, request.data)
    return Response({
        "success": True,
        "message": "Question added successfully.",
        "data": QuestionSerializer(question).data,
    }, status=status.HTTP_201_CREATED)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def quiz_attempts_view(request, quiz_id):
    """
    POST submits an attempt for the caller; GET lists every attempt on the
    quiz (managers only).
    """
    quiz = quiz_service.get_quiz_or_404(quiz_id)

    if request.method == "GET":
        if not can(request.user, Action.QUIZ_VIEW_ATTEMPTS, quiz):
            raise AuthorizationError("Not authorized to view attempts for this quiz")
        return paginate_queryset_or_list(
            request, quiz_service.quiz_attempts(quiz), QuizAttemptSerializer,
            message="Quiz attempts retrieved successfully.",
        )

    result = quiz_service.submit_attempt(
        request.user,
        quiz,
        request.data.get("answers"),
        time_taken=request.data.get("time_taken", request.data.get("timeTaken", 0)),
        lesson_id=request.data.get("lesson_id", request.data.get("lessonId")),
    )
    result["attempt"] = QuizAttemptSerializer(result["attempt"]).data
    return Response({
        "success": True,
        "message": "Quiz passed." if result["passed"] else "Quiz submitted.",
        "data": result,
    }, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_attempts_view(request, quiz_id):
    quiz = quiz_service.get_quiz_or_404(quiz_id)
    attempts = quiz_service.user_attempts(request.user, quiz)
    return Response({
        "success": True,
        "message": "Attempts retrieved successfully.",
        "data": QuizAttemptSerializer(attempts, many=True).data,
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def attempt_report_view(request, quiz_id):
    quiz = quiz_service.get_quiz_or_404(quiz_id)
    report = quiz_service.attempt_report(request.user, quiz)
    if report["latest_attempt"] is not None:
        report["latest_attempt"] = QuizAttemptSerializer(report["latest_attempt"]).data
    return Response({"success": True, "message": "Quiz report retrieved successfully.", "data": report})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def attempt_detail_view(request, attempt_id):
    attempt = quiz_service.get_attempt_or_404(attempt_id)
    if attempt.user_id != request.user.pk and not can(request.user, Action.QUIZ_VIEW_ATTEMPTS, attempt.quiz):
        raise AuthorizationError("Not authorized to view this attempt")
    return Response({
        "success": True,
        "message": "Attempt retrieved successfully.",
        "data": {
            **QuizAttemptSerializer(attempt).data,
            "questions": QuestionSerializer(attempt.quiz.questions.all(), many=True).data,
        },
    })


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def quiz_batches_view(request, quiz_id):
    quiz = quiz_service.get_quiz_or_404(quiz_id)
    if request.method == "POST":
        if not can(request.user, Action.QUIZ_ASSIGN_BATCHES, quiz):
            raise AuthorizationError("Not authorized to assign quizzes to batches")
        options = request.data.get("settings") or request.data
        assignments = quiz_service.assign_quiz_to_batches(
            quiz,
            request.data.get("batchIds", request.data.get("batch_ids")),
            {
                "start_date": options.get("start_date", options.get("startDate")),
                "end_date": options.get("end_date", options.get("endDate")),
                "attempts": options.get("attempts"),
                "custom_instructions": options.get("custom_instructions", options.get("customInstructions")),
            },
            request.user,
        )
        return Response({
            "success": True,
            "message": "Quiz assigned to batches successfully.",
            "data": QuizBatchSerializer(assignments, many=True).data,
        })
    return Response({
        "success": True,
        "message": "Quiz batches retrieved successfully.",
        "data": QuizBatchSerializer(quiz_service.quiz_batches(quiz), many=True).data,
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def student_quizzes_view(request):
    quizzes = quiz_service.student_quizzes(request.user)
    return Response({
        "success": True,
        "message": "Quizzes retrieved successfully.",
        "data": StudentQuizSerializer(quizzes, many=True).data,
    })


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def quiz_schedule_view(request, quiz_id):
    quiz = quiz_service.get_quiz_or_404(quiz_id)
    if request.method == "POST":
        if not can(request.user, Action.QUIZ_SCHEDULE, quiz):
            raise AuthorizationError("Not authorized to schedule quizzes")
        quiz = quiz_service.schedule_quiz(
            quiz,
            request.data.get("start_date", request.data.get("startDate")),
            request.data.get("end_date", request.data.get("endDate")),
        )
    return Response({"success": True, "message": "Quiz schedule retrieved successfully.", "data": quiz_schedule(quiz)})
