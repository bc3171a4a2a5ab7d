"""
Quizzes, questions and attempt scoring.

Scoring rules:

* single-choice and true/false questions are correct when the submitted
  answer is one of the question's correct answers;
* multiple-choice questions are correct only when the submitted set equals
  the correct set exactly. There is no partial credit;
* unanswered questions earn nothing.

The attempt's score is the earned weight as a percentage of the total weight
of the quiz, and the attempt passes when that percentage reaches the quiz's
passing score.
"""
import logging
from dataclasses import dataclass

from django.db import transaction
from django.db.models import Avg, Count, Max, Q

from accounts.policy import Action, can
from batches.models import Batch
from courses.models import Course, Lesson, Question, Quiz, QuizAttempt, QuizBatch
from lms_backend.exceptions import AuthorizationError, NotFoundError, ValidationError
from lms_backend.utils import parse_datetime_field

from .access_service import require_full_access, resolve_access
from .content_service import clean_order
from .progress_service import upsert_progress

logger = logging.getLogger(__name__)

QUIZ_ACCESS_DENIED = "You need access to a course or batch this quiz belongs to"


@dataclass(frozen=True)
class ScoreResult:
    earned: int
    max_score: int
    correct_count: int
    unanswered_count: int

    @property
    def percentage(self) -> float:
        if not self.max_score:
            return 0.0
        return round(self.earned / self.max_score * 100, 2)


def _key(value) -> str:
    return str(value).strip().lower()


def _is_blank(answer) -> bool:
    return answer is None or answer == "" or (isinstance(answer, (list, tuple, set)) and not answer)


def normalise_answers(answers) -> dict:
    """
    Accept either ``[{"questionId": 1, "answer": "B"}, ...]`` or a mapping of
    question id to answer and return ``{question_id: answer}``.
    """
    if answers in (None, ""):
        return {}
    if isinstance(answers, dict):
        items = answers.items()
    elif isinstance(answers, list):
        items = []
        for entry in answers:
            if not isinstance(entry, dict):
                raise ValidationError("Each answer must be an object with questionId and answer")
            question_id = entry.get("questionId", entry.get("question_id"))
            items.append((question_id, entry.get("answer")))
    else:
        raise ValidationError("Answers must be a list or an object")

    normalised = {}
    for question_id, answer in items:
        try:
            normalised[int(question_id)] = answer
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid question id: {question_id}")
    return normalised


def is_correct(question, answer) -> bool:
    if _is_blank(answer):
        return False
    correct = {_key(value) for value in question.correct_answers}

    if question.question_type == Question.QuestionType.MULTIPLE_CHOICE:
        submitted = answer if isinstance(answer, (list, tuple, set)) else [answer]
        return {_key(value) for value in submitted} == correct

    if isinstance(answer, (list, tuple, set)):
        if len(answer) != 1:
            return False
        answer = next(iter(answer))
    return _key(answer) in correct


def score_answers(questions, answers: dict) -> ScoreResult:
    earned = max_score = correct_count = unanswered = 0
    for question in questions:
        max_score += question.score
        answer = answers.get(question.pk)
        if _is_blank(answer):
            unanswered += 1
        elif is_correct(question, answer):
            earned += question.score
            correct_count += 1
    return ScoreResult(earned=earned, max_score=max_score, correct_count=correct_count, unanswered_count=unanswered)


def require_quiz_access(user, quiz) -> None:
    """
    Users who cannot edit the quiz need full access to a course with a lesson
    that uses it, or membership of an active batch it is assigned to. A quiz
    linked to no lesson and no batch is open to every signed-in user.
    """
    if can(user, Action.QUIZ_UPDATE, quiz):
        return
    courses = list(Course.objects.filter(sections__chapters__lessons__quiz=quiz).distinct())
    assignments = QuizBatch.objects.filter(quiz=quiz)
    if not courses and not assignments.exists():
        return
    if assignments.filter(batch__active=True, batch__members=user).exists():
        return
    if any(resolve_access(user, course).has_full_access for course in courses):
        return
    raise AuthorizationError(QUIZ_ACCESS_DENIED)


def submit_attempt(user, quiz, answers, time_taken=0, lesson_id=None) -> dict:
    """
    Score and store an attempt. When the attempt belongs to a lesson the user
    needs full access to its course, and a pass completes the lesson; without
    a lesson the quiz-level access rules apply.
    """
    lesson = None
    if lesson_id not in (None, ""):
        try:
            lesson = Lesson.objects.select_related("chapter__section__course").get(pk=lesson_id)
        except (Lesson.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Lesson not found")
        if lesson.quiz_id != quiz.pk:
            raise ValidationError("This quiz does not belong to the lesson")
        require_full_access(user, lesson.course, "You need to enroll in this course to attempt this quiz")
    else:
        require_quiz_access(user, quiz)

    try:
        time_taken = max(int(time_taken or 0), 0)
    except (TypeError, ValueError):
        raise ValidationError("time_taken must be a number of seconds")

    normalised = normalise_answers(answers)
    result = score_answers(quiz.questions.all(), normalised)
    passed = result.percentage >= quiz.passing_score

    with transaction.atomic():
        attempt = QuizAttempt.objects.create(
            user=user,
            quiz=quiz,
            lesson=lesson,
            answers={str(question_id): answer for question_id, answer in normalised.items()},
            score=result.percentage,
            earned_points=result.earned,
            max_score=result.max_score,
            correct_count=result.correct_count,
            unanswered_count=result.unanswered_count,
            passed=passed,
            time_taken=time_taken,
        )
        if passed and lesson is not None:
            upsert_progress(user, lesson, completed=True, progress_percentage=100)

    logger.info(
        "Quiz %s attempt %s by user %s: %s%% (%s)", quiz.pk, attempt.pk, user.pk, result.percentage,
        "passed" if passed else "failed",
    )
    return {
        "attempt": attempt,
        "score": result.percentage,
        "earned": result.earned,
        "max_score": result.max_score,
        "passed": passed,
        "passing_score": quiz.passing_score,
    }


# Quiz and question management -------------------------------------------------


def _question_from_data(quiz, data, order) -> Question:
    text = (data.get("question") or "").strip()
    if not text:
        raise ValidationError("Question text is required")
    question_type = data.get("question_type") or data.get("type") or Question.QuestionType.SINGLE_CHOICE
    if question_type not in Question.QuestionType.values:
        raise ValidationError(f"Question type must be one of {', '.join(Question.QuestionType.values)}")
    correct_answers = data.get("correct_answers", data.get("correctAnswers"))
    if correct_answers is not None and not isinstance(correct_answers, list):
        correct_answers = [correct_answers]
    score = data.get("score", data.get("points"))
    try:
        score = 1 if score in (None, "") else int(score)
    except (TypeError, ValueError):
        raise ValidationError("Question score must be a whole number")
    return Question(
        quiz=quiz,
        question=text,
        question_type=question_type,
        options=data.get("options") or [],
        correct_answers=correct_answers or [],
        score=max(score, 0),
        order=clean_order(data.get("order")) or order,
    )


def _apply_quiz_fields(quiz, data):
    if "title" in data:
        quiz.title = (data.get("title") or "").strip()
    if not quiz.title:
        raise ValidationError("Quiz title is required")
    if "description" in data:
        quiz.description = data.get("description") or ""
    for field, label in (("time_limit", "Time limit"), ("passing_score", "Passing score")):
        if field in data and data.get(field) not in (None, ""):
            try:
                setattr(quiz, field, int(data.get(field)))
            except (TypeError, ValueError):
                raise ValidationError(f"{label} must be a whole number")
    if not 0 <= quiz.passing_score <= 100:
        raise ValidationError("Passing score must be between 0 and 100")


def create_quiz(user, data) -> Quiz:
    quiz = Quiz(created_by=user)
    _apply_quiz_fields(quiz, data)
    with transaction.atomic():
        quiz.save()
        for index, question in enumerate(data.get("questions") or [], start=1):
            _question_from_data(quiz, question, index).save()
    logger.info("Quiz %s created by user %s", quiz.pk, user.pk)
    return quiz


def update_quiz(quiz, data) -> Quiz:
    """Update quiz fields; a ``questions`` list replaces every existing question."""
    _apply_quiz_fields(quiz, data)
    with transaction.atomic():
        quiz.save()
        if "questions" in data:
            quiz.questions.all().delete()
            for index, question in enumerate(data.get("questions") or [], start=1):
                _question_from_data(quiz, question, index).save()
    return quiz


def add_question(quiz, data) -> Question:
    question = _question_from_data(quiz, data, quiz.questions.count() + 1)
    question.save()
    return question


def list_quizzes(search=None):
    queryset = Quiz.objects.select_related("created_by").annotate(question_count=Count("questions"))
    if search:
        queryset = queryset.filter(Q(title__icontains=search) | Q(description__icontains=search))
    return queryset


# Attempts -------------------------------------------------------------------


def user_attempts(user, quiz):
    return QuizAttempt.objects.filter(user=user, quiz=quiz).order_by("-submitted_at")


def quiz_attempts(quiz):
    return QuizAttempt.objects.filter(quiz=quiz).select_related("user").order_by("-submitted_at")


def attempt_report(user, quiz) -> dict:
    attempts = user_attempts(user, quiz)
    summary = attempts.aggregate(
        best_score=Max("score"),
        average_score=Avg("score"),
        passed_count=Count("id", filter=Q(passed=True)),
        attempt_count=Count("id"),
    )
    latest = attempts.first()
    return {
        "quiz_id": quiz.pk,
        "title": quiz.title,
        "passing_score": quiz.passing_score,
        "attempt_count": summary["attempt_count"],
        "passed_count": summary["passed_count"],
        "best_score": summary["best_score"] or 0,
        "average_score": round(summary["average_score"] or 0, 2),
        "latest_attempt": latest,
        "has_passed": bool(summary["passed_count"]),
    }


# Batch assignment and schedule ----------------------------------------------


def assign_quiz_to_batches(quiz, batch_ids, options, assigned_by) -> list:
    """
    Create or update the QuizBatch rows for ``batch_ids``; assignments to
    other batches are left alone and unknown ids are skipped.
    """
    if not isinstance(batch_ids, list) or not batch_ids:
        raise ValidationError("batchIds must be a non-empty list")
    start_date = parse_datetime_field(options.get("start_date"), "start_date")
    end_date = parse_datetime_field(options.get("end_date"), "end_date")
    if start_date and end_date and end_date <= start_date:
        raise ValidationError("End date must be after start date")
    attempts = options.get("attempts")
    if attempts not in (None, ""):
        try:
            attempts = int(attempts)
        except (TypeError, ValueError):
            raise ValidationError("attempts must be a whole number")
    else:
        attempts = None

    assignments = []
    with transaction.atomic():
        for batch in Batch.objects.filter(pk__in=batch_ids):
            assignment, _ = QuizBatch.objects.update_or_create(
                quiz=quiz,
                batch=batch,
                defaults={
                    "assigned_by": assigned_by,
                    "start_date": start_date,
                    "end_date": end_date,
                    "attempts": attempts,
                    "custom_instructions": options.get("custom_instructions") or "",
                },
            )
            assignments.append(assignment)
    return assignments


def quiz_batches(quiz):
    return QuizBatch.objects.filter(quiz=quiz).select_related("batch")


def student_quizzes(user):
    """Quizzes assigned to any active batch the user belongs to."""
    return (
        Quiz.objects.filter(batch_assignments__batch__members=user, batch_assignments__batch__active=True)
        .distinct()
        .order_by("-created_at")
    )


def schedule_quiz(quiz, start, end) -> Quiz:
    start_date = parse_datetime_field(start, "start")
    end_date = parse_datetime_field(end, "end")
    if start_date is None or end_date is None:
        raise ValidationError("Start and end dates are required")
    if end_date <= start_date:
        raise ValidationError("End date must be after start date")
    quiz.is_scheduled = True
    quiz.start_date = start_date
    quiz.end_date = end_date
    quiz.save(update_fields=["is_scheduled", "start_date", "end_date", "updated_at"])
    return quiz


def get_quiz_or_404(quiz_id) -> Quiz:
    try:
        return Quiz.objects.get(pk=quiz_id)
    except (Quiz.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Quiz not found")


def get_attempt_or_404(attempt_id) -> QuizAttempt:
    try:
        return QuizAttempt.objects.select_related("quiz", "user").get(pk=attempt_id)
    except (QuizAttempt.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Quiz attempt not found")
