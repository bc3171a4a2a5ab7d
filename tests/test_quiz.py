import pytest
from django.core.exceptions import ValidationError as DjangoValidationError

from courses.models import Enrollment, ProgressTracking, Question, QuizAttempt
from courses.services import quiz_service
from lms_backend.exceptions import AuthorizationError, ValidationError

MULTIPLE = Question.QuestionType.MULTIPLE_CHOICE


@pytest.mark.parametrize(
    "answer, earned",
    [
        (["A"], 0),
        (["A", "C"], 3),
        (["C", "A"], 3),
        (["A", "B", "C"], 0),
    ],
)
def test_multiple_choice_needs_the_exact_set(student, quiz, add_question, answer, earned):
    question = add_question(["A", "C"], question_type=MULTIPLE, score=3)
    result = quiz_service.submit_attempt(student, quiz, {question.pk: answer})
    assert result["earned"] == earned
    assert result["max_score"] == 3


def test_single_choice_worth_two_points(student, quiz, add_question):
    question = add_question(["B"], score=2)

    result = quiz_service.submit_attempt(student, quiz, [{"questionId": question.pk, "answer": "B"}])

    assert result["earned"] == 2
    assert result["max_score"] == 2
    assert result["score"] == 100
    assert result["passed"] is True


def test_unanswered_questions_score_zero(student, quiz, add_question):
    add_question(["A"])
    add_question(["B"], score=2)

    result = quiz_service.submit_attempt(student, quiz, {})

    assert result["earned"] == 0
    assert result["max_score"] == 3
    assert result["attempt"].unanswered_count == 2
    assert result["passed"] is False


def test_percentage_is_zero_for_an_empty_quiz(student, quiz):
    result = quiz_service.submit_attempt(student, quiz, [])
    assert result["score"] == 0
    assert result["max_score"] == 0


def test_answers_compare_case_insensitively(student, quiz, add_question):
    question = add_question(["True"], question_type=Question.QuestionType.TRUE_FALSE, options=("True", "False"))
    assert quiz_service.submit_attempt(student, quiz, {question.pk: "true"})["earned"] == 1


def test_malformed_answers_are_rejected(student, quiz):
    with pytest.raises(ValidationError):
        quiz_service.submit_attempt(student, quiz, "B")
    with pytest.raises(ValidationError):
        quiz_service.submit_attempt(student, quiz, {"not-a-number": "B"})


def test_single_choice_questions_take_one_answer(quiz):
    with pytest.raises(DjangoValidationError):
        Question.objects.create(quiz=quiz, question="Pick one", question_type="single-choice", correct_answers=["A", "B"])


def test_attempts_are_immutable(student, quiz, add_question):
    add_question(["A"])
    attempt = quiz_service.submit_attempt(student, quiz, {})["attempt"]
    attempt.score = 100
    with pytest.raises(DjangoValidationError):
        attempt.save()


def test_lesson_quiz_requires_course_access(student, quiz, lesson, add_question):
    lesson.quiz = quiz
    lesson.save()
    add_question(["A"])

    with pytest.raises(AuthorizationError):
        quiz_service.submit_attempt(student, quiz, {}, lesson_id=lesson.pk)


def test_course_quiz_needs_access_without_a_lesson_id(student, quiz, lesson, add_question):
    lesson.quiz = quiz
    lesson.save()
    question = add_question(["A"])

    with pytest.raises(AuthorizationError):
        quiz_service.submit_attempt(student, quiz, {question.pk: "A"})
    assert not QuizAttempt.objects.exists()

    Enrollment.objects.create(user=student, course=lesson.course, enrollment_type=Enrollment.EnrollmentType.FREE)
    assert quiz_service.submit_attempt(student, quiz, {question.pk: "A"})["passed"]


def test_batch_quiz_is_open_to_batch_members_only(student, make_user, admin_user, quiz, make_batch):
    batch = make_batch(members=[student])
    quiz_service.assign_quiz_to_batches(quiz, [batch.pk], {}, admin_user)
    outsider = make_user()

    quiz_service.require_quiz_access(student, quiz)
    with pytest.raises(AuthorizationError):
        quiz_service.require_quiz_access(outsider, quiz)


def test_quiz_creator_needs_no_course_access(mentor, quiz, lesson):
    lesson.quiz = quiz
    lesson.save()
    quiz_service.require_quiz_access(mentor, quiz)


def test_question_weight_may_be_zero(quiz):
    question = quiz_service.add_question(quiz, {"question": "Warm-up", "correct_answers": ["A"], "score": 0})
    assert question.score == 0


def test_question_order_must_be_a_number(quiz):
    with pytest.raises(ValidationError):
        quiz_service.add_question(quiz, {"question": "Q", "correct_answers": ["A"], "order": "first"})


def test_passing_a_lesson_quiz_completes_the_lesson(student, quiz, lesson, add_question):
    lesson.quiz = quiz
    lesson.save()
    question = add_question(["A"])
    Enrollment.objects.create(user=student, course=lesson.course, enrollment_type=Enrollment.EnrollmentType.FREE)

    quiz_service.submit_attempt(student, quiz, {question.pk: "A"}, lesson_id=lesson.pk)

    progress = ProgressTracking.objects.get(user=student, lesson=lesson)
    assert progress.completed
    assert progress.progress_percentage == 100


def test_attempt_report_summarises_attempts(student, quiz, add_question):
    question = add_question(["A"])
    quiz_service.submit_attempt(student, quiz, {question.pk: "B"})
    quiz_service.submit_attempt(student, quiz, {question.pk: "A"})

    report = quiz_service.attempt_report(student, quiz)

    assert report["attempt_count"] == 2
    assert report["passed_count"] == 1
    assert report["best_score"] == 100
    assert report["has_passed"]
    assert QuizAttempt.objects.filter(user=student, quiz=quiz).count() == 2


def test_quiz_batch_assignment_upserts(admin_user, quiz, make_batch):
    batch = make_batch()
    quiz_service.assign_quiz_to_batches(quiz, [batch.pk], {"attempts": 2}, admin_user)
    assignments = quiz_service.assign_quiz_to_batches(quiz, [batch.pk], {"attempts": "3"}, admin_user)

    assert len(assignments) == 1
    assert quiz_service.quiz_batches(quiz).get().attempts == 3


def test_schedule_needs_an_ordered_window(quiz):
    with pytest.raises(ValidationError):
        quiz_service.schedule_quiz(quiz, "2025-05-02T10:00:00Z", "2025-05-01T10:00:00Z")

    quiz = quiz_service.schedule_quiz(quiz, "2025-05-01T10:00:00Z", "2025-05-01T11:00:00Z")
    assert quiz.is_scheduled
