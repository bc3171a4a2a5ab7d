import pytest

from courses.models import Enrollment, Lesson
from courses.services import progress_service
from lms_backend.exceptions import AuthorizationError, ValidationError


@pytest.fixture
def enrolled(student, course):
    Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.FREE)
    return student


def test_progress_requires_full_access(student, lesson):
    with pytest.raises(AuthorizationError):
        progress_service.record_progress(student, lesson, progress_percentage=10)


def test_updates_only_touch_supplied_fields(enrolled, lesson):
    progress_service.record_progress(enrolled, lesson, progress_percentage=40)
    progress = progress_service.record_progress(enrolled, lesson, completed=True)

    assert progress.completed
    assert progress.progress_percentage == 40

    progress = progress_service.record_progress(enrolled, lesson, progress_percentage="75")
    assert progress.completed
    assert progress.progress_percentage == 75


@pytest.mark.parametrize("value", [-1, 101, "lots"])
def test_percentage_must_be_between_0_and_100(enrolled, lesson, value):
    with pytest.raises(ValidationError):
        progress_service.record_progress(enrolled, lesson, progress_percentage=value)


def test_course_progress_counts_completed_lessons(enrolled, course, lesson):
    Lesson.objects.create(
        chapter=lesson.chapter, title="Acceleration", content_type=Lesson.ContentType.PDF,
        content_url="/media/lesson_pdfs/acceleration.pdf", order=2,
    )
    progress_service.record_progress(enrolled, lesson, completed=True)

    summary = progress_service.course_progress(enrolled, course)

    assert summary["total_lessons"] == 2
    assert summary["completed_lessons"] == 1
    assert summary["overall_progress"] == 50


def test_course_author_can_track_progress(mentor, course, lesson):
    assert progress_service.course_progress(mentor, course)["overall_progress"] == 0
