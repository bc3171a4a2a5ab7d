import pytest
from django.core.exceptions import ValidationError as DjangoValidationError

from courses.models import Chapter, Course, Enrollment, Lesson, Section
from courses.services import content_service, course_service
from lms_backend.exceptions import ConflictError


def test_create_course_uploads_the_thumbnail(mentor, storage):
    thumbnail = type("Upload", (), {"name": "cover.png"})()

    course = course_service.create_course(
        mentor, {"title": "Optics", "price": "499", "status": "Published"}, storage, thumbnail=thumbnail
    )

    assert course.created_by == mentor
    assert course.thumbnail == storage.uploaded[0]
    assert course.effective_price == 499


def test_lesson_totals_follow_lesson_changes(course, lesson):
    Lesson.objects.create(
        chapter=lesson.chapter, title="Speed", content_type=Lesson.ContentType.PDF,
        content_url="/media/lesson_pdfs/speed.pdf", duration=8, order=2,
    )
    course.refresh_from_db()
    assert (course.total_lessons, course.total_duration) == (2, 20)

    lesson.delete()
    course.refresh_from_db()
    assert (course.total_lessons, course.total_duration) == (1, 8)


def test_course_with_enrollments_cannot_be_deleted(course, student, storage):
    Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.FREE)

    with pytest.raises(ConflictError) as excinfo:
        course_service.delete_course(course, storage)

    assert excinfo.value.extra == {"enrollment_count": 1}
    assert Course.objects.filter(pk=course.pk).exists()


def test_deleting_a_course_removes_tree_and_files(course, lesson, storage):
    course.thumbnail = "/media/course_thumbnails/cover.png"
    course.save()
    Lesson.objects.create(
        chapter=lesson.chapter, title="Notes", content_type=Lesson.ContentType.PDF,
        content_url="/media/lesson_pdfs/notes.pdf", order=2,
    )

    course_service.delete_course(course, storage)

    assert not Course.objects.filter(pk=course.pk).exists()
    assert not Section.objects.exists()
    assert not Lesson.objects.exists()
    assert sorted(storage.deleted) == ["/media/course_thumbnails/cover.png", "/media/lesson_pdfs/notes.pdf"]


def test_sections_get_the_next_free_order(course):
    first = content_service.create_section(course, {"title": "Basics"})
    second = content_service.create_section(course, {"title": "Advanced"})
    assert (first.order, second.order) == (1, 2)

    with pytest.raises(ConflictError):
        content_service.create_section(course, {"title": "Clash", "order": 1})


def test_create_lesson_accepts_nested_content(course, storage):
    chapter = content_service.create_chapter(content_service.create_section(course, {"title": "S"}), {"title": "C"})

    lesson = content_service.create_lesson(
        chapter,
        {"title": "Intro", "content": {"type": "video", "provider": "vimeo", "url": "https://vimeo.com/1"}},
        storage,
    )

    assert lesson.content_type == Lesson.ContentType.VIDEO
    assert lesson.content.to_payload() == {"type": "video", "provider": "vimeo", "url": "https://vimeo.com/1"}


def test_pdf_upload_is_stored(course, storage):
    chapter = content_service.create_chapter(content_service.create_section(course, {"title": "S"}), {"title": "C"})
    upload = type("Upload", (), {"name": "notes.pdf"})()

    lesson = content_service.create_lesson(chapter, {"title": "Notes", "content_type": "pdf"}, storage, upload=upload)

    assert lesson.content_url == "/media/lessons/pdfs/notes.pdf"


def test_pdf_is_removed_when_the_lesson_cannot_be_saved(lesson, storage):
    upload = type("Upload", (), {"name": "notes.pdf"})()

    with pytest.raises(ConflictError):
        content_service.create_lesson(
            lesson.chapter, {"title": "Notes", "content_type": "pdf", "order": 1}, storage, upload=upload
        )

    assert storage.deleted == ["/media/lessons/pdfs/notes.pdf"]
    assert lesson.chapter.lessons.count() == 1


def test_unknown_video_provider_is_rejected(course, storage):
    chapter = content_service.create_chapter(content_service.create_section(course, {"title": "S"}), {"title": "C"})
    with pytest.raises(DjangoValidationError):
        content_service.create_lesson(
            chapter, {"title": "Clip", "type": "video", "provider": "dailymotion", "url": "https://x"}, storage
        )


def test_course_tree_locks_non_preview_lessons(course, lesson):
    Lesson.objects.create(
        chapter=lesson.chapter, title="Trailer", content_type=Lesson.ContentType.VIDEO,
        video_provider="youtube", content_url="https://youtube.com/watch?v=t", preview=True, order=2,
    )

    lessons = content_service.course_tree(course, full_access=False)[0]["chapters"][0]["lessons"]

    assert [(item["title"], item["is_locked"]) for item in lessons] == [("Velocity", True), ("Trailer", False)]
    assert lessons[0]["content"] is None
    assert lessons[1]["content"]["url"] == "https://youtube.com/watch?v=t"

    full = content_service.course_tree(course, full_access=True)[0]["chapters"][0]["lessons"]
    assert all(not item["is_locked"] for item in full)


def test_tree_is_sorted_by_order(course):
    later = Section.objects.create(course=course, title="Later", order=5)
    earlier = Section.objects.create(course=course, title="Earlier", order=2)
    Chapter.objects.create(section=later, title="Only", order=1)

    tree = content_service.course_tree(course, full_access=True)

    assert [section["id"] for section in tree] == [earlier.pk, later.pk]
