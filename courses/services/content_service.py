"""
Sections, chapters and lessons.

Children are ordered by an integer unique within their parent; when a caller
does not pick one the node goes last. Deleting a node cascades to its
children in the database; stored PDF files are removed afterwards, and a
failed file delete is only logged.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Max

from courses.content import PdfContent, QuizContent, content_from_payload
from courses.models import Chapter, Lesson, Quiz, Section
from lms_backend.exceptions import ConflictError, NotFoundError, ValidationError
from lms_backend.utils import parse_bool

logger = logging.getLogger(__name__)

PDF_FOLDER = "lessons/pdfs"


def next_order(queryset) -> int:
    return (queryset.aggregate(max_order=Max("order"))["max_order"] or 0) + 1


def clean_order(value):
    if value in (None, ""):
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Order must be a positive integer")
    if value < 1:
        raise ValidationError("Order must be a positive integer")
    return value


def _save_ordered(instance, label: str):
    try:
        with transaction.atomic():
            instance.save()
    except IntegrityError as exc:
        raise ConflictError(f"A {label} with order {instance.order} already exists") from exc
    return instance


def pdf_urls(lessons) -> list:
    return [lesson.content_url for lesson in lessons if lesson.content_type == Lesson.ContentType.PDF and lesson.content_url]


def delete_files(storage, urls) -> None:
    for url in urls:
        try:
            storage.delete(url)
        except Exception as e:
            logger.error(f"Failed to delete stored file {url}: {str(e)}", exc_info=True)


# Sections -------------------------------------------------------------------


def create_section(course, data) -> Section:
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Section title is required")
    section = Section(
        course=course,
        title=title,
        order=clean_order(data.get("order")) or next_order(course.sections.all()),
    )
    return _save_ordered(section, "section")


def update_section(section, data) -> Section:
    if "title" in data:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Section title is required")
        section.title = title
    order = clean_order(data.get("order"))
    if order is not None:
        section.order = order
    return _save_ordered(section, "section")


def delete_section(section, storage) -> None:
    urls = pdf_urls(Lesson.objects.filter(chapter__section=section))
    section.delete()
    delete_files(storage, urls)


# Chapters -------------------------------------------------------------------


def create_chapter(section, data) -> Chapter:
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Chapter title is required")
    chapter = Chapter(
        section=section,
        title=title,
        order=clean_order(data.get("order")) or next_order(section.chapters.all()),
    )
    return _save_ordered(chapter, "chapter")


def update_chapter(chapter, data) -> Chapter:
    if "title" in data:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Chapter title is required")
        chapter.title = title
    order = clean_order(data.get("order"))
    if order is not None:
        chapter.order = order
    return _save_ordered(chapter, "chapter")


def delete_chapter(chapter, storage) -> None:
    urls = pdf_urls(chapter.lessons.all())
    chapter.delete()
    delete_files(storage, urls)


# Lessons --------------------------------------------------------------------


def _content_payload(data) -> dict:
    payload = data.get("content")
    if isinstance(payload, dict):
        return dict(payload)
    return {
        "type": data.get("content_type") or data.get("type"),
        "provider": data.get("video_provider") or data.get("provider"),
        "url": data.get("content_url") or data.get("url"),
        "quiz_id": data.get("quiz_id") or data.get("quiz"),
    }


def _upload_pdf(payload, upload, storage):
    if upload is None:
        return None
    if payload.get("type") != PdfContent.kind:
        raise ValidationError("File uploads are only accepted for PDF lessons")
    payload["url"] = storage.upload(upload, PDF_FOLDER)
    return payload["url"]


def _lesson_content(payload):
    content = content_from_payload(payload)
    if isinstance(content, QuizContent) and not Quiz.objects.filter(pk=content.quiz_id).exists():
        raise NotFoundError("Quiz not found")
    return content


def _save_lesson(lesson, data, storage, upload, with_content: bool) -> Lesson:
    """
    Save ``lesson``, setting its content from the request when asked. A PDF
    uploaded for a lesson that then fails to save is removed from storage.
    """
    uploaded = None
    try:
        if with_content:
            payload = _content_payload(data)
            uploaded = _upload_pdf(payload, upload, storage)
            lesson.set_content(_lesson_content(payload))
        return _save_ordered(lesson, "lesson")
    except Exception:
        if uploaded:
            delete_files(storage, [uploaded])
        raise


def _apply_lesson_fields(lesson, data):
    if "title" in data:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Lesson title is required")
        lesson.title = title
    if "description" in data:
        lesson.description = data.get("description") or ""
    if "duration" in data:
        try:
            lesson.duration = max(int(data.get("duration") or 0), 0)
        except (TypeError, ValueError):
            raise ValidationError("Duration must be a number of minutes")
    if "preview" in data:
        preview = data.get("preview")
        lesson.preview = parse_bool(preview)
    order = clean_order(data.get("order"))
    if order is not None:
        lesson.order = order


def create_lesson(chapter, data, storage, upload=None) -> Lesson:
    if not (data.get("title") or "").strip():
        raise ValidationError("Lesson title is required")
    lesson = Lesson(chapter=chapter)
    _apply_lesson_fields(lesson, data)
    if not lesson.order:
        lesson.order = next_order(chapter.lessons.all())
    return _save_lesson(lesson, data, storage, upload, with_content=True)


def update_lesson(lesson, data, storage, upload=None) -> Lesson:
    previous_pdf = lesson.content_url if lesson.content_type == Lesson.ContentType.PDF else ""
    _apply_lesson_fields(lesson, data)
    content_keys = {"content", "content_type", "type", "content_url", "url", "video_provider", "provider", "quiz_id"}
    with_content = upload is not None or bool(content_keys & set(data.keys()))
    _save_lesson(lesson, data, storage, upload, with_content)
    if previous_pdf and previous_pdf != lesson.content_url:
        delete_files(storage, [previous_pdf])
    return lesson


def delete_lesson(lesson, storage) -> None:
    """Progress records and quiz attempts go with the lesson."""
    urls = pdf_urls([lesson])
    with transaction.atomic():
        lesson.progress_records.all().delete()
        lesson.quiz_attempts.all().delete()
        lesson.delete()
    delete_files(storage, urls)


# Tree -----------------------------------------------------------------------


def lesson_dict(lesson, full_access: bool) -> dict:
    locked = not (full_access or lesson.preview)
    content = lesson.content
    return {
        "id": lesson.id,
        "title": lesson.title,
        "description": lesson.description,
        "content_type": lesson.content_type,
        "duration": lesson.duration,
        "preview": lesson.preview,
        "order": lesson.order,
        "content": None if locked or content is None else content.to_payload(),
        "is_locked": locked,
    }


def course_tree(course, full_access: bool) -> list:
    """
    Nested sections -> chapters -> lessons, each level sorted by order.
    Without full access only preview lessons keep their content.
    """
    sections = course.sections.prefetch_related("chapters__lessons").order_by("order")
    return [
        {
            "id": section.id,
            "title": section.title,
            "order": section.order,
            "chapters": [
                {
                    "id": chapter.id,
                    "title": chapter.title,
                    "order": chapter.order,
                    "lessons": [
                        lesson_dict(lesson, full_access)
                        for lesson in sorted(chapter.lessons.all(), key=lambda item: item.order)
                    ],
                }
                for chapter in sorted(section.chapters.all(), key=lambda item: item.order)
            ],
        }
        for section in sections
    ]
