from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAuthenticated

from accounts.policy import Action, can
from courses.models import Chapter, Course, Lesson, Section
from courses.services import content_service
from courses.services.access_service import resolve_access
from lms_backend.clients import ClientsMixin
from lms_backend.exceptions import AuthorizationError
from lms_backend.utils import get_or_404


def _check_manage(user, node):
    if not can(user, Action.CONTENT_MANAGE, node):
        raise AuthorizationError("Not authorized to modify this course's content")


def _section_data(section):
    return {"id": section.id, "course": section.course_id, "title": section.title, "order": section.order}


def _chapter_data(chapter):
    return {"id": chapter.id, "section": chapter.section_id, "title": chapter.title, "order": chapter.order}


def _lesson_data(lesson, full_access=True):
    data = content_service.lesson_dict(lesson, full_access)
    data["chapter"] = lesson.chapter_id
    return data


class CourseSectionsView(APIView):
    """Content tree of a course (GET) and section creation (POST)."""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, course_id):
        course = get_or_404(Course.objects, "Course not found", pk=course_id)
        access = resolve_access(request.user, course)
        return Response({
            "success": True,
            "message": "Sections retrieved successfully.",
            "data": content_service.course_tree(course, access.has_full_access),
        })

    def post(self, request, course_id):
        course = get_or_404(Course.objects, "Course not found", pk=course_id)
        _check_manage(request.user, course)
        section = content_service.create_section(course, request.data)
        return Response({
            "success": True,
            "message": "Section created successfully.",
            "data": _section_data(section),
        }, status=status.HTTP_201_CREATED)


class SectionDetailView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def _section(self, request, section_id):
        section = get_or_404(Section.objects.select_related("course"), "Section not found", pk=section_id)
        _check_manage(request.user, section)
        return section

    def put(self, request, section_id):
        section = content_service.update_section(self._section(request, section_id), request.data)
        return Response({"success": True, "message": "Section updated successfully.", "data": _section_data(section)})

    patch = put

    def delete(self, request, section_id):
        content_service.delete_section(self._section(request, section_id), self.clients.storage)
        return Response({"success": True, "message": "Section deleted successfully."})


class SectionChaptersView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, section_id):
        section = get_or_404(Section.objects.select_related("course"), "Section not found", pk=section_id)
        _check_manage(request.user, section)
        chapter = content_service.create_chapter(section, request.data)
        return Response({
            "success": True,
            "message": "Chapter created successfully.",
            "data": _chapter_data(chapter),
        }, status=status.HTTP_201_CREATED)


class ChapterDetailView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def _chapter(self, request, chapter_id):
        chapter = get_or_404(
            Chapter.objects.select_related("section__course"), "Chapter not found", pk=chapter_id
        )
        _check_manage(request.user, chapter)
        return chapter

    def put(self, request, chapter_id):
        chapter = content_service.update_chapter(self._chapter(request, chapter_id), request.data)
        return Response({"success": True, "message": "Chapter updated successfully.", "data": _chapter_data(chapter)})

    patch = put

    def delete(self, request, chapter_id):
        content_service.delete_chapter(self._chapter(request, chapter_id), self.clients.storage)
        return Response({"success": True, "message": "Chapter deleted successfully."})


class ChapterLessonsView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, chapter_id):
        chapter = get_or_404(
            Chapter.objects.select_related("section__course"), "Chapter not found", pk=chapter_id
        )
        _check_manage(request.user, chapter)
        lesson = content_service.create_lesson(
            chapter, request.data, self.clients.storage, upload=request.FILES.get("file")
        )
        return Response({
            "success": True,
            "message": "Lesson created successfully.",
            "data": _lesson_data(lesson),
        }, status=status.HTTP_201_CREATED)


class LessonDetailView(ClientsMixin, APIView):

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def _lesson(self, lesson_id):
        return get_or_404(
            Lesson.objects.select_related("chapter__section__course"), "Lesson not found", pk=lesson_id
        )

    def get(self, request, lesson_id):
        lesson = self._lesson(lesson_id)
        access = resolve_access(request.user, lesson.course)
        return Response({
            "success": True,
            "message": "Lesson retrieved successfully.",
            "data": _lesson_data(lesson, access.has_full_access),
        })

    def put(self, request, lesson_id):
        lesson = self._lesson(lesson_id)
        _check_manage(request.user, lesson)
        lesson = content_service.update_lesson(
            lesson, request.data, self.clients.storage, upload=request.FILES.get("file")
        )
        return Response({"success": True, "message": "Lesson updated successfully.", "data": _lesson_data(lesson)})

    patch = put

    def delete(self, request, lesson_id):
        lesson = self._lesson(lesson_id)
        _check_manage(request.user, lesson)
        content_service.delete_lesson(lesson, self.clients.storage)
        return Response({"success": True, "message": "Lesson deleted successfully."})
