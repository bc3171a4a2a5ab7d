from django.db.models import Count, Sum
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from courses.models import Chapter, Course, Lesson


def _refresh_course_totals(chapter_id):
    course_id = Chapter.objects.filter(pk=chapter_id).values_list("section__course_id", flat=True).first()
    if course_id is None:
        return
    totals = Lesson.objects.filter(chapter__section__course_id=course_id).aggregate(
        lessons=Count("id"), duration=Sum("duration")
    )
    Course.objects.filter(pk=course_id).update(
        total_lessons=totals["lessons"], total_duration=totals["duration"] or 0
    )


@receiver(post_save, sender=Lesson)
def _lesson_saved_handler(sender, instance: Lesson, **kwargs):
    _refresh_course_totals(instance.chapter_id)


@receiver(post_delete, sender=Lesson)
def _lesson_deleted_handler(sender, instance: Lesson, **kwargs):
    _refresh_course_totals(instance.chapter_id)
