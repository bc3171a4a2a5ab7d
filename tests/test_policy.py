import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.models import User
from accounts.policy import Action, can
from community.models import CommunityPost

Role = User.Role


@pytest.mark.parametrize(
    "role, action, expected",
    [
        (Role.MENTOR, Action.COURSE_CREATE, True),
        (Role.STUDENT, Action.COURSE_CREATE, False),
        (Role.ADMIN, Action.COURSE_DELETE, True),
        (Role.MENTOR, Action.COURSE_DELETE, False),
        (Role.ADMIN, Action.BATCH_MANAGE, True),
        (Role.ADMIN, Action.BATCH_DELETE, False),
        (Role.SUPER_ADMIN, Action.BATCH_DELETE, True),
        (Role.ADMIN, Action.USER_DELETE, False),
        (Role.SUPER_ADMIN, Action.USER_GRANT_SUPER_ADMIN, True),
        (Role.ADMIN, Action.INVITATION_MANAGE, True),
        (Role.MENTOR, Action.INVITATION_MANAGE, False),
        (Role.MENTOR, Action.QUESTION_BANK_MANAGE, True),
        (Role.MENTOR, Action.TAGS_MANAGE, False),
        (Role.STUDENT, Action.QUIZ_VIEW_ATTEMPTS, False),
    ],
)
def test_role_rules(make_user, role, action, expected):
    assert can(make_user(role), action) is expected


def test_mentor_edits_only_own_courses(make_user, make_course, mentor):
    other_mentor = make_user(Role.MENTOR)
    own = make_course(created_by=mentor)

    assert can(mentor, Action.COURSE_UPDATE, own)
    assert not can(other_mentor, Action.COURSE_UPDATE, own)
    assert can(make_user(Role.ADMIN), Action.COURSE_UPDATE, own)


def test_content_management_follows_the_course_author(mentor, make_user, lesson):
    assert can(mentor, Action.CONTENT_MANAGE, lesson)
    assert can(mentor, Action.CONTENT_MANAGE, lesson.chapter.section)
    assert not can(make_user(Role.MENTOR), Action.CONTENT_MANAGE, lesson)


def test_inactive_users_are_denied_everything(make_user):
    admin = make_user(Role.SUPER_ADMIN, status=User.Status.INACTIVE)
    assert not can(admin, Action.BATCH_MANAGE)


def test_anonymous_users_are_denied(course):
    assert not can(AnonymousUser(), Action.COURSE_CREATE)
    assert not can(AnonymousUser(), Action.COURSE_VIEW_CONTENT, course)


def test_unknown_action_is_a_programming_error(student):
    with pytest.raises(KeyError):
        can(student, "course.teleport")


def test_community_posts_are_managed_by_their_author_or_a_super_admin(make_user):
    author = make_user(Role.ADMIN)
    other_admin = make_user(Role.ADMIN)
    post = CommunityPost.objects.create(title="Welcome", content="Hello", author=author)

    assert can(author, Action.COMMUNITY_MANAGE, post)
    assert not can(other_admin, Action.COMMUNITY_MANAGE, post)
    assert can(make_user(Role.SUPER_ADMIN), Action.COMMUNITY_MANAGE, post)
    assert not can(make_user(Role.STUDENT), Action.COMMUNITY_MANAGE)


def test_calendar_events_belong_to_their_owner(student, make_user, quiz):
    from datetime import timedelta

    from django.utils import timezone

    from courses.models import CalendarEvent

    start = timezone.now()
    event = CalendarEvent.objects.create(
        quiz=quiz, user=student, summary="Vectors", start_datetime=start, end_datetime=start + timedelta(hours=1)
    )
    assert can(student, Action.CALENDAR_EVENT_MANAGE, event)
    assert not can(make_user(), Action.CALENDAR_EVENT_MANAGE, event)
