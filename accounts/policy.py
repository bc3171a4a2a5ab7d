"""
Authorization rules for every role-, ownership- and entitlement-gated action.

``can(user, action, resource)`` is the only function views and services should
consult; the rule table below is the single source of truth.
"""
from accounts.models import User

Role = User.Role

ADMINS = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
STAFF = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.MENTOR})
SUPER_ADMINS = frozenset({Role.SUPER_ADMIN})


class Action:
    COURSE_CREATE = "course.create"
    COURSE_UPDATE = "course.update"
    COURSE_DELETE = "course.delete"
    COURSE_ASSIGN_BATCHES = "course.assign_batches"
    COURSE_VIEW_UNPUBLISHED = "course.view_unpublished"
    COURSE_VIEW_CONTENT = "course.view_content"
    CONTENT_MANAGE = "content.manage"
    PROGRESS_TRACK = "progress.track"
    QUIZ_CREATE = "quiz.create"
    QUIZ_UPDATE = "quiz.update"
    QUIZ_DELETE = "quiz.delete"
    QUIZ_ASSIGN_BATCHES = "quiz.assign_batches"
    QUIZ_SCHEDULE = "quiz.schedule"
    QUIZ_VIEW_ATTEMPTS = "quiz.view_attempts"
    BATCH_MANAGE = "batch.manage"
    BATCH_DELETE = "batch.delete"
    USER_MANAGE = "user.manage"
    USER_EXPORT = "user.export"
    USER_BULK_EMAIL = "user.bulk_email"
    USER_DELETE = "user.delete"
    USER_GRANT_SUPER_ADMIN = "user.grant_super_admin"
    INVITATION_MANAGE = "invitation.manage"
    COMMUNITY_MANAGE = "community.manage"
    CALENDAR_EVENT_MANAGE = "calendar_event.manage"
    QUESTION_BANK_MANAGE = "question_bank.manage"
    TAGS_MANAGE = "tags.manage"


def _has_role(roles):
    def rule(user, resource):
        return user.role in roles
    return rule


def _author_field(field):
    """Admins always; otherwise the user referenced by ``resource.<field>``."""
    def rule(user, resource):
        if user.role in ADMINS:
            return True
        return resource is not None and getattr(resource, f"{field}_id", None) == user.pk
    return rule


def _staff_author(field):
    """Admins always; Mentors only on resources they authored."""
    def rule(user, resource):
        if user.role in ADMINS:
            return True
        if user.role != Role.MENTOR or resource is None:
            return False
        return getattr(resource, f"{field}_id", None) == user.pk
    return rule


def _content_course(resource):
    # Sections, chapters and lessons resolve to the course that owns them
    while resource is not None and not hasattr(resource, "created_by_id"):
        resource = (
            getattr(resource, "course", None)
            or getattr(resource, "section", None)
            or getattr(resource, "chapter", None)
        )
    return resource


def _manage_content(user, resource):
    return _staff_author("created_by")(user, _content_course(resource))


def _has_full_access(user, course):
    from courses.services.access_service import AccessLevel, resolve_access

    return course is not None and resolve_access(user, course).level == AccessLevel.FULL


def _community_manage(user, post):
    if user.role not in ADMINS:
        return False
    if post is None or user.role == Role.SUPER_ADMIN:
        return True
    return post.author_id == user.pk


def _event_owner(user, event):
    return event is not None and event.user_id == user.pk


RULES = {
    Action.COURSE_CREATE: _has_role(STAFF),
    Action.COURSE_UPDATE: _staff_author("created_by"),
    Action.COURSE_DELETE: _has_role(ADMINS),
    Action.COURSE_ASSIGN_BATCHES: _has_role(ADMINS),
    Action.COURSE_VIEW_UNPUBLISHED: _author_field("created_by"),
    Action.COURSE_VIEW_CONTENT: _has_full_access,
    Action.CONTENT_MANAGE: _manage_content,
    Action.PROGRESS_TRACK: _has_full_access,
    Action.QUIZ_CREATE: _has_role(STAFF),
    Action.QUIZ_UPDATE: _author_field("created_by"),
    Action.QUIZ_DELETE: _author_field("created_by"),
    Action.QUIZ_ASSIGN_BATCHES: _has_role(ADMINS),
    Action.QUIZ_SCHEDULE: _has_role(ADMINS),
    Action.QUIZ_VIEW_ATTEMPTS: _has_role(ADMINS),
    Action.BATCH_MANAGE: _has_role(ADMINS),
    Action.BATCH_DELETE: _has_role(SUPER_ADMINS),
    Action.USER_MANAGE: _has_role(ADMINS),
    Action.USER_EXPORT: _has_role(ADMINS),
    Action.USER_BULK_EMAIL: _has_role(ADMINS),
    Action.USER_DELETE: _has_role(SUPER_ADMINS),
    Action.USER_GRANT_SUPER_ADMIN: _has_role(SUPER_ADMINS),
    Action.INVITATION_MANAGE: _has_role(ADMINS),
    Action.COMMUNITY_MANAGE: _community_manage,
    Action.CALENDAR_EVENT_MANAGE: _event_owner,
    Action.QUESTION_BANK_MANAGE: _has_role(STAFF),
    Action.TAGS_MANAGE: _has_role(ADMINS),
}


def can(user, action: str, resource=None) -> bool:
    if action not in RULES:
        raise KeyError(f"Unknown action: {action}")
    if user is None or not user.is_authenticated:
        return False
    if getattr(user, "status", User.Status.ACTIVE) != User.Status.ACTIVE:
        return False
    return bool(RULES[action](user, resource))
