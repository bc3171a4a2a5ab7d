"""
Transactional emails.

Every helper takes the mailer explicitly and never raises: a failed email is
logged and reported as ``False`` so the write that triggered it stands.
"""
import logging

from django.conf import settings

logger = logging.getLogger(__name__)


def _common_context(user) -> dict:
    return {
        "first_name": getattr(user, "first_name", "") or user.email,
        "full_name": user.get_full_name(),
        "email": user.email,
        "project_name": getattr(settings, "PROJECT_NAME", "Learning Management System"),
        "support_email": getattr(settings, "SUPPORT_EMAIL", getattr(settings, "DEFAULT_FROM_EMAIL", "")),
        "frontend_url": getattr(settings, "FRONTEND_URL", ""),
    }


def _send(mailer, to_email: str, subject: str, template: str, context: dict) -> bool:
    try:
        return mailer.send_template(
            to_email,
            subject,
            f"{template}.html",
            f"{template}.txt",
            context,
        )
    except Exception as e:
        logger.error(f"Failed to send '{subject}' to {to_email}: {str(e)}", exc_info=True)
        return False


def send_enrollment_email(mailer, enrollment) -> bool:
    """Confirm a free, batch, paid or subscription enrollment."""
    context = _common_context(enrollment.user)
    context.update(
        {
            "course_title": enrollment.course.title,
            "enrollment_type": enrollment.get_enrollment_type_display(),
            "expiry_date": enrollment.expiry_date,
            "enrollment_id": enrollment.id,
        }
    )
    subject = getattr(
        settings,
        "ENROLLMENT_CONFIRMED_EMAIL_SUBJECT",
        f"You're enrolled in {context['course_title']}",
    )
    return _send(mailer, enrollment.user.email, subject, "courses/emails/enrollment_confirmed", context)


def send_subscription_email(mailer, user, plan: str, expiry_date, course_count: int) -> bool:
    context = _common_context(user)
    context.update({"plan": plan.title(), "expiry_date": expiry_date, "course_count": course_count})
    subject = getattr(
        settings,
        "SUBSCRIPTION_ACTIVATED_EMAIL_SUBJECT",
        f"Your {context['plan']} subscription is active",
    )
    return _send(mailer, user.email, subject, "courses/emails/subscription_activated", context)


def send_invitation_email(mailer, invitation) -> bool:
    frontend_url = getattr(settings, "FRONTEND_URL", "").rstrip("/")
    context = {
        "email": invitation.email,
        "role": invitation.role,
        "invite_link": f"{frontend_url}/join?token={invitation.token}",
        "expires_at": invitation.expires_at,
        "invited_by": invitation.invited_by.get_full_name() if invitation.invited_by else "",
        "project_name": getattr(settings, "PROJECT_NAME", "Learning Management System"),
        "support_email": getattr(settings, "SUPPORT_EMAIL", getattr(settings, "DEFAULT_FROM_EMAIL", "")),
    }
    subject = getattr(
        settings,
        "INVITATION_EMAIL_SUBJECT",
        f"You're invited to join {context['project_name']}",
    )
    return _send(mailer, invitation.email, subject, "courses/emails/invitation", context)


def send_bulk_message(mailer, user, subject: str, body: str) -> bool:
    context = _common_context(user)
    context["body"] = body
    return _send(mailer, user.email, subject, "courses/emails/bulk_message", context)
