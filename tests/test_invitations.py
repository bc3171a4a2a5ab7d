from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.models import User
from accounts.services import auth_service
from batches.models import BatchSubscription
from invitations import services
from invitations.models import Invitation
from lms_backend.exceptions import AuthenticationError, NotFoundError, ValidationError

from .conftest import FakeMailer


class FakeVerifier:
    def __init__(self, claims=None, error=None):
        self.claims = claims or {}
        self.error = error

    def verify(self, token):
        if self.error:
            raise self.error
        return self.claims


def test_invites_each_address_once(admin_user, mailer):
    results = services.create_invitations(
        "a@example.com, A@example.com ,b@example.com", User.Role.STUDENT, [], None, admin_user, mailer
    )

    assert results == {"success": ["a@example.com", "b@example.com"], "already_exists": [], "failed": []}
    assert Invitation.objects.count() == 2
    assert [message["to"] for message in mailer.sent] == ["a@example.com", "b@example.com"]


def test_reinviting_refreshes_the_pending_invitation(admin_user, mailer):
    services.create_invitations("a@example.com", User.Role.STUDENT, [], None, admin_user, mailer)
    first = Invitation.objects.get()

    services.create_invitations("a@example.com", User.Role.MENTOR, [], None, admin_user, mailer)

    refreshed = Invitation.objects.get()
    assert refreshed.pk == first.pk
    assert refreshed.token != first.token
    assert refreshed.role == User.Role.MENTOR


def test_existing_users_and_failed_emails_are_reported(admin_user, student):
    mailer = FakeMailer(fail_for={"down@example.com"})

    results = services.create_invitations(
        [student.email, "down@example.com", "not-an-email"], None, [], None, admin_user, mailer
    )

    assert results["already_exists"] == [student.email]
    assert results["failed"] == ["down@example.com", "not-an-email"]
    assert results["success"] == []


def test_only_super_admins_invite_super_admins(admin_user, mailer):
    with pytest.raises(ValidationError):
        services.create_invitations("boss@example.com", User.Role.SUPER_ADMIN, [], None, admin_user, mailer)


def test_token_lookup(admin_user, mailer):
    with pytest.raises(NotFoundError):
        services.get_by_token("missing")

    services.create_invitations("a@example.com", User.Role.STUDENT, [], None, admin_user, mailer)
    invitation = Invitation.objects.get()
    assert services.get_by_token(invitation.token) == invitation

    Invitation.objects.filter(pk=invitation.pk).update(expires_at=timezone.now() - timedelta(minutes=1))
    with pytest.raises(ValidationError):
        services.get_by_token(invitation.token)


def test_revoked_invitations_cannot_be_used(admin_user, mailer):
    services.create_invitations("a@example.com", User.Role.STUDENT, [], None, admin_user, mailer)
    invitation = services.revoke_invitation(Invitation.objects.get().pk)

    assert invitation.status == Invitation.Status.EXPIRED
    with pytest.raises(ValidationError):
        services.get_by_token(invitation.token)


def test_google_sign_in_applies_the_invitation(admin_user, mailer, make_batch):
    batch = make_batch()
    expires_on = timezone.now() + timedelta(days=30)
    services.create_invitations(
        "new@example.com", User.Role.MENTOR, [batch.pk], expires_on.isoformat(), admin_user, mailer
    )
    verifier = FakeVerifier({"email": "New@Example.com", "sub": "google-1", "given_name": "Nia"})

    user, tokens, created = auth_service.google_login("id-token", verifier)

    assert created
    assert user.role == User.Role.MENTOR
    assert user.first_name == "Nia"
    assert list(user.batches.all()) == [batch]
    assert BatchSubscription.objects.get(user=user, batch=batch).expires_on == expires_on
    assert Invitation.objects.get().status == Invitation.Status.ACCEPTED
    assert set(tokens) == {"access", "refresh"}


def test_google_sign_in_for_existing_user(student):
    user, _, created = auth_service.google_login("id-token", FakeVerifier({"email": student.email, "sub": "g-2"}))

    assert not created
    assert user.pk == student.pk
    user.refresh_from_db()
    assert user.google_id == "g-2"


def test_invalid_google_token_is_rejected(db):
    with pytest.raises(AuthenticationError):
        auth_service.google_login("bad", FakeVerifier(error=ValueError("Token expired")))


def test_inactive_users_cannot_sign_in(student):
    student.status = User.Status.INACTIVE
    student.save()
    with pytest.raises(AuthenticationError):
        auth_service.google_login("id-token", FakeVerifier({"email": student.email, "sub": "g-3"}))
