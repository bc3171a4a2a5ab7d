import logging

from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import User
from invitations.services import accept_invitation, pending_invitation
from lms_backend.exceptions import AuthenticationError, ValidationError

logger = logging.getLogger(__name__)


def issue_tokens(user) -> dict:
    """JWT pair carrying the same claims as a password login."""
    from accounts.serializers import LmsTokenObtainPairSerializer

    refresh = LmsTokenObtainPairSerializer.get_token(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def google_login(id_token, verifier) -> tuple:
    """
    Sign in with a Google ID token and return ``(user, tokens, created)``.

    First-time users are created from the token's claims; a pending,
    unexpired invitation for their address decides their role, batches and
    subscriptions.
    """
    if not id_token:
        raise ValidationError("Google credential is required")
    try:
        claims = verifier.verify(id_token)
    except ValueError as exc:
        logger.warning("Rejected Google ID token: %s", exc)
        raise AuthenticationError("Invalid Google credential") from exc

    email = (claims.get("email") or "").lower()
    if not email:
        raise AuthenticationError("Google account has no email address")

    created = False
    with transaction.atomic():
        user = User.objects.select_for_update().filter(email=email).first()
        if user is None:
            user = User.objects.create_user(
                email=email,
                first_name=claims.get("given_name") or claims.get("name") or "",
                last_name=claims.get("family_name") or "",
                google_id=claims.get("sub"),
                profile_picture=claims.get("picture") or "",
            )
            created = True
            invitation = pending_invitation(email)
            if invitation is not None:
                accept_invitation(invitation, user)
        elif not user.google_id:
            user.google_id = claims.get("sub")
            if claims.get("picture") and not user.profile_picture:
                user.profile_picture = claims["picture"]
            user.save(update_fields=["google_id", "profile_picture"])

        if user.status != User.Status.ACTIVE:
            raise AuthenticationError("Your account is inactive")

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])

    logger.info("Google sign-in for user %s (new account: %s)", user.pk, created)
    return user, issue_tokens(user), created


def logout(refresh_token) -> None:
    if not refresh_token:
        raise ValidationError("Refresh token is required")
    try:
        RefreshToken(refresh_token).blacklist()
    except TokenError as exc:
        raise ValidationError("Invalid or expired refresh token.") from exc
