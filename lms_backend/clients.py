from dataclasses import dataclass

from django.conf import settings

from lms_backend.google_services import GoogleCalendarClient, GoogleIdentityVerifier
from lms_backend.mailer import ResendMailer
from lms_backend.payment_gateway import RazorpayGateway
from lms_backend.storage import FileStorage


@dataclass
class ServiceClients:
    """Third-party collaborators handed to the views that need them."""

    payments: RazorpayGateway
    mailer: ResendMailer
    calendar: GoogleCalendarClient
    google_identity: GoogleIdentityVerifier
    storage: FileStorage


def build_clients() -> ServiceClients:
    return ServiceClients(
        payments=RazorpayGateway(
            key_id=getattr(settings, "RAZORPAY_KEY_ID", ""),
            key_secret=getattr(settings, "RAZORPAY_KEY_SECRET", ""),
        ),
        mailer=ResendMailer(
            api_key=getattr(settings, "RESEND_API_KEY", ""),
            from_email=getattr(settings, "DEFAULT_FROM_EMAIL", ""),
        ),
        calendar=GoogleCalendarClient(
            client_id=getattr(settings, "GOOGLE_CLIENT_ID", ""),
            client_secret=getattr(settings, "GOOGLE_CLIENT_SECRET", ""),
            redirect_uri=getattr(settings, "GOOGLE_REDIRECT_URI", ""),
            scopes=getattr(settings, "GOOGLE_CALENDAR_SCOPES", []),
        ),
        google_identity=GoogleIdentityVerifier(getattr(settings, "GOOGLE_CLIENT_ID", "")),
        storage=FileStorage(),
    )


class ClientsMixin:
    """
    View mixin receiving the process-wide ServiceClients through
    ``View.as_view(clients=...)`` in the URL configuration.
    """

    clients: ServiceClients | None = None
