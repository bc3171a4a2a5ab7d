"""
Google sign-in verification and Google Calendar access.

Calendar calls are made with the end user's own OAuth tokens, so the client
builds a Calendar service per user on demand.
"""
import logging
from datetime import datetime

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class GoogleIdentityVerifier:
    def __init__(self, client_id: str):
        self.client_id = client_id

    def verify(self, token: str) -> dict:
        """
        Validate a Google ID token and return its claims (sub, email, name, picture).
        Raises ValueError for invalid or expired tokens.
        """
        claims = id_token.verify_oauth2_token(token, google_requests.Request(), self.client_id or None)
        if not claims.get("email"):
            raise ValueError("Google token carries no email address")
        return claims


class GoogleCalendarClient:
    calendar_id = "primary"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, scopes: list[str]):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes

    # OAuth connect flow -----------------------------------------------------

    def _flow(self) -> Flow:
        client_config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=self.scopes,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self, state: str) -> str:
        url, _ = self._flow().authorization_url(access_type="offline", prompt="consent", state=state)
        return url

    def exchange_code(self, code: str) -> dict:
        flow = self._flow()
        flow.fetch_token(code=code)
        credentials = flow.credentials
        return {
            "access_token": credentials.token,
            "refresh_token": credentials.refresh_token,
            "expiry": credentials.expiry,
        }

    # Events -----------------------------------------------------------------

    def _service(self, user):
        credentials = Credentials(
            token=user.google_access_token,
            refresh_token=user.google_refresh_token or None,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.scopes,
        )
        return build("calendar", "v3", credentials=credentials, cache_discovery=False)

    @staticmethod
    def _event_body(event) -> dict:
        def _when(value: datetime) -> dict:
            return {"dateTime": value.isoformat(), "timeZone": "UTC"}

        return {
            "summary": event.summary,
            "description": event.description,
            "location": event.location,
            "colorId": event.color_id,
            "start": _when(event.start_datetime),
            "end": _when(event.end_datetime),
        }

    def create_event(self, user, event) -> str:
        created = (
            self._service(user)
            .events()
            .insert(calendarId=self.calendar_id, body=self._event_body(event))
            .execute()
        )
        return created["id"]

    def update_event(self, user, event) -> None:
        (
            self._service(user)
            .events()
            .update(calendarId=self.calendar_id, eventId=event.google_event_id, body=self._event_body(event))
            .execute()
        )

    def delete_event(self, user, google_event_id: str) -> None:
        self._service(user).events().delete(calendarId=self.calendar_id, eventId=google_event_id).execute()
