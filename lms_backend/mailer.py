"""
Outbound email.

Messages go through the Resend API; when Resend is not configured or rejects
the message the Django SMTP backend is tried instead.
"""
import logging
from typing import Optional

import resend
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


class ResendMailer:
    def __init__(self, api_key: str = "", from_email: str = ""):
        self.api_key = api_key
        self.from_email = from_email

    def send(self, to_email: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        """
        Send a single message. Returns True when either transport accepted it.
        """
        if not self.from_email:
            logger.error("No from_email configured; DEFAULT_FROM_EMAIL is empty")
            return False

        if self.api_key:
            try:
                if self._send_via_resend(to_email, subject, html, text):
                    return True
            except Exception as e:
                logger.warning(f"Resend failed with error ({type(e).__name__}): {str(e)}. Falling back to Django SMTP.")
        else:
            logger.debug("RESEND_API_KEY not set; using Django SMTP")

        return self._send_via_smtp(to_email, subject, html, text)

    def send_template(
        self,
        to_email: str,
        subject: str,
        html_template: str,
        txt_template: Optional[str] = None,
        context: Optional[dict] = None,
    ) -> bool:
        context = context or {}
        html_body = render_to_string(html_template, context)
        text_body = render_to_string(txt_template, context) if txt_template else None
        return self.send(to_email, subject, html_body, text_body)

    def _send_via_resend(self, to_email, subject, html, text) -> bool:
        resend.api_key = self.api_key
        params = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "html": html,
        }
        if text:
            params["text"] = text

        logger.info(f"Attempting to send email via Resend to {to_email} with subject: {subject}")
        response = resend.Emails.send(params)

        # Resend answers with {'id': ...}, {'data': {'id': ...}} or a bare id
        if isinstance(response, dict):
            email_id = response.get("id") or (response.get("data") or {}).get("id")
            if email_id:
                logger.info(f"Email sent successfully to {to_email} via Resend. Email ID: {email_id}")
                return True
            logger.error(f"Resend API returned an error: {response.get('error') or response}")
            return False
        if isinstance(response, str) and response:
            logger.info(f"Email sent successfully to {to_email} via Resend. Email ID: {response}")
            return True
        logger.error("Resend API returned an empty response")
        return False

    def _send_via_smtp(self, to_email, subject, html, text) -> bool:
        if not getattr(settings, "EMAIL_HOST", ""):
            logger.error("SMTP fallback not configured: EMAIL_HOST not set in settings")
            return False
        try:
            message = EmailMultiAlternatives(
                subject=subject,
                body=text or html,
                from_email=self.from_email,
                to=[to_email],
            )
            message.attach_alternative(html, "text/html")
            message.send()
        except Exception:
            logger.exception(f"Failed to send email to {to_email} via Django SMTP")
            return False
        logger.info(f"Email sent successfully to {to_email} via Django SMTP")
        return True
