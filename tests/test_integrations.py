import pytest
import resend
from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile

from lms_backend.exceptions import ExternalServiceError
from lms_backend.mailer import ResendMailer
from lms_backend.payment_gateway import RazorpayGateway, compute_signature
from lms_backend.storage import FileStorage

from .conftest import KEY_SECRET, FakeRazorpayClient


class BrokenOrders:
    def create(self, data):
        raise ConnectionError("gateway unreachable")


def test_signature_matches_razorpay_format(gateway):
    signature = compute_signature("order_1", "pay_1", KEY_SECRET)

    assert len(signature) == 64
    assert gateway.verify_signature("order_1", "pay_1", signature)
    assert not gateway.verify_signature("order_1", "pay_2", signature)
    assert not gateway.verify_signature("order_1", "pay_1", "")


def test_order_failures_surface_as_gateway_errors():
    client = FakeRazorpayClient()
    client.order = BrokenOrders()
    gateway = RazorpayGateway("rzp_test_key", KEY_SECRET, client=client)

    with pytest.raises(ExternalServiceError):
        gateway.create_order(amount=100, currency="INR", receipt="r1")


def test_unconfigured_gateway_refuses_orders():
    with pytest.raises(ExternalServiceError):
        RazorpayGateway("", "").create_order(amount=100, currency="INR", receipt="r1")


def test_mailer_sends_through_resend(monkeypatch):
    sent = []
    monkeypatch.setattr(resend.Emails, "send", lambda params: sent.append(params) or {"id": "email_1"})

    mailer = ResendMailer(api_key="re_test", from_email="lms@example.com")

    assert mailer.send("student@example.com", "Hello", "<p>Hi</p>", "Hi")
    assert sent[0]["to"] == ["student@example.com"]
    assert sent[0]["text"] == "Hi"


def test_mailer_falls_back_to_smtp(monkeypatch, settings, mailoutbox):
    settings.EMAIL_HOST = "smtp.example.com"

    def reject(params):
        raise RuntimeError("domain not verified")

    monkeypatch.setattr(resend.Emails, "send", reject)
    mailer = ResendMailer(api_key="re_test", from_email="lms@example.com")

    assert mailer.send("student@example.com", "Hello", "<p>Hi</p>")
    assert mailoutbox[0].to == ["student@example.com"]
    assert mailoutbox[0].alternatives[0][1] == "text/html"


def test_mailer_without_transport_reports_failure(settings):
    settings.EMAIL_HOST = ""
    assert ResendMailer(from_email="lms@example.com").send("student@example.com", "Hello", "<p>Hi</p>") is False


def test_storage_upload_and_delete(tmp_path):
    storage = FileStorage(FileSystemStorage(location=tmp_path, base_url="/media/"))

    url = storage.upload(SimpleUploadedFile("Notes.PDF", b"%PDF-1.4"), "lessons/pdfs")

    assert url.startswith("/media/lessons/pdfs/") and url.endswith(".pdf")
    stored = list((tmp_path / "lessons" / "pdfs").iterdir())
    assert len(stored) == 1

    storage.delete(url)
    storage.delete("https://cdn.example.com/elsewhere.pdf")
    assert not stored[0].exists()
