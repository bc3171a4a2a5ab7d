"""
Lesson payloads.

A lesson carries exactly one kind of content; each kind is its own value type
so callers never interpret a loose string differently per lesson type.
"""
from dataclasses import dataclass
from typing import Union

from django.core.exceptions import ValidationError

VIDEO_PROVIDERS = ("youtube", "vimeo")


@dataclass(frozen=True)
class VideoContent:
    provider: str
    url: str
    kind = "video"

    def to_payload(self):
        return {"type": self.kind, "provider": self.provider, "url": self.url}


@dataclass(frozen=True)
class PdfContent:
    url: str
    kind = "pdf"

    def to_payload(self):
        return {"type": self.kind, "url": self.url}


@dataclass(frozen=True)
class QuizContent:
    quiz_id: int
    kind = "quiz"

    def to_payload(self):
        return {"type": self.kind, "quiz_id": self.quiz_id}


LessonContent = Union[VideoContent, PdfContent, QuizContent]


def content_from_payload(payload: dict) -> LessonContent:
    """Build a LessonContent from request data, raising ValidationError when malformed."""
    if not isinstance(payload, dict):
        raise ValidationError({"content": "Lesson content must be an object."})

    kind = payload.get("type")
    if kind == VideoContent.kind:
        provider = (payload.get("provider") or "").lower()
        url = payload.get("url") or ""
        if provider not in VIDEO_PROVIDERS:
            raise ValidationError({"provider": f"Video provider must be one of {', '.join(VIDEO_PROVIDERS)}."})
        if not url:
            raise ValidationError({"url": "Video lessons require a url."})
        return VideoContent(provider=provider, url=url)
    if kind == PdfContent.kind:
        if not payload.get("url"):
            raise ValidationError({"url": "PDF lessons require a document url or upload."})
        return PdfContent(url=payload["url"])
    if kind == QuizContent.kind:
        try:
            quiz_id = int(payload.get("quiz_id"))
        except (TypeError, ValueError):
            raise ValidationError({"quiz_id": "Quiz lessons require a valid quiz_id."})
        return QuizContent(quiz_id=quiz_id)
    raise ValidationError({"type": "Lesson type must be one of video, pdf, quiz."})
