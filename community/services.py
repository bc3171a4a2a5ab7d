import json
import logging

from django.db import transaction
from django.db.models import F, Q

from accounts.policy import Action, can
from courses.services.content_service import delete_files
from lms_backend.exceptions import AuthorizationError, NotFoundError, ValidationError

from .models import CommunityPost, PostAttachment, PostComment

logger = logging.getLogger(__name__)

ATTACHMENT_FOLDER = "community/attachments"
MAX_ATTACHMENTS = 5
DEFAULT_LIMIT = 5


def _posts():
    return CommunityPost.objects.select_related("author").prefetch_related("attachments", "comments__author")


def list_posts():
    return _posts().order_by("-created_at")


def get_post(post_id) -> CommunityPost:
    try:
        return _posts().get(pk=post_id)
    except (CommunityPost.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Post not found")


def _parse_tags(value, default=None) -> list:
    if value in (None, ""):
        return default if default is not None else []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            # Multipart forms may send a comma separated string
            value = value.split(",")
    if not isinstance(value, list):
        raise ValidationError("Tags must be a list")
    return [str(tag).strip() for tag in value if str(tag).strip()]


def _attach(post, files, storage) -> None:
    if len(files) > MAX_ATTACHMENTS:
        raise ValidationError(f"A post can have at most {MAX_ATTACHMENTS} attachments per upload")
    for upload in files:
        PostAttachment.objects.create(
            post=post,
            url=storage.upload(upload, ATTACHMENT_FOLDER),
            type=getattr(upload, "content_type", "") or "",
            name=getattr(upload, "name", "") or "",
        )


def _check_manage(user, post, verb):
    if not can(user, Action.COMMUNITY_MANAGE, post):
        raise AuthorizationError(f"Not authorized to {verb} this post")


def create_post(user, data, storage, files=()) -> CommunityPost:
    _check_manage(user, None, "create")
    title = (data.get("title") or "").strip()
    content = (data.get("content") or "").strip()
    if not title or not content:
        raise ValidationError("Title and content are required")
    with transaction.atomic():
        post = CommunityPost.objects.create(
            title=title, content=content, author=user, tags=_parse_tags(data.get("tags"))
        )
        _attach(post, list(files), storage)
    logger.info("Community post %s created by user %s", post.pk, user.pk)
    return get_post(post.pk)


def update_post(user, post, data, storage, files=()) -> CommunityPost:
    _check_manage(user, post, "update")
    post.title = (data.get("title") or "").strip() or post.title
    post.content = (data.get("content") or "").strip() or post.content
    post.tags = _parse_tags(data.get("tags"), default=post.tags)
    with transaction.atomic():
        post.save()
        _attach(post, list(files), storage)
    return get_post(post.pk)


def delete_post(user, post, storage) -> None:
    _check_manage(user, post, "delete")
    urls = [attachment.url for attachment in post.attachments.all()]
    post.delete()
    delete_files(storage, urls)


def like_post(user, post) -> CommunityPost:
    with transaction.atomic():
        post = CommunityPost.objects.select_for_update().get(pk=post.pk)
        if post.liked_by.filter(pk=user.pk).exists():
            raise ValidationError("You have already liked this post")
        post.liked_by.add(user)
        CommunityPost.objects.filter(pk=post.pk).update(likes=F("likes") + 1)
    return get_post(post.pk)


def add_comment(user, post, content) -> PostComment:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment content is required")
    return PostComment.objects.create(post=post, author=user, content=content)


def search_posts(query):
    if not query:
        raise ValidationError("Search query is required")
    return list_posts().filter(Q(title__icontains=query) | Q(content__icontains=query))


def posts_by_tag(tag) -> list:
    if not tag:
        raise ValidationError("Tag name is required")
    # JSON containment lookups are not available on every backend
    return [post for post in list_posts() if tag in (post.tags or [])]


def _limit(value) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return value if value > 0 else DEFAULT_LIMIT


def popular_posts(limit=None):
    return _posts().order_by("-likes", "-created_at")[:_limit(limit)]


def recent_posts(limit=None):
    return list_posts()[:_limit(limit)]


def remove_attachment(user, post, attachment_id, storage) -> None:
    _check_manage(user, post, "update")
    try:
        attachment = post.attachments.get(pk=attachment_id)
    except (PostAttachment.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Attachment not found")
    url = attachment.url
    attachment.delete()
    delete_files(storage, [url])
