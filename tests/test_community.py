import pytest

from community import services
from community.models import CommunityPost, PostAttachment
from lms_backend.exceptions import AuthorizationError, NotFoundError, ValidationError


class Upload:
    def __init__(self, name, content_type="image/png"):
        self.name = name
        self.content_type = content_type


@pytest.fixture
def post(admin_user, storage):
    return services.create_post(
        admin_user,
        {"title": "Exam tips", "content": "Sleep well before the exam", "tags": '["exams", "tips"]'},
        storage,
        files=[Upload("timetable.png")],
    )


def test_only_admins_create_posts(student, storage):
    with pytest.raises(AuthorizationError):
        services.create_post(student, {"title": "Hi", "content": "Hello"}, storage)


def test_create_post_stores_tags_and_attachments(post, storage):
    assert post.tags == ["exams", "tips"]
    attachment = post.attachments.get()
    assert attachment.url == "/media/community/attachments/timetable.png"
    assert attachment.type == "image/png"
    assert storage.uploaded == [attachment.url]


def test_title_and_content_are_required(admin_user, storage):
    with pytest.raises(ValidationError):
        services.create_post(admin_user, {"title": "Only a title"}, storage)


def test_a_user_likes_a_post_once(student, post):
    assert services.like_post(student, post).likes == 1
    with pytest.raises(ValidationError, match="already liked"):
        services.like_post(student, post)
    post.refresh_from_db()
    assert post.likes == 1


def test_comments_need_content(student, post):
    with pytest.raises(ValidationError):
        services.add_comment(student, post, "   ")
    comment = services.add_comment(student, post, " Thanks! ")
    assert comment.content == "Thanks!"
    assert comment.author == student


def test_search_matches_title_and_content(post):
    with pytest.raises(ValidationError):
        services.search_posts("")
    assert list(services.search_posts("SLEEP")) == [post]
    assert list(services.search_posts("nothing like this")) == []


def test_posts_by_tag(post, admin_user, storage):
    services.create_post(admin_user, {"title": "Other", "content": "Body", "tags": "news"}, storage)
    assert services.posts_by_tag("tips") == [post]


def test_popular_posts_sort_by_likes(post, admin_user, student, storage):
    newer = services.create_post(admin_user, {"title": "Newer", "content": "Body"}, storage)
    services.like_post(student, post)

    assert [item.pk for item in services.popular_posts(2)] == [post.pk, newer.pk]
    assert [item.pk for item in services.recent_posts("bogus")] == [newer.pk, post.pk]


def test_removing_a_missing_attachment(post, admin_user, storage):
    with pytest.raises(NotFoundError):
        services.remove_attachment(admin_user, post, 999, storage)


def test_removing_an_attachment_deletes_the_file(post, admin_user, storage):
    attachment = post.attachments.get()
    services.remove_attachment(admin_user, post, attachment.pk, storage)
    assert not PostAttachment.objects.exists()
    assert storage.deleted == [attachment.url]


def test_other_admins_cannot_delete_the_post(post, make_user, storage):
    other_admin = make_user("Admin")
    with pytest.raises(AuthorizationError):
        services.delete_post(other_admin, post, storage)


def test_super_admin_deletes_post_and_files(post, super_admin, storage):
    urls = [attachment.url for attachment in post.attachments.all()]
    services.delete_post(super_admin, post, storage)
    assert not CommunityPost.objects.exists()
    assert storage.deleted == urls
