import itertools
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.models import User
from batches.models import Batch, BatchCourse, BatchSubscription
from courses.models import Chapter, Course, Lesson, Question, Quiz, Section
from lms_backend.payment_gateway import RazorpayGateway, compute_signature

KEY_SECRET = "test_key_secret"


class FakeOrders:
    def __init__(self):
        self.created = []

    def create(self, data):
        order = {"id": f"order_test_{len(self.created) + 1}", **data}
        self.created.append(order)
        return order


class FakeRazorpayClient:
    def __init__(self):
        self.order = FakeOrders()


class FakeMailer:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to_email, subject, html, text=None):
        if to_email in self.fail_for:
            return False
        self.sent.append({"to": to_email, "subject": subject, "html": html})
        return True

    def send_template(self, to_email, subject, html_template, txt_template=None, context=None):
        if to_email in self.fail_for:
            return False
        self.sent.append({"to": to_email, "subject": subject, "template": html_template, "context": context or {}})
        return True


class FakeStorage:
    def __init__(self):
        self.uploaded = []
        self.deleted = []

    def upload(self, uploaded_file, folder):
        url = f"/media/{folder}/{getattr(uploaded_file, 'name', 'file')}"
        self.uploaded.append(url)
        return url

    def delete(self, url):
        self.deleted.append(url)


def sign(order_id, payment_id):
    return compute_signature(order_id, payment_id, KEY_SECRET)


@pytest.fixture
def gateway():
    return RazorpayGateway("rzp_test_key", KEY_SECRET, client=FakeRazorpayClient())


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def factory(role=User.Role.STUDENT, **kwargs):
        n = next(counter)
        email = kwargs.pop("email", f"user{n}@example.com")
        first_name = kwargs.pop("first_name", f"User{n}")
        return User.objects.create_user(email, first_name, password="s3cret-pass", role=role, **kwargs)

    return factory


@pytest.fixture
def student(make_user):
    return make_user()


@pytest.fixture
def mentor(make_user):
    return make_user(User.Role.MENTOR)


@pytest.fixture
def admin_user(make_user):
    return make_user(User.Role.ADMIN)


@pytest.fixture
def super_admin(make_user):
    return make_user(User.Role.SUPER_ADMIN)


@pytest.fixture
def make_course(mentor):
    def factory(price="0", sale_price=None, status=Course.Status.PUBLISHED, created_by=None, **kwargs):
        return Course.objects.create(
            title=kwargs.pop("title", "Physics 101"),
            price=Decimal(price),
            sale_price=Decimal(sale_price) if sale_price is not None else None,
            status=status,
            created_by=created_by or mentor,
            **kwargs,
        )

    return factory


@pytest.fixture
def course(make_course):
    return make_course()


@pytest.fixture
def paid_course(make_course):
    return make_course(price="1000", sale_price="800", title="Chemistry 201")


@pytest.fixture
def lesson(course):
    section = Section.objects.create(course=course, title="Kinematics", order=1)
    chapter = Chapter.objects.create(section=section, title="Motion", order=1)
    return Lesson.objects.create(
        chapter=chapter,
        title="Velocity",
        content_type=Lesson.ContentType.VIDEO,
        video_provider="youtube",
        content_url="https://youtube.com/watch?v=abc",
        duration=12,
        order=1,
    )


@pytest.fixture
def make_batch(db):
    def factory(name="Morning batch", members=(), courses=(), active=True, expires_on=None):
        batch = Batch.objects.create(name=name, active=active)
        batch.members.add(*members)
        for course in courses:
            BatchCourse.objects.create(batch=batch, course=course)
        if expires_on is not None:
            for member in members:
                BatchSubscription.objects.create(user=member, batch=batch, expires_on=expires_on)
        return batch

    return factory


@pytest.fixture
def quiz(mentor):
    return Quiz.objects.create(title="Vectors", passing_score=60, created_by=mentor)


@pytest.fixture
def add_question(quiz):
    def factory(correct, question_type=Question.QuestionType.SINGLE_CHOICE, score=1, options=("A", "B", "C", "D")):
        return Question.objects.create(
            quiz=quiz,
            question=f"Question {quiz.questions.count() + 1}",
            question_type=question_type,
            options=list(options),
            correct_answers=list(correct),
            score=score,
            order=quiz.questions.count() + 1,
        )

    return factory


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client(api_client):
    def factory(user):
        api_client.force_authenticate(user=user)
        return api_client

    return factory
