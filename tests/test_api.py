import pytest

import lms_backend.urls
from courses.models import Enrollment
from payments.models import Transaction

from .conftest import sign


@pytest.fixture
def payments(monkeypatch, gateway, mailer):
    monkeypatch.setattr(lms_backend.urls.clients, "payments", gateway)
    monkeypatch.setattr(lms_backend.urls.clients, "mailer", mailer)
    return gateway


def test_errors_use_the_response_envelope(auth_client, student):
    response = auth_client(student).get("/api/courses/999/")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Course not found"}


def test_anonymous_users_must_sign_in(api_client, db):
    response = api_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_role_gated_routes_answer_403(auth_client, student):
    response = auth_client(student).get("/api/users")
    assert response.status_code == 403

    response = auth_client(student).post("/api/tags/exam_types", {"tag": "JEE"}, format="json")
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to manage tags"


def test_published_courses_are_public(api_client, course, make_course):
    make_course(status="Draft", title="Hidden")

    response = api_client.get("/api/courses")

    assert response.status_code == 200
    assert [item["title"] for item in response.json()["data"]] == [course.title]


def test_course_detail_locks_content_for_visitors(api_client, course, lesson):
    data = api_client.get(f"/api/courses/{course.pk}").json()["data"]

    assert data["user_access"]["has_full_access"] is False
    assert data["sections"][0]["chapters"][0]["lessons"][0]["is_locked"] is True


def test_admins_export_users_as_csv(auth_client, admin_user, student):
    response = auth_client(admin_user).get("/api/users/export?format=csv")

    assert response.status_code == 200
    assert response["Content-Type"] == "text/csv"
    lines = response.content.decode().splitlines()
    assert lines[0] == "Name,Email,Role,Batches,Join Date,Status"
    assert any(student.email in line for line in lines[1:])


def test_unsupported_export_format(auth_client, admin_user):
    response = auth_client(admin_user).get("/api/users/export?format=xlsx")
    assert response.status_code == 400
    assert response.json()["message"] == "Unsupported format"


def test_enrolling_in_a_free_course(auth_client, student, course, payments, mailer):
    response = auth_client(student).post(f"/api/courses/{course.pk}/enroll")

    assert response.status_code == 201
    assert response.json()["data"]["requires_payment"] is False
    assert Enrollment.objects.filter(user=student, course=course).exists()

    response = auth_client(student).post(f"/api/courses/{course.pk}/enroll")
    assert response.status_code == 400
    assert response.json()["message"] == "You are already enrolled in this course"


def test_paid_enrollment_round_trip(auth_client, student, paid_course, payments):
    client = auth_client(student)

    checkout = client.post(f"/api/courses/{paid_course.pk}/enroll").json()["data"]
    assert checkout["requires_payment"] is True
    assert checkout["amount"] == 80000

    order_id = checkout["order_id"]
    response = client.post(
        "/api/payment/verify",
        {"razorpay_order_id": order_id, "razorpay_payment_id": "pay_7", "razorpay_signature": sign(order_id, "pay_7")},
        format="json",
    )

    assert response.status_code == 200
    assert Transaction.objects.get(order_id=order_id).status == Transaction.STATUS_CAPTURED
    assert client.get(f"/api/courses/{paid_course.pk}").json()["data"]["user_access"]["has_full_access"] is True


def test_forged_signature_is_rejected(auth_client, student, paid_course, payments):
    client = auth_client(student)
    order_id = client.post(f"/api/courses/{paid_course.pk}/enroll").json()["data"]["order_id"]

    response = client.post(
        "/api/payment/verify",
        {"order_id": order_id, "payment_id": "pay_7", "signature": "0" * 64},
        format="json",
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid payment signature"


def test_course_delete_conflict_reports_enrollment_count(auth_client, admin_user, student, course):
    Enrollment.objects.create(user=student, course=course, enrollment_type=Enrollment.EnrollmentType.FREE)

    response = auth_client(admin_user).delete(f"/api/courses/{course.pk}")

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Cannot delete course with existing enrollments",
        "enrollment_count": 1,
    }


def test_quiz_submission(auth_client, student, quiz, add_question):
    question = add_question(["B"], score=2)

    response = auth_client(student).post(
        f"/api/quizzes/{quiz.pk}/attempts",
        {"answers": [{"questionId": question.pk, "answer": "B"}], "timeTaken": 30},
        format="json",
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert (data["earned"], data["max_score"], data["passed"]) == (2, 2, True)


def test_students_see_quizzes_without_answers(auth_client, student, quiz, add_question):
    add_question(["B"])
    data = auth_client(student).get(f"/api/quizzes/{quiz.pk}").json()["data"]
    assert "correct_answers" not in data["questions"][0]


def test_course_quizzes_are_hidden_without_access(auth_client, student, quiz, lesson, add_question):
    lesson.quiz = quiz
    lesson.save()
    add_question(["B"])

    response = auth_client(student).get(f"/api/quizzes/{quiz.pk}")

    assert response.status_code == 403
    assert response.json()["success"] is False


def test_community_feed(auth_client, admin_user, student):
    created = auth_client(admin_user).post(
        "/api/community/posts", {"title": "Welcome", "content": "Say hi", "tags": ["intro"]}, format="json"
    )
    assert created.status_code == 201
    post_id = created.json()["data"]["id"]

    client = auth_client(student)
    assert client.post(f"/api/community/posts/{post_id}/like").json()["data"]["likes"] == 1
    assert client.post(f"/api/community/posts/{post_id}/like").status_code == 400
    assert [post["id"] for post in client.get("/api/community/posts/tag/intro").json()["data"]] == [post_id]
    assert client.get("/api/community/posts/search").status_code == 400
