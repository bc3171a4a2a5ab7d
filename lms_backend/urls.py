from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, re_path
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.views import (
    BulkEmailView,
    GoogleLoginView,
    LoginView,
    LogoutView,
    MeView,
    export_users_view,
    user_batches_view,
    user_delete_view,
    user_list_view,
    user_role_view,
    user_status_view,
)
from batches.views import batch_courses_view, batch_detail_view, batch_list_view, batch_quizzes_view
from community.views import (
    PostAttachmentView,
    PostDetailView,
    PostListView,
    add_comment_view,
    like_post_view,
    popular_posts_view,
    posts_by_tag_view,
    recent_posts_view,
    search_posts_view,
)
from courses.views import (
    CalendarEventDetailView,
    CalendarEventListView,
    ChapterDetailView,
    ChapterLessonsView,
    CourseDetailView,
    CourseListCreateView,
    CourseSectionsView,
    EnrollView,
    GoogleAuthUrlView,
    GoogleCallbackView,
    GoogleDisconnectView,
    LessonDetailView,
    SectionChaptersView,
    SectionDetailView,
    UpcomingEventsView,
    add_question_view,
    attempt_detail_view,
    attempt_report_view,
    course_batches_view,
    course_progress_view,
    lesson_progress_view,
    my_attempts_view,
    my_enrollments_view,
    quiz_attempts_view,
    quiz_batches_view,
    quiz_detail_view,
    quiz_list_view,
    quiz_schedule_view,
    student_quizzes_view,
)
from invitations.views import InvitationByTokenView, InvitationListView, RevokeInvitationView
from lms_backend.clients import build_clients
from payments.views import CreateSubscriptionView, MyTransactionsView, VerifyPaymentView, VerifySubscriptionView
from question_bank.views import (
    question_bulk_update_view,
    question_delete_view,
    question_list_view,
    tag_category_view,
    tag_delete_view,
    tag_tree_view,
    tag_upload_view,
)

clients = build_clients()

urlpatterns = [
    path('api/admin/', admin.site.urls),

    # Auth
    re_path(r'^api/auth/login/?$', LoginView.as_view(), name='login'),
    re_path(r'^api/auth/refresh/?$', TokenRefreshView.as_view(), name='token_refresh'),
    re_path(r'^api/auth/google/?$', GoogleLoginView.as_view(clients=clients), name='google_login'),
    re_path(r'^api/auth/logout/?$', LogoutView.as_view(), name='logout'),
    re_path(r'^api/auth/me/?$', MeView.as_view(), name='me'),

    # User administration
    re_path(r'^api/users/?$', user_list_view, name='user_list'),
    re_path(r'^api/users/export/?$', export_users_view, name='user_export'),
    re_path(r'^api/users/bulk-email/?$', BulkEmailView.as_view(clients=clients), name='user_bulk_email'),
    re_path(r'^api/users/(?P<user_id>\d+)/role/?$', user_role_view, name='user_role'),
    re_path(r'^api/users/(?P<user_id>\d+)/batches/?$', user_batches_view, name='user_batches'),
    re_path(r'^api/users/(?P<user_id>\d+)/status/?$', user_status_view, name='user_status'),
    re_path(r'^api/users/(?P<user_id>\d+)/?$', user_delete_view, name='user_delete'),

    # Batches
    re_path(r'^api/batches/?$', batch_list_view, name='batch_list'),
    re_path(r'^api/batches/(?P<batch_id>\d+)/?$', batch_detail_view, name='batch_detail'),
    re_path(r'^api/batches/(?P<batch_id>\d+)/courses/?$', batch_courses_view, name='batch_courses'),
    re_path(r'^api/batches/(?P<batch_id>\d+)/quizzes/?$', batch_quizzes_view, name='batch_quizzes'),

    # Courses and enrollment
    re_path(r'^api/courses/?$', CourseListCreateView.as_view(clients=clients), name='course_list'),
    re_path(r'^api/courses/enrolled/?$', my_enrollments_view, name='my_enrollments'),
    re_path(r'^api/courses/(?P<course_id>\d+)/?$', CourseDetailView.as_view(clients=clients), name='course_detail'),
    re_path(r'^api/courses/(?P<course_id>\d+)/enroll/?$', EnrollView.as_view(clients=clients), name='course_enroll'),
    re_path(r'^api/courses/(?P<course_id>\d+)/batches/?$', course_batches_view, name='course_batches'),
    re_path(r'^api/courses/(?P<course_id>\d+)/progress/?$', course_progress_view, name='course_progress'),
    re_path(r'^api/courses/(?P<course_id>\d+)/sections/?$', CourseSectionsView.as_view(), name='course_sections'),

    # Content tree
    re_path(r'^api/sections/(?P<section_id>\d+)/?$', SectionDetailView.as_view(clients=clients), name='section_detail'),
    re_path(r'^api/sections/(?P<section_id>\d+)/chapters/?$', SectionChaptersView.as_view(), name='section_chapters'),
    re_path(r'^api/chapters/(?P<chapter_id>\d+)/?$', ChapterDetailView.as_view(clients=clients), name='chapter_detail'),
    re_path(r'^api/chapters/(?P<chapter_id>\d+)/lessons/?$', ChapterLessonsView.as_view(clients=clients), name='chapter_lessons'),
    re_path(r'^api/lessons/(?P<lesson_id>\d+)/?$', LessonDetailView.as_view(clients=clients), name='lesson_detail'),
    re_path(r'^api/lessons/(?P<lesson_id>\d+)/progress/?$', lesson_progress_view, name='lesson_progress'),

    # Quizzes
    re_path(r'^api/quizzes/?$', quiz_list_view, name='quiz_list'),
    re_path(r'^api/quizzes/student/?$', student_quizzes_view, name='student_quizzes'),
    re_path(r'^api/quizzes/attempts/(?P<attempt_id>\d+)/?$', attempt_detail_view, name='attempt_detail'),
    re_path(r'^api/quizzes/(?P<quiz_id>\d+)/?$', quiz_detail_view, name='quiz_detail'),
    re_path(r'^api/quizzes/(?P<quiz_id>\d+)/questions/?$', add_question_view, name='quiz_add_question'),
    re_path(r'^api/quizzes/(?P<quiz_id>\d+)/attempts/?$', quiz_attempts_view, name='quiz_attempts'),
    re_path(r'^api/quizzes/(?P<quiz_id>\d+)/my-attempts/?$', my_attempts_view, name='quiz_my_attempts'),
    re_path(r'^api/quizzes/(?P<quiz_id>\d+)/report/?$', attempt_report_view, name='quiz_report'),
    re_path(r'^api/quizzes/(?P<quiz_id>\d+)/batches/?$', quiz_batches_view, name='quiz_batches'),
    re_path(r'^api/quizzes/(?P<quiz_id>\d+)/schedule/?$', quiz_schedule_view, name='quiz_schedule'),

    # Calendar
    re_path(r'^api/calendar/events/?$', CalendarEventListView.as_view(clients=clients), name='calendar_events'),
    re_path(r'^api/calendar/events/upcoming/?$', UpcomingEventsView.as_view(), name='calendar_upcoming'),
    re_path(r'^api/calendar/events/(?P<event_id>\d+)/?$', CalendarEventDetailView.as_view(clients=clients), name='calendar_event_detail'),
    re_path(r'^api/calendar/google/auth-url/?$', GoogleAuthUrlView.as_view(clients=clients), name='calendar_google_auth_url'),
    re_path(r'^api/calendar/google/callback/?$', GoogleCallbackView.as_view(clients=clients), name='calendar_google_callback'),
    re_path(r'^api/calendar/google/disconnect/?$', GoogleDisconnectView.as_view(), name='calendar_google_disconnect'),

    # Payments
    re_path(r'^api/payment/verify/?$', VerifyPaymentView.as_view(clients=clients), name='payment_verify'),
    re_path(r'^api/payment/transactions/?$', MyTransactionsView.as_view(), name='payment_transactions'),
    re_path(r'^api/subscriptions/create/?$', CreateSubscriptionView.as_view(clients=clients), name='subscription_create'),
    re_path(r'^api/subscriptions/verify/?$', VerifySubscriptionView.as_view(clients=clients), name='subscription_verify'),

    # Invitations
    re_path(r'^api/invitations/?$', InvitationListView.as_view(clients=clients), name='invitation_list'),
    re_path(r'^api/invitations/token/(?P<token>[\w-]+)/?$', InvitationByTokenView.as_view(), name='invitation_by_token'),
    re_path(r'^api/invitations/(?P<invitation_id>\d+)/revoke/?$', RevokeInvitationView.as_view(), name='invitation_revoke'),

    # Community
    re_path(r'^api/community/posts/?$', PostListView.as_view(clients=clients), name='community_posts'),
    re_path(r'^api/community/posts/search/?$', search_posts_view, name='community_search'),
    re_path(r'^api/community/posts/popular/?$', popular_posts_view, name='community_popular'),
    re_path(r'^api/community/posts/recent/?$', recent_posts_view, name='community_recent'),
    re_path(r'^api/community/posts/tag/(?P<tag_name>[^/]+)/?$', posts_by_tag_view, name='community_by_tag'),
    re_path(r'^api/community/posts/(?P<post_id>\d+)/?$', PostDetailView.as_view(clients=clients), name='community_post_detail'),
    re_path(r'^api/community/posts/(?P<post_id>\d+)/like/?$', like_post_view, name='community_like'),
    re_path(r'^api/community/posts/(?P<post_id>\d+)/comments/?$', add_comment_view, name='community_comment'),
    re_path(
        r'^api/community/posts/(?P<post_id>\d+)/attachments/(?P<attachment_id>\d+)/?$',
        PostAttachmentView.as_view(clients=clients),
        name='community_attachment',
    ),

    # Tags and question bank
    re_path(r'^api/tags/?$', tag_tree_view, name='tag_tree'),
    re_path(r'^api/tags/upload/?$', tag_upload_view, name='tag_upload'),
    re_path(r'^api/tags/(?P<category>[a-z_]+)/?$', tag_category_view, name='tag_category'),
    re_path(r'^api/tags/(?P<category>[a-z_]+)/(?P<value>[^/]+)/?$', tag_delete_view, name='tag_delete'),
    re_path(r'^api/question-bank/?$', question_list_view, name='question_list'),
    re_path(r'^api/question-bank/bulk-update/?$', question_bulk_update_view, name='question_bulk_update'),
    re_path(r'^api/question-bank/(?P<question_id>\d+)/?$', question_delete_view, name='question_delete'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
