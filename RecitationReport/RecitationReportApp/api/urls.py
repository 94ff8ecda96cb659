from django.urls import path, include
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenRefreshView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from RecitationReportApp.api.views import (
    AccountStatusView,
    AccountTokenObtainPairView,
    AccountViewSet,
    AdminStatsView,
    AssessmentViewSet,
    RegistrationView,
    StudentAssessmentViewSet,
    StudentReportView,
    StudentStatsView,
    StudentViewSet,
    TeacherStatsView,
)

router = routers.SimpleRouter()
router.register(r"admin/accounts", AccountViewSet, basename="account")
router.register(r"assessments", AssessmentViewSet, basename="assessment")
router.register(r"students", StudentViewSet, basename="student")

students_router = routers.NestedSimpleRouter(router, r"students", lookup="student")
students_router.register(r"assessments", StudentAssessmentViewSet, basename="student-assessments")

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
    path("auth/token/", AccountTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("auth/register/", RegistrationView.as_view(), name="auth-register"),
    path("auth/me/", AccountStatusView.as_view(), name="auth-me"),
    path("admin/stats/", AdminStatsView.as_view(), name="admin-stats"),
    path("teacher/stats/", TeacherStatsView.as_view(), name="teacher-stats"),
    path("student/stats/", StudentStatsView.as_view(), name="student-stats"),
    path("student/report/", StudentReportView.as_view(), name="student-report"),
    path("", include(router.urls)),
    path("", include(students_router.urls)),
]
