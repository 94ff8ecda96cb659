import datetime

import pytest
from model_bakery import baker
from rest_framework.test import APIClient

from RecitationReportApp.core.access import Actor
from RecitationReportApp.core.choices import ApprovalState, UserRole
from RecitationReportApp.domain.services import assessment_service

PASSWORD = "pass1234"


def make_account(role, state=ApprovalState.APPROVED, **kwargs):
    user = baker.make("users.User", role=role, approval_state=state, **kwargs)
    user.set_password(PASSWORD); user.save()
    return user


def login(user):
    client = APIClient()
    token = client.post("/api/v1/auth/token/", {"email": user.email, "password": PASSWORD}, format="json").data["access"]
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


def actor(user):
    return Actor.from_user(user)


@pytest.fixture
def admin():
    return make_account(UserRole.ADMIN, email="admin@example.com")


@pytest.fixture
def teacher():
    return make_account(UserRole.TEACHER, email="teacher@example.com")


@pytest.fixture
def other_teacher():
    return make_account(UserRole.TEACHER, email="teacher2@example.com")


@pytest.fixture
def student():
    return make_account(UserRole.STUDENT, email="student@example.com", name="Aisyah")


@pytest.fixture
def other_student():
    return make_account(UserRole.STUDENT, email="student2@example.com", name="Bilal")


@pytest.fixture
def record_assessment():
    def _make(teacher, student, marks=None, date=datetime.date(2024, 3, 1), surah="Al-Fatihah", track=""):
        return assessment_service.create_assessment(
            actor(teacher), student.pk, date, surah=surah, track=track, marks=marks,
        )
    return _make


@pytest.fixture
def anon_client():
    return APIClient()
