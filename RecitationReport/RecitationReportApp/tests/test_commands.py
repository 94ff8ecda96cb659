import pytest
from django.core.checks import run_checks
from django.core.management import CommandError, call_command

from RecitationReportApp.assessments.models import Assessment
from RecitationReportApp.core.choices import ApprovalState, UserRole
from RecitationReportApp.users.models import User

pytestmark = pytest.mark.django_db


def test_seed_admin_is_idempotent():
    call_command("seed_admin", "--password", "admin-pass")
    call_command("seed_admin", "--password", "other-pass", "--email", "second@example.com")
    admins = User.objects.admins()
    assert admins.count() == 1
    admin = admins.get()
    assert admin.email == "admin@almufid.com"
    assert admin.name == "Admin"
    assert admin.approval_state == ApprovalState.APPROVED
    assert admin.check_password("admin-pass")


def test_seed_admin_needs_password(monkeypatch):
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
    with pytest.raises(CommandError):
        call_command("seed_admin", "--password", "")


def test_createsuperuser_path_is_admin():
    user = User.objects.create_superuser(email="root@example.com", password="pw", name="Root")
    assert user.role == UserRole.ADMIN
    assert user.approval_state == ApprovalState.APPROVED


def test_recalculate_scores_command(teacher, student, record_assessment, capsys):
    assessment = record_assessment(teacher, student, marks={"conduct": {"attitude": 100}})
    Assessment.objects.filter(pk=assessment.pk).update(final_score=0)
    call_command("recalculate_scores")
    assert "Updated 1 assessments" in capsys.readouterr().out
    assessment.refresh_from_db()
    assert assessment.final_score == pytest.approx(10.0)


def test_rubric_check_passes():
    assert [m for m in run_checks() if m.id == "core.E001"] == []
