import pytest

from RecitationReportApp.assessments.models import Assessment
from RecitationReportApp.core.choices import ScoreBand

from conftest import login

pytestmark = pytest.mark.django_db


def payload(student, **extra):
    data = {
        "student": student.pk,
        "date": "2024-03-01",
        "surah": "Al-Fatihah",
        "pronunciation": {
            "articulation_point": 90, "articulation_manner": 90, "vowel_marks": 90, "elongation_shortening": 90,
        },
        "recitation_rules": {
            "nasal_letter_rule": 70, "meem_letter_rule": 70, "elongation_rule": 70, "pause_rule": 70,
            "emphasis_rule": 70,
        },
        "rhythm": {"tempo": 80, "calm": 80, "fluency": 80},
        "voice": {"voice": 60, "tone": 60},
        "conduct": {"attitude": 100},
    }
    data.update(extra)
    return data


def test_teacher_creates_scored_assessment(teacher, student):
    resp = login(teacher).post("/api/v1/assessments/", payload(student), format="json")
    assert resp.status_code == 201
    assert resp.data["final_score"] == pytest.approx(81.0)
    assert resp.data["pronunciation"]["score"] == pytest.approx(90.0)
    assert resp.data["teacher"]["id"] == teacher.pk
    assert resp.data["band"] == ScoreBand.GOOD


def test_caller_supplied_score_is_ignored(teacher, student):
    resp = login(teacher).post(
        "/api/v1/assessments/", payload(student, final_score=100, conduct={"attitude": 0}), format="json",
    )
    assert resp.status_code == 201
    assert resp.data["final_score"] == pytest.approx(71.0)


def test_out_of_range_mark_is_400(teacher, student):
    resp = login(teacher).post("/api/v1/assessments/", payload(student, rhythm={"tempo": 101}), format="json")
    assert resp.status_code == 400
    assert not Assessment.objects.exists()


def test_student_cannot_create(student):
    resp = login(student).post("/api/v1/assessments/", payload(student), format="json")
    assert resp.status_code == 403


def test_student_sees_own_but_not_others(teacher, student, other_student, record_assessment):
    own = record_assessment(teacher, student)
    foreign = record_assessment(teacher, other_student)
    client = login(student)

    resp = client.get("/api/v1/assessments/")
    assert [row["id"] for row in resp.data["results"]] == [own.pk]

    assert client.get(f"/api/v1/assessments/{own.pk}/").status_code == 200
    resp = client.get(f"/api/v1/assessments/{foreign.pk}/")
    assert resp.status_code == 404
    assert "final_score" not in resp.data


def test_foreign_teacher_gets_404(teacher, other_teacher, student, record_assessment):
    assessment = record_assessment(teacher, student)
    client = login(other_teacher)
    assert client.get(f"/api/v1/assessments/{assessment.pk}/").status_code == 404
    assert client.delete(f"/api/v1/assessments/{assessment.pk}/").status_code == 404
    assert Assessment.objects.filter(pk=assessment.pk).exists()


def test_author_deletes(teacher, student, record_assessment):
    assessment = record_assessment(teacher, student)
    assert login(teacher).delete(f"/api/v1/assessments/{assessment.pk}/").status_code == 204
    assert not Assessment.objects.exists()


def test_admin_cannot_read_assessments(admin, teacher, student, record_assessment):
    assessment = record_assessment(teacher, student)
    client = login(admin)
    assert client.get("/api/v1/assessments/").status_code == 403
    assert client.get(f"/api/v1/assessments/{assessment.pk}/").status_code == 403


def test_list_filters(teacher, student, record_assessment):
    record_assessment(teacher, student, surah="Al-Mulk")
    record_assessment(teacher, student, surah="Yasin")
    client = login(teacher)
    resp = client.get("/api/v1/assessments/", {"unit": "mulk", "date_from": "2024-01-01"})
    assert resp.status_code == 200
    assert [row["surah"] for row in resp.data["results"]] == ["Al-Mulk"]
    resp = client.get("/api/v1/assessments/", {"date_from": "2024-05-01", "date_to": "2024-04-01"})
    assert resp.status_code == 400


def test_students_endpoints_for_teacher(teacher, other_teacher, student, other_student, record_assessment):
    mine = record_assessment(teacher, student)
    record_assessment(other_teacher, student)
    client = login(teacher)

    resp = client.get("/api/v1/students/")
    assert {row["id"] for row in resp.data["results"]} == {student.pk, other_student.pk}

    resp = client.get(f"/api/v1/students/{student.pk}/assessments/")
    assert resp.status_code == 200
    assert [row["id"] for row in resp.data["results"]] == [mine.pk]

    assert login(student).get("/api/v1/students/").status_code == 403


def test_non_numeric_student_path_is_404(teacher):
    resp = login(teacher).get("/api/v1/students/abc/assessments/")
    assert resp.status_code == 404


def test_dashboards(teacher, student, record_assessment):
    record_assessment(teacher, student, marks={"conduct": {"attitude": 100}})
    t_resp = login(teacher).get("/api/v1/teacher/stats/")
    assert t_resp.status_code == 200
    assert t_resp.data["total_assessments"] == 1

    s_client = login(student)
    s_resp = s_client.get("/api/v1/student/stats/")
    assert s_resp.data["average_score"] == pytest.approx(10.0)
    report = s_client.get("/api/v1/student/report/")
    assert report.status_code == 200
    assert report.data["averages"]["conduct"] == pytest.approx(100.0)
    assert report.data["assessments"][0]["band"] == ScoreBand.NEEDS_IMPROVEMENT

    assert login(teacher).get("/api/v1/student/report/").status_code == 403
