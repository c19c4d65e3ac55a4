# /tests/test_grades_router.py

import pytest
from fastapi.testclient import TestClient

from lms.db.database import get_db
from lms.main import app, read_root


@pytest.fixture
def client(db_session):
    """TestClient bound to the in-memory database. Lifespan is not started."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def grade_payload(school, **overrides):
    payload = {
        "student_id": school["alice"].id,
        "class_id": school["class"].id,
        "subject_id": school["math"].id,
        "grade_value": 8.5,
        "grade_type": "quiz",
        "weight": 1.5,
        "term": "1",
        "academic_year": "2024-2025",
    }
    payload.update(overrides)
    return payload


def headers(user):
    return {"X-User-Id": str(user.id)}


@pytest.mark.asyncio
async def test_health_check():
    response = await read_root()
    assert response["status"] == "LMS Backend is running!"


def test_record_and_read_grade(client, school):
    response = client.post("/api/grades", json=grade_payload(school), headers=headers(school["teacher"]))

    assert response.status_code == 201
    body = response.json()
    assert body["grade_value"] == 8.5
    assert body["recorded_by"] == school["teacher"].id

    fetched = client.get(f"/api/grades/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["grade_type"] == "quiz"
    print("\n✅ SUCCESS: test_record_and_read_grade passed.")


def test_student_cannot_record(client, school):
    response = client.post("/api/grades", json=grade_payload(school), headers=headers(school["alice"]))
    assert response.status_code == 403


def test_duplicate_is_a_bad_request(client, school):
    client.post("/api/grades", json=grade_payload(school), headers=headers(school["admin"]))
    response = client.post("/api/grades", json=grade_payload(school), headers=headers(school["admin"]))
    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


def test_grade_value_out_of_range(client, school):
    response = client.post("/api/grades", json=grade_payload(school, grade_value=11), headers=headers(school["admin"]))
    assert response.status_code == 422


def test_missing_grade_is_404(client, school):
    assert client.get("/api/grades/9999").status_code == 404
    response = client.put("/api/grades/9999", json={"grade_value": 5}, headers=headers(school["admin"]))
    assert response.status_code == 404
    assert client.delete("/api/grades/9999", headers=headers(school["admin"])).status_code == 404


def test_update_and_delete(client, school):
    created = client.post("/api/grades", json=grade_payload(school), headers=headers(school["teacher"])).json()

    updated = client.put(f"/api/grades/{created['id']}", json={"grade_value": 9.75}, headers=headers(school["teacher"]))
    assert updated.status_code == 200
    assert updated.json()["grade_value"] == 9.75

    forbidden = client.delete(f"/api/grades/{created['id']}", headers=headers(school["idle_teacher"]))
    assert forbidden.status_code == 403

    deleted = client.delete(f"/api/grades/{created['id']}", headers=headers(school["teacher"]))
    assert deleted.status_code == 204
    assert client.get(f"/api/grades/{created['id']}").status_code == 404


def test_list_grades_for_student(client, school):
    client.post("/api/grades", json=grade_payload(school), headers=headers(school["admin"]))
    client.post("/api/grades", json=grade_payload(school, student_id=school["bob"].id), headers=headers(school["admin"]))

    response = client.get("/api/grades", headers=headers(school["alice"]))

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["totalItems"] == 1
    assert body["items"][0]["student_id"] == school["alice"].id


def test_student_statistics_endpoint(client, school):
    client.post("/api/grades", json=grade_payload(school, grade_value=10, weight=2), headers=headers(school["admin"]))
    client.post("/api/grades", json=grade_payload(school, grade_value=6, weight=1, grade_type="homework"), headers=headers(school["admin"]))

    response = client.get(f"/api/grades/students/{school['alice'].id}/statistics", headers=headers(school["alice"]))

    assert response.status_code == 200
    body = response.json()
    math = body["perYear"]["2024-2025"]["perSubject"]["Math"]
    assert math["average"] == 8.0
    assert math["weightedAverage"] == 8.67
    assert body["overallAverage"] == 8.0
    assert len(body["recentGrades"]) == 2


def test_student_statistics_without_grades(client, school):
    body = client.get(f"/api/grades/students/{school['bob'].id}/statistics", headers=headers(school["teacher"])).json()
    assert body["overallAverage"] == "--"
    assert body["currentYearAverage"] == "--"
    assert client.get("/api/grades/students/9999/statistics", headers=headers(school["admin"])).status_code == 404


def test_student_statistics_access(client, school):
    alice_stats = f"/api/grades/students/{school['alice'].id}/statistics"

    assert client.get(alice_stats).status_code == 422
    assert client.get(alice_stats, headers=headers(school["bob"])).status_code == 403
    assert client.get(alice_stats, headers=headers(school["idle_teacher"])).status_code == 403
    assert client.get(alice_stats, headers={"X-User-Id": "9999"}).status_code == 403


def test_out_of_range_stored_grade_is_readable(client, db_service, school):
    grade = db_service.add_grade({
        "student_id": school["alice"].id, "class_id": school["class"].id, "subject_id": school["math"].id,
        "grade_value": 12, "grade_type": "homework", "weight": 1, "term": "1",
        "academic_year": "2024-2025", "recorded_by": school["admin"].id,
    })

    fetched = client.get(f"/api/grades/{grade.id}")
    assert fetched.status_code == 200
    assert fetched.json()["grade_value"] == 12.0

    listed = client.get("/api/grades", headers=headers(school["admin"]))
    assert listed.status_code == 200
    assert listed.json()["items"][0]["grade_value"] == 12.0

    stats = client.get(f"/api/grades/students/{school['alice'].id}/statistics", headers=headers(school["alice"]))
    assert stats.status_code == 200
    assert stats.json()["overallAverage"] == 12.0


def test_teacher_statistics_endpoint(client, school):
    for student, value in (("alice", 9.5), ("bob", 4.0)):
        client.post("/api/grades", json=grade_payload(school, student_id=school[student].id, grade_value=value),
                    headers=headers(school["teacher"]))

    response = client.get(f"/api/grades/teachers/{school['teacher'].id}/statistics",
                          params={"sortBy": "grade"}, headers=headers(school["teacher"]))

    assert response.status_code == 200
    body = response.json()
    group = body["perGroup"][0]
    assert group["totalStudents"] == 2
    assert group["excellentCount"] == 1
    assert group["belowAverageCount"] == 1
    assert group["passRate"] == 50.0
    assert body["summary"]["classesWithGrades"] == 1


def test_teacher_statistics_access(client, school):
    url = f"/api/grades/teachers/{school['teacher'].id}/statistics"
    assert client.get(url, headers=headers(school["alice"])).status_code == 403
    assert client.get(url, headers=headers(school["idle_teacher"])).status_code == 403
    assert client.get(url, headers=headers(school["admin"])).status_code == 200


def test_teacher_statistics_bad_sort_key(client, school):
    response = client.get(f"/api/grades/teachers/{school['teacher'].id}/statistics",
                          params={"sortBy": "name"}, headers=headers(school["teacher"]))
    assert response.status_code == 400


def test_class_statistics_and_export(client, school):
    client.post("/api/grades", json=grade_payload(school, grade_value=7), headers=headers(school["admin"]))
    class_id = school["class"].id

    report = client.get(f"/api/grades/classes/{class_id}/statistics", headers=headers(school["teacher"]))
    assert report.status_code == 200
    assert report.json()["subjects"][0]["distribution"]["fair"] == 1

    export = client.get(f"/api/grades/classes/{class_id}/export", headers=headers(school["teacher"]))
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert "Alice" in export.text

    assert client.get("/api/grades/classes/9999/export", headers=headers(school["admin"])).status_code == 404


def test_class_views_are_forbidden_outside_assignments(client, school):
    class_id = school["class"].id
    physics = {"subjectId": school["physics"].id}

    for user in (school["idle_teacher"], school["alice"]):
        assert client.get(f"/api/grades/classes/{class_id}/statistics", headers=headers(user)).status_code == 403
        assert client.get(f"/api/grades/classes/{class_id}/export", headers=headers(user)).status_code == 403
        assert client.get(f"/api/grades/classes/{class_id}/student-statistics", headers=headers(user)).status_code == 403

    # Assigned to Math only.
    response = client.get(f"/api/grades/classes/{class_id}/export", params=physics, headers=headers(school["teacher"]))
    assert response.status_code == 403


def test_unknown_subject_filter_is_404(client, school):
    class_id = school["class"].id
    params = {"subjectId": 9999}

    report = client.get(f"/api/grades/classes/{class_id}/statistics", params=params, headers=headers(school["admin"]))
    assert report.status_code == 404
    assert "Subject with ID 9999" in report.json()["detail"]
    assert client.get(f"/api/grades/classes/{class_id}/export", params=params, headers=headers(school["admin"])).status_code == 404
    assert client.get(f"/api/grades/students/{school['alice'].id}", params=params, headers=headers(school["admin"])).status_code == 404


def test_class_student_statistics_endpoint(client, school):
    client.post("/api/grades", json=grade_payload(school, grade_value=9, weight=1), headers=headers(school["teacher"]))
    client.post("/api/grades", json=grade_payload(school, student_id=school["bob"].id, grade_value=5, weight=1), headers=headers(school["teacher"]))

    response = client.get(f"/api/grades/classes/{school['class'].id}/student-statistics", headers=headers(school["teacher"]))

    assert response.status_code == 200
    body = response.json()
    assert body["classCode"] == "10A1"
    assert [s["studentName"] for s in body["studentStats"]] == ["Alice", "Bob"]
    assert body["overall"]["average"] == 7.0
    assert body["distribution"] == {"excellent": 1, "good": 0, "average": 1, "below": 0}
    assert client.get("/api/grades/classes/9999/student-statistics", headers=headers(school["admin"])).status_code == 404


def test_school_statistics_endpoint(client, db_service, school):
    client.post("/api/grades", json=grade_payload(school, grade_value=8), headers=headers(school["admin"]))
    left = db_service.add_user({"name": "Carol", "email": "carol@school.test", "role": "student"})
    db_service.add_enrollment({"class_id": school["class"].id, "student_id": left.id, "status": "transferred"})
    db_service.add_grade({
        "student_id": left.id, "class_id": school["class"].id, "subject_id": school["math"].id,
        "grade_value": 2, "grade_type": "quiz", "weight": 1, "term": "1",
        "academic_year": "2024-2025", "recorded_by": school["admin"].id,
    })

    response = client.get("/api/grades/school-statistics", headers=headers(school["admin"]))

    assert response.status_code == 200
    body = response.json()
    assert body["overall"] == {"totalGrades": 1, "average": 8.0}
    assert body["byClass"][0]["classCode"] == "10A1"
    assert body["byType"]["quiz"]["count"] == 1
    assert client.get("/api/grades/school-statistics", headers=headers(school["teacher"])).status_code == 403


def test_student_grades_endpoint(client, school):
    client.post("/api/grades", json=grade_payload(school, grade_value=10, weight=2), headers=headers(school["admin"]))
    client.post("/api/grades", json=grade_payload(school, grade_value=7, weight=1, grade_type="homework"), headers=headers(school["admin"]))
    client.post("/api/grades", json=grade_payload(school, student_id=school["bob"].id), headers=headers(school["admin"]))

    response = client.get(f"/api/grades/students/{school['alice'].id}", params={"limit": 1}, headers=headers(school["teacher"]))

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["totalItems"] == 2
    assert body["pagination"]["totalPages"] == 2
    assert len(body["items"]) == 1
    assert body["averages"] == [{
        "subjectId": school["math"].id, "subjectName": "Math", "term": "1", "averageGrade": 9.0, "totalGrades": 2,
    }]

    assert client.get(f"/api/grades/students/{school['alice'].id}", headers=headers(school["bob"])).status_code == 403


def test_academic_years_route(client, school):
    client.post("/api/grades", json=grade_payload(school), headers=headers(school["admin"]))
    response = client.get("/api/grades/academic-years")
    assert response.status_code == 200
    assert response.json() == ["2024-2025"]
