"""
Test: HTTP API - assignments, submissions, analytics, passes, department, planner, assistant.
"""
import json
from datetime import timedelta

from campusdesk.models import utcnow
from conftest import status_error


def assignment_payload(**overrides):
    data = {
        "title": "Stacks & Queues",
        "description": "Week 3 practice",
        "classID": "CS-2B",
        "dueDate": (utcnow() + timedelta(days=5)).isoformat(),
        "questions": [
            {"type": "multiple-choice", "text": "Stack order?", "options": ["LIFO", "FIFO"],
             "correctAnswer": "LIFO", "points": 10},
            {"type": "short-answer", "text": "What does a queue do?", "correctAnswer": "first in first out",
             "points": 10},
        ],
    }
    data.update(overrides)
    return data


class TestAssignmentVisibility:
    def test_student_sees_published_without_answers(self, client, auth_headers, repo, make_assignment):
        repo.add_assignment(make_assignment(id="DRAFT1"))
        response = client.get("/api/assignments", headers=auth_headers("student"))
        assignments = response.get_json()["assignments"]
        assert [a["id"] for a in assignments] == ["A001"]
        for question in assignments[0]["questions"]:
            assert "correctAnswer" not in question
        assert assignments[0]["questions"][0]["options"] == ["O(1)", "O(n)", "O(log n)", "O(n^2)"]

    def test_student_cannot_open_draft(self, client, auth_headers, repo, make_assignment):
        repo.add_assignment(make_assignment(id="DRAFT1"))
        response = client.get("/api/assignments/DRAFT1", headers=auth_headers("student"))
        assert response.status_code == 404

    def test_teacher_sees_everything_with_status(self, client, auth_headers, repo, make_assignment):
        repo.add_assignment(make_assignment(id="DRAFT1"))
        assignments = client.get("/api/assignments", headers=auth_headers("teacher")).get_json()["assignments"]
        statuses = {a["id"]: a["status"] for a in assignments}
        assert statuses == {"DRAFT1": "draft", "A001": "published"}
        assert assignments[1]["questions"][0]["correctAnswer"] == "O(1)"

    def test_year_filter(self, client, auth_headers):
        body = client.get("/api/assignments?year=3", headers=auth_headers("teacher")).get_json()
        assert body["assignments"] == []

    def test_unknown_assignment(self, client, auth_headers):
        assert client.get("/api/assignments/NOPE", headers=auth_headers("teacher")).status_code == 404


class TestAssignmentLifecycle:
    def test_create_published(self, client, auth_headers, repo):
        response = client.post("/api/assignments", json=assignment_payload(), headers=auth_headers("teacher"))
        assert response.status_code == 201
        created = response.get_json()["assignment"]
        assert created["status"] == "published"
        assert created["teacherID"] == "T001"
        assert created["totalPoints"] == 20
        assert repo.list_assignments()[0].id == created["id"]

    def test_create_scheduled_then_reschedule_then_publish(self, client, auth_headers):
        headers = auth_headers("teacher")
        when = (utcnow() + timedelta(hours=3)).isoformat()
        created = client.post("/api/assignments", headers=headers,
                              json=assignment_payload(scheduleEnabled=True, scheduledAt=when)).get_json()
        assignment_id = created["assignment"]["id"]
        assert created["assignment"]["status"] == "scheduled"

        later = (utcnow() + timedelta(days=1)).isoformat()
        moved = client.post(f"/api/assignments/{assignment_id}/reschedule", headers=headers,
                            json={"scheduledAt": later})
        assert moved.status_code == 200
        assert moved.get_json()["assignment"]["status"] == "scheduled"

        published = client.post(f"/api/assignments/{assignment_id}/publish", headers=headers)
        body = published.get_json()["assignment"]
        assert body["status"] == "published"
        assert body["scheduledAt"] is None

    def test_schedule_in_past_rejected(self, client, auth_headers):
        past = (utcnow() - timedelta(hours=1)).isoformat()
        response = client.post("/api/assignments", headers=auth_headers("teacher"),
                               json=assignment_payload(scheduleEnabled=True, scheduledAt=past))
        assert response.status_code == 400
        assert response.get_json()["field"] == "scheduledAt"

    def test_schedule_without_time_rejected(self, client, auth_headers):
        response = client.post("/api/assignments", headers=auth_headers("teacher"),
                               json=assignment_payload(scheduleEnabled=True))
        assert response.status_code == 400

    def test_reschedule_published_rejected(self, client, auth_headers):
        later = (utcnow() + timedelta(days=1)).isoformat()
        response = client.post("/api/assignments/A001/reschedule", headers=auth_headers("teacher"),
                               json={"scheduledAt": later})
        assert response.status_code == 400

    def test_create_without_questions(self, client, auth_headers):
        response = client.post("/api/assignments", headers=auth_headers("teacher"),
                               json=assignment_payload(questions=[]))
        assert response.status_code == 400
        assert response.get_json()["field"] == "questions"

    def test_students_cannot_create(self, client, auth_headers):
        response = client.post("/api/assignments", json=assignment_payload(), headers=auth_headers("student"))
        assert response.status_code == 403

    def test_delete(self, client, auth_headers):
        headers = auth_headers("hod")
        assert client.delete("/api/assignments/A001", headers=headers).status_code == 200
        assert client.delete("/api/assignments/A001", headers=headers).status_code == 404

    def test_reschedule_to_past_keeps_schedule(self, client, auth_headers, repo):
        headers = auth_headers("teacher")
        when = (utcnow() + timedelta(hours=3)).isoformat()
        created = client.post("/api/assignments", headers=headers,
                              json=assignment_payload(scheduleEnabled=True, scheduledAt=when)).get_json()
        assignment_id = created["assignment"]["id"]
        original = repo.get_assignment(assignment_id).scheduled_at

        past = (utcnow() - timedelta(hours=1)).isoformat()
        response = client.post(f"/api/assignments/{assignment_id}/reschedule", headers=headers,
                               json={"scheduledAt": past})
        assert response.status_code == 400
        assert response.get_json()["field"] == "scheduledAt"
        assert repo.get_assignment(assignment_id).scheduled_at == original
        assert not repo.get_assignment(assignment_id).is_published

    def test_schedule_flag_must_be_boolean(self, client, auth_headers, repo):
        before = len(repo.list_assignments())
        when = (utcnow() + timedelta(hours=3)).isoformat()
        response = client.post("/api/assignments", headers=auth_headers("teacher"),
                               json=assignment_payload(scheduleEnabled="false", scheduledAt=when))
        assert response.status_code == 400
        assert response.get_json()["field"] == "scheduleEnabled"
        assert len(repo.list_assignments()) == before

    def test_schedule_flag_false_publishes(self, client, auth_headers):
        response = client.post("/api/assignments", headers=auth_headers("teacher"),
                               json=assignment_payload(scheduleEnabled=False))
        assert response.get_json()["assignment"]["status"] == "published"


class TestSubmissions:
    def test_submit_grades_and_stores(self, client, auth_headers, repo):
        response = client.post("/api/assignments/A001/submit", headers=auth_headers("student"),
                               json={"answers": {"Q1": "o(1)", "Q2": "a pointer"}})
        assert response.status_code == 201
        body = response.get_json()
        assert body["result"] == {
            "score": 20, "maxScore": 20, "percentage": 100,
            "feedback": {"Q1": {"correct": True, "correctAnswer": "O(1)"},
                         "Q2": {"correct": True, "correctAnswer": "pointer"}},
        }
        assert body["submission"]["studentID"] == "S001"
        assert repo.find_submission("A001", "S001").percentage == 100

    def test_second_submission_conflicts(self, client, auth_headers):
        headers = auth_headers("student")
        client.post("/api/assignments/A001/submit", headers=headers, json={"answers": {"Q1": "O(n)"}})
        response = client.post("/api/assignments/A001/submit", headers=headers, json={"answers": {"Q1": "O(1)"}})
        assert response.status_code == 409

    def test_cannot_submit_draft(self, client, auth_headers, repo, make_assignment):
        repo.add_assignment(make_assignment(id="DRAFT1"))
        response = client.post("/api/assignments/DRAFT1/submit", headers=auth_headers("student"),
                               json={"answers": {}})
        assert response.status_code == 404

    def test_empty_answers_score_zero(self, client, auth_headers):
        body = client.post("/api/assignments/A001/submit", headers=auth_headers("student"),
                           json={"answers": {"Q2": "  "}}).get_json()
        assert body["result"]["score"] == 0

    def test_listing(self, client, auth_headers):
        client.post("/api/assignments/A001/submit", headers=auth_headers("student"),
                    json={"answers": {"Q1": "O(1)"}})
        mine = client.get("/api/submissions/mine", headers=auth_headers("student")).get_json()
        assert [s["percentage"] for s in mine["submissions"]] == [50]

        teacher_view = client.get("/api/assignments/A001/submissions", headers=auth_headers("teacher"))
        assert len(teacher_view.get_json()["submissions"]) == 1


class TestAnalytics:
    def test_my_performance(self, client, auth_headers, repo, make_submission):
        repo.add_submission(make_submission("S001", 92, assignment_id="A001", student_name="Aarav Sharma"))
        body = client.get("/api/performance/me", headers=auth_headers("student")).get_json()
        assert body["performance"]["weeklyAverage"] == 92
        assert body["performance"]["band"] == "Excellent"
        assert body["performance"]["trend"] == "stable"

    def test_cohort_ranked(self, client, auth_headers, repo, make_submission):
        repo.add_submission(make_submission("S001", 60, assignment_id="A001"))
        repo.add_submission(make_submission("S002", 85, assignment_id="A001"))
        body = client.get("/api/performance", headers=auth_headers("hod")).get_json()
        assert [s["studentID"] for s in body["students"]] == ["S002", "S001"]

    def test_cohort_year_filter(self, client, auth_headers, repo, make_submission):
        repo.add_submission(make_submission("S001", 60, assignment_id="A001"))
        assert client.get("/api/performance?year=2", headers=auth_headers("hod")).get_json()["students"]
        assert client.get("/api/performance?year=1", headers=auth_headers("hod")).get_json()["students"] == []

    def test_dashboard_summary(self, client, auth_headers, repo, make_submission):
        repo.add_submission(make_submission("S001", 80, assignment_id="A001"))
        body = client.get("/api/dashboard/summary", headers=auth_headers("hod")).get_json()
        assert body["totalAssignments"] == 1
        assert body["activeStudents"] == 1
        assert body["pendingPasses"] == 2
        assert body["performanceByYear"] == {"2": {"avgScore": 80, "submissions": 1}}


class TestPasses:
    def test_student_files_and_sees_own(self, client, auth_headers):
        headers = auth_headers("student")
        response = client.post("/api/passes", headers=headers, json={"reason": "Dentist"})
        assert response.status_code == 201
        passes = client.get("/api/passes", headers=headers).get_json()["passes"]
        assert all(p["studentID"] == "S001" for p in passes)
        assert passes[0]["reason"] == "Dentist"

    def test_blank_reason(self, client, auth_headers):
        assert client.post("/api/passes", headers=auth_headers("student"), json={"reason": ""}).status_code == 400

    def test_approve_then_deny_conflicts(self, client, auth_headers):
        headers = auth_headers("teacher")
        approved = client.post("/api/passes/1/approve", headers=headers).get_json()["pass"]
        assert approved["status"] == "Approved"
        assert approved["reviewedBy"] == "Dr. Rajesh Kumar"
        assert client.post("/api/passes/1/deny", headers=headers).status_code == 409

    def test_status_filter(self, client, auth_headers):
        client.post("/api/passes/2/deny", headers=auth_headers("hod"))
        pending = client.get("/api/passes?status=Pending", headers=auth_headers("hod")).get_json()["passes"]
        assert [p["id"] for p in pending] == ["1"]

    def test_unknown_pass(self, client, auth_headers):
        assert client.post("/api/passes/999/approve", headers=auth_headers("hod")).status_code == 404


class TestDepartment:
    def test_timetable_add_and_clash(self, client, auth_headers):
        headers = auth_headers("hod")
        entry = {"classID": "CS-2A", "year": 2, "dayOfWeek": "Wednesday", "periodNumber": 2,
                 "subject": "Data Structures", "teacherID": "T001", "teacherName": "Dr. Rajesh Kumar"}
        assert client.post("/api/timetable", headers=headers, json=entry).status_code == 201
        assert client.post("/api/timetable", headers=headers, json=entry).status_code == 400

        listed = client.get("/api/timetable?day=Wednesday", headers=auth_headers("student")).get_json()
        assert [e["periodNumber"] for e in listed["entries"]] == [2]

    def test_teacher_cannot_edit_timetable(self, client, auth_headers):
        assert client.post("/api/timetable", headers=auth_headers("teacher"), json={}).status_code == 403

    def test_replace_timings(self, client, auth_headers):
        timings = [{"periodNumber": 1, "startTime": "08:30", "endTime": "09:20", "label": "Period 1"}]
        response = client.put("/api/period-timings", headers=auth_headers("hod"), json={"timings": timings})
        assert response.status_code == 200
        listed = client.get("/api/period-timings", headers=auth_headers("teacher")).get_json()["timings"]
        assert [t["startTime"] for t in listed] == ["08:30"]

    def test_subjects(self, client, auth_headers):
        headers = auth_headers("hod")
        assert client.post("/api/subjects/1", headers=headers, json={"subject": "Physics"}).status_code == 201
        assert client.post("/api/subjects/1", headers=headers, json={"subject": "physics"}).status_code == 400
        assert "Physics" in client.get("/api/subjects", headers=headers).get_json()["subjects"]["1"]
        assert client.delete("/api/subjects/1/Physics", headers=headers).status_code == 200

    def test_teachers(self, client, auth_headers):
        headers = auth_headers("hod")
        created = client.post("/api/teachers", headers=headers,
                              json={"name": "Dr. Meera Iyer", "email": "meera@college.edu"})
        assert created.status_code == 201
        teacher_id = created.get_json()["teacher"]["id"]
        assert client.delete(f"/api/teachers/{teacher_id}", headers=headers).status_code == 200
        assert client.post("/api/teachers", headers=headers, json={"name": "X"}).status_code == 400


class TestPlanner:
    def test_generate_and_save(self, client, auth_headers, completions):
        completions.queue(json.dumps([
            {"type": "fill-blank", "question": "Push adds to the ___", "correctAnswer": "top"},
        ]))
        response = client.post("/api/generate-questions", headers=auth_headers("teacher"), json={
            "topic": "Stacks", "subject": "Data Structures", "difficulty": "easy",
            "questionCount": 1, "questionTypes": ["fill-blank"], "saveToBank": True,
        })
        assert response.status_code == 200
        body = response.get_json()
        assert body["questions"][0]["points"] == 5
        assert body["saved"] == 1

        bank = client.get("/api/question-bank?subject=Data%20Structures", headers=auth_headers("teacher"))
        assert [q["text"] for q in bank.get_json()["questions"]] == ["Push adds to the ___"]

    def test_invalid_request_makes_no_call(self, client, auth_headers, completions):
        response = client.post("/api/generate-questions", headers=auth_headers("teacher"),
                               json={"topic": "", "subject": "DS"})
        assert response.status_code == 400
        assert completions.calls == []

    def test_scalar_question_types_rejected(self, client, auth_headers, completions):
        response = client.post("/api/generate-questions", headers=auth_headers("teacher"),
                               json={"topic": "Stacks", "subject": "DS", "questionTypes": 5})
        assert response.status_code == 400
        assert response.get_json()["field"] == "questionTypes"
        assert completions.calls == []

    def test_scalar_topics_rejected(self, client, auth_headers, completions):
        response = client.post("/api/generate-semester-plan", headers=auth_headers("hod"), json={
            "subject": "Operating Systems", "topics": 5,
            "totalPeriods": 40, "periodsPerWeek": 4, "semesterWeeks": 10,
        })
        assert response.status_code == 400
        assert response.get_json()["field"] == "topics"
        assert completions.calls == []

    def test_gateway_error_is_502(self, client, auth_headers, completions):
        completions.queue(status_error(429))
        response = client.post("/api/generate-questions", headers=auth_headers("teacher"),
                               json={"topic": "Stacks", "subject": "DS"})
        assert response.status_code == 502
        assert "Rate limit exceeded" in response.get_json()["error"]

    def test_semester_plan(self, client, auth_headers, completions):
        completions.queue('{"greeting": "Here is your plan", "weeklyPlan": []}')
        response = client.post("/api/generate-semester-plan", headers=auth_headers("hod"), json={
            "subject": "Operating Systems", "topics": "Processes, Memory",
            "totalPeriods": 40, "periodsPerWeek": 4, "semesterWeeks": 10,
        })
        assert response.status_code == 200
        assert response.get_json()["plan"]["greeting"] == "Here is your plan"

    def test_manual_bank_entry_and_search(self, client, auth_headers):
        headers = auth_headers("teacher")
        created = client.post("/api/question-bank", headers=headers, json={
            "type": "short-answer", "text": "Explain paging", "correctAnswer": "fixed size pages",
            "subject": "Operating Systems", "topic": "Memory", "difficulty": "hard",
        })
        assert created.status_code == 201
        item = created.get_json()["question"]
        assert item["source"] == "manual"

        found = client.get("/api/question-bank?q=memory", headers=headers).get_json()["questions"]
        assert [q["id"] for q in found] == [item["id"]]
        assert client.get("/api/question-bank?type=fill-blank", headers=headers).get_json()["questions"] == []

        assert client.delete(f"/api/question-bank/{item['id']}", headers=headers).status_code == 200


class TestAssistant:
    def test_chat_includes_dashboard_context(self, client, auth_headers, completions):
        completions.queue("Priya and Aarav are waiting on passes.")
        response = client.post("/api/assistant/chat", headers=auth_headers("hod"),
                               json={"message": "Who is waiting on a pass?"})
        assert response.status_code == 200
        assert response.get_json()["reply"] == "Priya and Aarav are waiting on passes."
        system = completions.calls[0]["messages"][0]["content"]
        assert "PENDING PASS REQUESTS (2 total)" in system

    def test_message_required(self, client, auth_headers):
        assert client.post("/api/assistant/chat", headers=auth_headers("hod"), json={}).status_code == 400


def test_unknown_api_route_is_json(client, auth_headers):
    response = client.get("/api/nothing-here", headers=auth_headers("teacher"))
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
