API = "/api/exams"


def test_create_with_unknown_organization(client):
    r = client.post(API, json={
        "organizationId": "does-not-exist",
        "examCode": "EXAM001",
        "name": "Midterm",
        "startDate": "2024-03-01",
        "endDate": "2024-03-02",
    })
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "DATABASE_ERROR"
    assert client.get(API).json()["data"]["pagination"]["total"] == 0


def test_end_before_start(client, create_org):
    org = create_org()
    r = client.post(API, json={
        "organizationId": org["id"], "examCode": "EXAM001", "name": "Midterm",
        "startDate": "2024-03-02", "endDate": "2024-03-01",
    })
    assert r.status_code == 400


def test_subjects_derived_from_pdf_urls(client, create_org, create_exam, create_question):
    org = create_org(name="First School")
    exam = create_exam(
        org["id"],
        mathPdfUrl="http://files/math.pdf",
        englishPdfUrl="http://files/english.pdf",
        examDuration={"数学": 120, "英语": 100},
        totalScore={"数学": 150},
    )
    assert exam["examType"] == "联考"
    assert exam["status"] == "draft"
    assert exam["organizationName"] == "First School"
    assert "mathPdfUrl" not in exam
    assert [s["subject"] for s in exam["subjects"]] == ["数学", "英语"]
    assert exam["totalQuestions"] == 0

    create_question(exam, subject="数学")
    create_question(exam, subject="数学")
    create_question(exam, subject="物理")

    detail = client.get(f"{API}/{exam['id']}").json()["data"]
    math = detail["subjects"][0]
    assert math == {
        "subject": "数学", "pdfUrl": "http://files/math.pdf", "duration": 120, "totalScore": 150, "questionCount": 2,
    }
    assert detail["subjects"][1]["totalScore"] is None
    assert detail["totalQuestions"] == 3

    listed = client.get(API).json()["data"]["items"]
    assert listed[0]["totalQuestions"] == 3


def test_list_filters(client, create_org, create_exam):
    a = create_org()
    b = create_org()
    create_exam(a["id"], gradeLevel="高三", startDate="2024-01-10", endDate="2024-01-11")
    create_exam(a["id"], gradeLevel="高二", examType="月考", startDate="2024-06-01", endDate="2024-06-02")
    create_exam(b["id"], name="Final exam", startDate="2024-09-01", endDate="2024-09-03")

    def total(**params):
        return client.get(API, params=params).json()["data"]["pagination"]["total"]

    assert total(organizationId=a["id"]) == 2
    assert total(gradeLevel="高三") == 1
    assert total(examType="月考") == 1
    assert total(search="final") == 1
    assert total(startDate="2024-05-01") == 2
    assert total(endDate="2024-06-30") == 2
    assert total(startDate="2024-05-01", endDate="2024-06-30") == 1


def test_patch_keeps_other_fields(client, create_org, create_exam):
    exam = create_exam(create_org()["id"], gradeLevel="高三")
    updated = client.patch(f"{API}/{exam['id']}", json={"status": "published"}).json()["data"]
    assert updated["status"] == "published"
    assert updated["gradeLevel"] == "高三"
    assert updated["startDate"] == "2024-03-01"


def test_delete_guarded_by_questions(client, create_org, create_exam, create_question):
    exam = create_exam(create_org()["id"])
    question = create_question(exam)

    r = client.delete(f"{API}/{exam['id']}")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "CONFLICT"

    client.delete(f"/api/questions/{question['id']}")
    assert client.delete(f"{API}/{exam['id']}").status_code == 200
    assert client.delete(f"{API}/{exam['id']}").status_code == 200
    assert client.get(f"{API}/{exam['id']}").status_code == 404


def test_overview(client, create_org, create_exam, create_question):
    exam = create_exam(create_org()["id"])
    create_question(exam, subject="数学", difficultyLevel="容易", questionType="选择题")
    create_question(exam, subject="数学", difficultyLevel="困难")
    create_question(exam, subject="英语", difficultyLevel="困难")
    create_question(exam, subject="英语", status="draft")

    data = client.get(f"{API}/{exam['id']}/overview").json()["data"]
    assert data["examCode"] == exam["examCode"]
    assert data["totalQuestions"] == 3
    assert data["subjectStatistics"]["数学"] == 2
    assert data["subjectStatistics"]["英语"] == 1
    assert data["subjectStatistics"]["日语"] == 0
    assert data["difficultyDistribution"] == {"容易": 1, "中等": 0, "困难": 2, "极难": 0}
    assert data["typeDistribution"] == {"选择题": 1, "解答题": 2}

    assert client.get(f"{API}/missing/overview").status_code == 404
