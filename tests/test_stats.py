from exam_admin.routers.stats import subject_distribution


def test_subject_distribution_buckets_unknown_subjects():
    counts = subject_distribution(["数学", "数学", "音乐", "日语"])
    assert counts["数学"] == 2
    assert counts["日语"] == 1
    assert counts["其他"] == 1
    assert counts["语文"] == 0


def test_overview(client, create_org, create_exam, create_question):
    org = create_org(name="Stats School")
    published = create_exam(org["id"], name="Finals", examType="期末", status="published")
    create_exam(org["id"])
    create_question(published, subject="数学")
    create_question(published, subject="音乐")
    create_question(published, subject="英语", status="draft")

    data = client.get("/api/statistics/overview").json()["data"]
    assert data["totalOrganizations"] == 1
    assert data["totalExams"] == 2
    assert data["totalQuestions"] == 2
    assert data["activeExams"] == 1
    assert data["subjectDistribution"]["数学"] == 1
    assert data["subjectDistribution"]["其他"] == 1
    assert data["subjectDistribution"]["英语"] == 0

    activity = data["recentActivity"]
    assert len(activity) == 2
    finals = next(a for a in activity if a["description"].startswith("Finals"))
    assert finals == {
        "type": "exam_created",
        "title": "New exam created",
        "description": "Finals (期末)",
        "organizationName": "Stats School",
        "timestamp": finals["timestamp"],
    }


def test_overview_empty(client):
    data = client.get("/api/statistics/overview").json()["data"]
    assert data["totalQuestions"] == 0
    assert data["recentActivity"] == []
    assert set(data["subjectDistribution"].values()) == {0}
