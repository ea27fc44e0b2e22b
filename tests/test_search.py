API = "/api/search"


def test_empty_keyword(client):
    for params in ({}, {"q": "  "}):
        r = client.get(f"{API}/questions", params=params)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "VALIDATION_ERROR"
    assert client.get(f"{API}/knowledge-points").status_code == 400


def test_question_search(client, create_org, create_exam, create_question):
    exam = create_exam(create_org()["id"])
    hit = create_question(exam, questionText="求二次函数的最小值", difficultyLevel="中等")
    create_question(exam, questionText="求二次函数的零点", status="draft")
    create_question(exam, questionText="解方程 x + 1 = 2")

    data = client.get(f"{API}/questions", params={"q": "函数"}).json()["data"]
    assert [i["id"] for i in data["items"]] == [hit["id"]]
    info = data["searchInfo"]
    assert info["query"] == "函数"
    assert info["totalResults"] == 1
    assert info["suggestions"] == ["二次函数", "三角函数", "指数函数"]
    assert isinstance(info["searchTime"], float)
    assert data["pagination"]["total"] == 1

    data = client.get(f"{API}/questions", params={"q": "函数", "difficultyLevel": "容易"}).json()["data"]
    assert data["items"] == []


def test_no_suggestions_when_enough_results(client, create_org, create_exam, create_question):
    exam = create_exam(create_org()["id"])
    for n in range(5):
        create_question(exam, questionText=f"函数题 number {n}")
    info = client.get(f"{API}/questions", params={"q": "函数"}).json()["data"]["searchInfo"]
    assert info["totalResults"] == 5
    assert info["suggestions"] == []


def test_knowledge_points(client, create_org, create_exam, create_question):
    exam = create_exam(create_org()["id"])
    create_question(exam, knowledgePoints=["二次函数", "函数图像"])
    create_question(exam, subject="物理", knowledgePoints=["二次函数", "判别式"])
    create_question(exam, knowledgePoints=["二次函数"], status="draft")
    create_question(exam, knowledgePoints=["三角形"])

    points = client.get(f"{API}/knowledge-points", params={"q": "函数"}).json()["data"]["knowledgePoints"]
    assert [p["name"] for p in points] == ["二次函数", "函数图像"]
    top = points[0]
    assert top["count"] == 2
    assert sorted(top["subjects"]) == ["数学", "物理"]
    assert set(top["relatedPoints"]) == {"函数图像", "判别式"}

    points = client.get(f"{API}/knowledge-points", params={"q": "函数", "subject": "物理"}).json()["data"]
    assert [p["name"] for p in points["knowledgePoints"]] == ["二次函数"]
