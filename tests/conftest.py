import pytest
from fastapi.testclient import TestClient

from exam_admin.config import Settings
from exam_admin.main import create_app

API = "/api"


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'exam_admin.db'}")


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def create_org(client):
    counter = {"n": 0}

    def _create(**fields):
        counter["n"] += 1
        body = {"organizationCode": f"ORG{counter['n']:03d}", "name": f"School {counter['n']}", "status": "active"}
        body.update(fields)
        r = client.post(f"{API}/organizations", json=body)
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _create


@pytest.fixture
def create_exam(client):
    counter = {"n": 0}

    def _create(organization_id, **fields):
        counter["n"] += 1
        body = {
            "organizationId": organization_id,
            "examCode": f"EXAM{counter['n']:03d}",
            "name": f"Midterm {counter['n']}",
            "startDate": "2024-03-01",
            "endDate": "2024-03-02",
        }
        body.update(fields)
        r = client.post(f"{API}/exams", json=body)
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _create


@pytest.fixture
def create_question(client):
    def _create(exam, **fields):
        body = {
            "organizationId": exam["organizationId"],
            "examId": exam["id"],
            "subject": "数学",
            "questionType": "解答题",
            "questionText": "Solve x + 1 = 2",
            "status": "published",
        }
        body.update(fields)
        r = client.post(f"{API}/questions", json=body)
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _create
