from datetime import date, datetime, timezone
from types import SimpleNamespace

from exam_admin.utils.field_mapper import (
    EXAM_FIELDS,
    ORGANIZATION_FIELDS,
    QUESTION_BATCH_FIELDS,
    QUESTION_FIELDS,
    as_utc,
    exam_subjects,
    sortable_columns,
    to_storage,
    to_wire,
)


def test_create_fills_defaults_and_empty_collections():
    values = to_storage(QUESTION_FIELDS, {"subject": "数学", "questionText": "1 + 1 = ?", "status": ""})
    assert values["subject"] == "数学"
    assert values["status"] == "draft"
    assert values["total_score"] == 0
    assert values["tags"] == []
    assert values["audio_url"] is None
    assert "id" not in values and "created_at" not in values


def test_exam_type_default():
    assert to_storage(EXAM_FIELDS, {})["exam_type"] == "联考"


def test_partial_copies_only_present_keys():
    values = to_storage(QUESTION_FIELDS, {"difficultyLevel": "困难", "audioUrl": None}, partial=True)
    assert values == {"difficulty_level": "困难", "audio_url": None}


def test_partial_skips_null_for_required_columns():
    values = to_storage(ORGANIZATION_FIELDS, {"name": None, "region": None}, partial=True)
    assert values == {"region": None}


def test_unknown_and_read_only_keys_are_ignored():
    values = to_storage(ORGANIZATION_FIELDS, {"id": "x", "createdAt": "2020", "bogus": 1}, partial=True)
    assert values == {}


def test_batch_fields_are_restricted():
    values = to_storage(QUESTION_BATCH_FIELDS, {"status": "archived", "questionText": "changed"}, partial=True)
    assert values == {"status": "archived"}


def test_wire_round_trip():
    body = {"organizationCode": "ORG001", "name": "Test School", "contactInfo": {"email": "a@b.c"}, "region": "北京"}
    wire = to_wire(ORGANIZATION_FIELDS, to_storage(ORGANIZATION_FIELDS, body))
    for key, value in body.items():
        assert wire[key] == value
    assert wire["status"] == "active"


def test_wire_normalises_null_collections():
    row = {"id": "q1", "tags": None, "options": None, "subject": "英语"}
    wire = to_wire(QUESTION_FIELDS, row, examName="Final")
    assert wire["tags"] == []
    assert wire["options"] == []
    assert wire["examName"] == "Final"


def test_exam_hides_pdf_columns():
    wire = to_wire(EXAM_FIELDS, {"math_pdf_url": "http://x/math.pdf"})
    assert "mathPdfUrl" not in wire


def test_exam_subjects_follow_pdf_urls():
    exam = SimpleNamespace(
        math_pdf_url="http://x/math.pdf",
        japanese_pdf_url="http://x/ja.pdf",
        exam_duration={"数学": 120},
        total_score={"数学": 150, "日语": 0},
    )
    subjects = exam_subjects(exam, {"数学": 3})
    assert [s["subject"] for s in subjects] == ["数学", "日语"]
    assert subjects[0] == {
        "subject": "数学", "pdfUrl": "http://x/math.pdf", "duration": 120, "totalScore": 150, "questionCount": 3,
    }
    assert subjects[1]["duration"] is None
    assert subjects[1]["totalScore"] is None
    assert subjects[1]["questionCount"] == 0


def test_sortable_columns_exclude_collections():
    columns = sortable_columns(QUESTION_FIELDS)
    assert columns["createdAt"] == "created_at"
    assert "tags" not in columns


def test_naive_timestamps_are_read_as_utc():
    naive = datetime(2024, 3, 1, 8, 30)
    wire = to_wire(ORGANIZATION_FIELDS, {"created_at": naive, "establishment_date": date(2020, 9, 1)})
    assert wire["createdAt"] == naive.replace(tzinfo=timezone.utc)
    assert wire["establishmentDate"] == date(2020, 9, 1)
    assert as_utc("2024-03-01") == "2024-03-01"
