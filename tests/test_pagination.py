import sys

import pytest

from exam_admin.utils.pagination import MAX_PAGE, build_pagination, parse_pagination


@pytest.mark.parametrize(
    "page, page_size, expected",
    [
        (None, None, (1, 20)),
        ("3", "10", (3, 10)),
        ("0", "0", (1, 20)),
        ("-4", "-5", (1, 1)),
        ("abc", "500", (1, 100)),
        ("2x", "15items", (2, 15)),
    ],
)
def test_parse_pagination_clamps_raw_values(page, page_size, expected):
    req = parse_pagination(page, page_size)
    assert (req.page, req.page_size) == expected


def test_offset():
    assert parse_pagination("1", "20").offset == 0
    assert parse_pagination("4", "25").offset == 75


def test_exact_descriptor():
    p = build_pagination(parse_pagination("2", "10"), total=25)
    assert p == {"page": 2, "pageSize": 10, "total": 25, "totalPages": 3, "hasNext": True, "hasPrev": True}


def test_exact_descriptor_last_page():
    p = build_pagination(parse_pagination("3", "10"), total=25)
    assert p["hasNext"] is False
    assert p["hasPrev"] is True


def test_exact_descriptor_empty():
    p = build_pagination(parse_pagination(None, None), total=0)
    assert p["totalPages"] == 0
    assert p["hasNext"] is False
    assert p["hasPrev"] is False


def test_countless_descriptor_guesses_next_from_full_page():
    req = parse_pagination("1", "5")
    full = build_pagination(req, total=None, returned=5)
    short = build_pagination(req, total=None, returned=3)
    assert full["total"] is None and full["totalPages"] is None
    assert full["hasNext"] is True
    assert short["hasNext"] is False


def test_huge_page_is_capped():
    req = parse_pagination("99999999999999999999", "100")
    assert req.page == MAX_PAGE
    assert req.offset < sys.maxsize
    assert parse_pagination("9" * 5000, None).page == MAX_PAGE
    assert parse_pagination("-" + "9" * 30, None).page == 1
    assert parse_pagination("0000000000000000000000007", None).page == 7
