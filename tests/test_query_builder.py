import pytest

from student_records.core.errors import ValidationFailed
from student_records.services.query_builder import (
    DEFAULT_LIMIT,
    MAX_PAGE,
    SORT_ASC,
    SORT_DESC,
    build_list_query,
    escape_like,
    total_pages,
)


def test_defaults():
    query = build_list_query()
    assert query.page == 1
    assert query.limit == DEFAULT_LIMIT
    assert query.sort == SORT_DESC
    assert query.offset == 0
    # only the active-records filter
    assert len(query.filters) == 1


def test_include_deleted_drops_active_filter():
    assert build_list_query(include_deleted=True).filters == ()


@pytest.mark.parametrize(
    "page,limit,expected",
    [
        ("0", "1000", (1, 50)),
        ("-3", "0", (1, 1)),
        ("3", "20", (3, 20)),
        ("2abc", "5", (2, 5)),
        ("", "", (1, DEFAULT_LIMIT)),
    ],
)
def test_pagination_is_clamped(page, limit, expected):
    query = build_list_query(page=page, limit=limit)
    assert (query.page, query.limit) == expected


def test_offset():
    assert build_list_query(page="3", limit="20").offset == 40


def test_oversized_page_is_capped():
    query = build_list_query(page="99999999999999999999", limit="50")
    assert query.page == MAX_PAGE
    assert query.offset < 2**63


@pytest.mark.parametrize("page,limit", [("abc", None), (None, "ten")])
def test_non_numeric_pagination_is_rejected(page, limit):
    with pytest.raises(ValidationFailed) as exc_info:
        build_list_query(page=page, limit=limit)
    assert exc_info.value.fields == {"page": "Page and limit must be numbers"}


def test_invalid_district_is_rejected():
    with pytest.raises(ValidationFailed) as exc_info:
        build_list_query(district="Atlantis")
    assert exc_info.value.fields == {
        "address.district": "District must be selected from the list"
    }


def test_valid_district_and_search_add_filters():
    query = build_list_query(district="South West", q="  spring ")
    assert len(query.filters) == 3


def test_blank_search_is_ignored():
    assert len(build_list_query(q="   ").filters) == 1


@pytest.mark.parametrize(
    "sort,expected", [(SORT_ASC, SORT_ASC), ("name_asc", SORT_DESC), (None, SORT_DESC)]
)
def test_unknown_sort_falls_back(sort, expected):
    assert build_list_query(sort=sort).sort == expected


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
    assert escape_like("a.b*c") == "a.b*c"


@pytest.mark.parametrize("total,limit,pages", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2)])
def test_total_pages(total, limit, pages):
    assert total_pages(total, limit) == pages
