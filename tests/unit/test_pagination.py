"""Unit tests for the in-memory paginator and query parameter parsing."""

import pytest

from eva_api.models.pagination import ListPaginator, PaginationParams, Paginator


class TestListPaginator:
    def test_satisfies_protocol(self):
        assert isinstance(ListPaginator([]), Paginator)

    def test_bounds(self):
        paginator = ListPaginator(list(range(23)), page=3, per_page=10)
        assert paginator.items == [20, 21, 22]
        assert paginator.first_item == 21
        assert paginator.last_item == 23
        assert paginator.last_page == 3
        assert paginator.has_more_pages is False

    def test_empty_has_one_page(self):
        paginator = ListPaginator([])
        assert paginator.last_page == 1
        assert paginator.first_item is None
        assert paginator.last_item is None

    def test_url_appends_to_existing_query(self):
        assert ListPaginator([], base_url="/eq?search=x").url(2) == "/eq?search=x&page=2"
        assert ListPaginator([], base_url="/eq").url(0) == "/eq?page=1"


class TestPaginationParams:
    @pytest.mark.parametrize(
        ("page", "per_page", "expected"),
        [
            (None, None, (1, 15)),
            ("2", "50", (2, 50)),
            ("abc", "xyz", (1, 15)),
            ("0", "0", (1, 1)),
            ("-4", "1000", (1, 100)),
        ],
    )
    def test_from_query(self, page, per_page, expected):
        params = PaginationParams.from_query(page, per_page)
        assert (params.page, params.per_page) == expected

    def test_custom_limits(self):
        params = PaginationParams.from_query(None, "40", default_per_page=20, max_per_page=25)
        assert params.per_page == 25
