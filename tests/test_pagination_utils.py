"""
Tests for pagination utilities, run against a group's poll listing.
"""

import pytest

from group_polls.models.polls import Poll
from group_polls.schemas.common import PaginatedResponse
from group_polls.schemas.poll import PollRead
from group_polls.services import polls as poll_service
from group_polls.api.v1.utils.pagination import (
    PaginationParams,
    get_pagination_params,
    apply_search,
    create_paginated_response,
    paginate_query
)


@pytest.fixture
def twelve_polls(db_session, group_g1):
    """Polls "Question 1" .. "Question 12" in G1"""
    for i in range(1, 13):
        poll_service.add_poll(db_session, "alice", group_g1.id, f"Question {i}", ["Yes", "No"])
    return poll_service.polls_by_group_query(db_session, group_g1.id)


class TestPaginationParams:
    """Test PaginationParams class"""

    def test_offset_calculation(self):
        assert PaginationParams(page=1, size=10).offset == 0
        assert PaginationParams(page=2, size=10).offset == 10
        assert PaginationParams(page=3, size=5).offset == 10

    def test_dependency_defaults(self):
        params = get_pagination_params(page=1, size=10)

        assert params.page == 1
        assert params.size == 10

    def test_size_is_bounded(self):
        with pytest.raises(ValueError):
            PaginationParams(page=1, size=101)
        with pytest.raises(ValueError):
            PaginationParams(page=0, size=10)


class TestApplySearch:
    """Test search filtering"""

    def test_search_is_case_insensitive(self, twelve_polls):
        results = apply_search(twelve_polls, "question 1", [Poll.question]).all()

        # Question 1, 10, 11, 12
        assert len(results) == 4

    def test_no_term_or_fields(self, twelve_polls):
        total = twelve_polls.count()

        assert apply_search(twelve_polls, None, [Poll.question]).count() == total
        assert apply_search(twelve_polls, "", [Poll.question]).count() == total
        assert apply_search(twelve_polls, "1", []).count() == total

    def test_wildcards_match_literally(self, db_session, group_g1):
        for question in ["100% sure?", "1000 sure?", "snake_case?", "snakeXcase?"]:
            poll_service.add_poll(db_session, "alice", group_g1.id, question, ["Yes", "No"])
        query = poll_service.polls_by_group_query(db_session, group_g1.id)

        assert [p.question for p in apply_search(query, "100%", [Poll.question])] == ["100% sure?"]
        assert [p.question for p in apply_search(query, "e_c", [Poll.question])] == ["snake_case?"]
        assert apply_search(query, "%", [Poll.question]).count() == 1


class TestPaginateQuery:
    """Test complete pagination workflow"""

    def test_first_page(self, twelve_polls):
        items, total = paginate_query(twelve_polls, PaginationParams(page=1, size=5))

        assert total == 12
        assert [poll.question for poll in items] == [f"Question {i}" for i in range(12, 7, -1)]

    def test_last_page_is_partial(self, twelve_polls):
        items, total = paginate_query(twelve_polls, PaginationParams(page=3, size=5))

        assert total == 12
        assert [poll.question for poll in items] == ["Question 2", "Question 1"]

    def test_with_search(self, twelve_polls):
        items, total = paginate_query(
            twelve_polls,
            PaginationParams(page=1, size=2),
            search_term="Question 1",
            search_fields=[Poll.question]
        )

        assert total == 4
        assert len(items) == 2
        assert all("Question 1" in poll.question for poll in items)


class TestPaginatedResponse:
    """Test paginated response creation"""

    def test_metadata(self, twelve_polls):
        pagination = PaginationParams(page=2, size=5)
        items, total = paginate_query(twelve_polls, pagination)

        response = create_paginated_response([PollRead.model_validate(p) for p in items], total, pagination)

        assert isinstance(response, PaginatedResponse)
        assert response.total == 12
        assert response.pages == 3
        assert response.has_next is True
        assert response.has_prev is True
        assert len(response.items) == 5

    def test_no_results(self):
        response = create_paginated_response([], 0, PaginationParams(page=1, size=10))

        assert response.pages == 1
        assert response.has_next is False
        assert response.has_prev is False
