"""
API contract tests for poll endpoints.
"""

import pytest
from fastapi import status

from group_polls.core.constants import ErrorCodes, ErrorMessages
from group_polls.services import polls as poll_service


def _option_id(poll_json, text):
    return next(option["id"] for option in poll_json["options"] if option["option_text"] == text)


class TestCreatePoll:

    def test_admin_creates_poll(self, client, group_g1, alice, auth_headers):
        response = client.post(
            "/api/v1/polls",
            json={"group_id": group_g1.id, "question": "Color?", "options": ["Red", "Blue"]},
            headers=auth_headers(alice["access_token"])
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["question"] == "Color?"
        assert data["is_open"] is True
        assert data["group_id"] == group_g1.id
        assert [(o["option_text"], o["number_of_votes"]) for o in data["options"]] == [("Red", 0), ("Blue", 0)]

    def test_plain_user_cannot_create(self, client, group_with_bob, bob, auth_headers):
        response = client.post(
            "/api/v1/polls",
            json={"group_id": group_with_bob.id, "question": "Color?", "options": ["Red", "Blue"]},
            headers=auth_headers(bob["access_token"])
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.parametrize("options", [["Red"], ["A", "B", "C", "D", "E", "F"]])
    def test_option_count_validated(self, client, group_g1, alice, auth_headers, options):
        response = client.post(
            "/api/v1/polls",
            json={"group_id": group_g1.id, "question": "Color?", "options": options},
            headers=auth_headers(alice["access_token"])
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_duplicate_options(self, client, group_g1, alice, auth_headers):
        response = client.post(
            "/api/v1/polls",
            json={"group_id": group_g1.id, "question": "Color?", "options": ["Red", "RED"]},
            headers=auth_headers(alice["access_token"])
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == ErrorCodes.BUSINESS_RULE_VIOLATION

    def test_requires_authentication(self, client, group_g1):
        response = client.post(
            "/api/v1/polls",
            json={"group_id": group_g1.id, "question": "Color?", "options": ["Red", "Blue"]}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestReadPolls:

    def test_list_group_polls(self, client, db_session, color_poll, bob, auth_headers):
        poll_service.add_poll(db_session, "alice", color_poll.group_id, "Size?", ["S", "M"])

        response = client.get(
            "/api/v1/polls",
            params={"group_id": color_poll.group_id, "page": 1, "size": 1},
            headers=auth_headers(bob["access_token"])
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert data["pages"] == 2
        assert data["has_next"] is True
        assert data["has_prev"] is False
        assert [item["question"] for item in data["items"]] == ["Size?"]

    def test_list_with_search(self, client, db_session, color_poll, bob, auth_headers):
        poll_service.add_poll(db_session, "alice", color_poll.group_id, "Size?", ["S", "M"])

        response = client.get(
            "/api/v1/polls",
            params={"group_id": color_poll.group_id, "search": "color"},
            headers=auth_headers(bob["access_token"])
        )

        assert response.status_code == status.HTTP_200_OK
        assert [item["id"] for item in response.json()["items"]] == [color_poll.id]

    def test_list_requires_group_id(self, client, color_poll, bob, auth_headers):
        response = client.get("/api/v1/polls", headers=auth_headers(bob["access_token"]))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_list_missing_group(self, client, color_poll, bob, auth_headers):
        response = client.get("/api/v1/polls", params={"group_id": 999}, headers=auth_headers(bob["access_token"]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_get_poll(self, client, color_poll, bob, auth_headers):
        response = client.get(f"/api/v1/polls/{color_poll.id}", headers=auth_headers(bob["access_token"]))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["question"] == "Color?"

    def test_get_missing_poll(self, client, color_poll, bob, auth_headers):
        response = client.get("/api/v1/polls/999", headers=auth_headers(bob["access_token"]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == ErrorMessages.POLL_NOT_FOUND


class TestVote:

    def test_vote(self, client, color_poll, bob, auth_headers):
        poll_json = client.get(f"/api/v1/polls/{color_poll.id}", headers=auth_headers(bob["access_token"])).json()

        response = client.patch(
            f"/api/v1/polls/{color_poll.id}/vote",
            json={"option_id": _option_id(poll_json, "Blue")},
            headers=auth_headers(bob["access_token"])
        )

        assert response.status_code == status.HTTP_200_OK
        counts = {o["option_text"]: o["number_of_votes"] for o in response.json()["options"]}
        assert counts == {"Red": 0, "Blue": 1}

    def test_vote_twice(self, client, color_poll, bob, auth_headers):
        poll_json = client.get(f"/api/v1/polls/{color_poll.id}", headers=auth_headers(bob["access_token"])).json()
        client.patch(
            f"/api/v1/polls/{color_poll.id}/vote",
            json={"option_id": _option_id(poll_json, "Blue")},
            headers=auth_headers(bob["access_token"])
        )

        response = client.patch(
            f"/api/v1/polls/{color_poll.id}/vote",
            json={"option_id": _option_id(poll_json, "Red")},
            headers=auth_headers(bob["access_token"])
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["message"] == ErrorMessages.ALREADY_VOTED

    def test_vote_unknown_option(self, client, color_poll, bob, auth_headers):
        response = client.patch(
            f"/api/v1/polls/{color_poll.id}/vote",
            json={"option_id": 999},
            headers=auth_headers(bob["access_token"])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_vote_requires_authentication(self, client, color_poll):
        response = client.patch(f"/api/v1/polls/{color_poll.id}/vote", json={"option_id": 1})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestCloseAndDelete:

    def test_close_poll(self, client, color_poll, alice, auth_headers):
        response = client.patch(f"/api/v1/polls/{color_poll.id}/close", headers=auth_headers(alice["access_token"]))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_open"] is False

    def test_member_cannot_close(self, client, color_poll, bob, auth_headers):
        response = client.patch(f"/api/v1/polls/{color_poll.id}/close", headers=auth_headers(bob["access_token"]))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_poll(self, client, color_poll, alice, auth_headers):
        poll_id = color_poll.id

        response = client.delete(f"/api/v1/polls/{poll_id}", headers=auth_headers(alice["access_token"]))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["poll_id"] == poll_id

        missing = client.get(f"/api/v1/polls/{poll_id}", headers=auth_headers(alice["access_token"]))
        assert missing.status_code == status.HTTP_404_NOT_FOUND

    def test_member_cannot_delete(self, client, color_poll, bob, auth_headers):
        response = client.delete(f"/api/v1/polls/{color_poll.id}", headers=auth_headers(bob["access_token"]))

        assert response.status_code == status.HTTP_403_FORBIDDEN
