"""Integration tests for game route handlers.

Tests the full HTTP stack using HTTPX AsyncClient with the FastAPI app
and mongomock-motor (no real MongoDB required).
"""

import pytest
from httpx import AsyncClient


MISSING_ID = "000000000000000000000000"


async def _create_game(api_client: AsyncClient, name: str = "Hades", **fields) -> dict:
    """Helper to create a game and return the response dict."""
    body = {"name": name, "photoUrl": f"https://img.example/{name.lower()}.jpg"}
    body.update(fields)
    resp = await api_client.post("/api/games", json=body)
    assert resp.status_code == 201
    return resp.json()


async def _create_user(api_client: AsyncClient, name: str = "Ada") -> dict:
    resp = await api_client.post("/api/users", json={"name": name})
    assert resp.status_code == 201
    return resp.json()


async def _play(api_client: AsyncClient, game_id: str, user_id: str, hours: float):
    return await api_client.patch(
        f"/api/games/{game_id}/play", json={"userId": user_id, "hours": hours}
    )


# ---------------------------------------------------------------------------
# Catalog CRUD
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
class TestCreateGame:
    async def test_create_returns_camel_case_document(self, api_client):
        data = await _create_game(
            api_client,
            genres=["Roguelike", "Action"],
            optionalAttributes={"developer": "Supergiant", "year": 2020},
        )

        assert data["_id"]
        assert data["name"] == "Hades"
        assert data["photoUrl"] == "https://img.example/hades.jpg"
        assert data["genres"] == ["Roguelike", "Action"]
        assert data["playTime"] == 0
        assert data["rating"] == 0
        assert data["ratingEnabled"] is True
        assert data["comments"] == []
        assert data["userPlayTimes"] == []
        assert data["userRatings"] == []
        assert data["optionalAttributes"] == {"developer": "Supergiant", "year": 2020}
        assert "createdAt" in data

    async def test_missing_photo_url_is_400(self, api_client):
        resp = await api_client.post("/api/games", json={"name": "Hades"})
        assert resp.status_code == 400
        assert "photoUrl" in resp.json()["message"]

    async def test_blank_name_is_400(self, api_client):
        resp = await api_client.post(
            "/api/games", json={"name": "   ", "photoUrl": "https://img.example/x.jpg"}
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Game name is required"

    async def test_too_many_genres_is_400(self, api_client):
        resp = await api_client.post(
            "/api/games",
            json={
                "name": "Everything",
                "photoUrl": "https://img.example/x.jpg",
                "genres": ["a", "b", "c", "d", "e", "f"],
            },
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "genres exceeds the limit of 5"

    async def test_non_scalar_attribute_is_400(self, api_client):
        resp = await api_client.post(
            "/api/games",
            json={
                "name": "Hades",
                "photoUrl": "https://img.example/x.jpg",
                "optionalAttributes": {"nested": {"a": 1}},
            },
        )
        assert resp.status_code == 400
        assert "message" in resp.json()


@pytest.mark.asyncio
class TestReadGames:
    async def test_list_returns_games_in_creation_order(self, api_client):
        await _create_game(api_client, "Hades")
        await _create_game(api_client, "Celeste")

        resp = await api_client.get("/api/games")

        assert resp.status_code == 200
        assert [g["name"] for g in resp.json()] == ["Hades", "Celeste"]

    async def test_list_empty(self, api_client):
        resp = await api_client.get("/api/games")
        assert resp.status_code == 200
        assert resp.json() == []

    async def test_get_by_id(self, api_client):
        created = await _create_game(api_client)
        resp = await api_client.get(f"/api/games/{created['_id']}")
        assert resp.status_code == 200
        assert resp.json()["_id"] == created["_id"]

    async def test_get_unknown_is_404(self, api_client):
        resp = await api_client.get(f"/api/games/{MISSING_ID}")
        assert resp.status_code == 404
        assert resp.json() == {"message": "Game not found"}

    async def test_get_malformed_id_is_404(self, api_client):
        resp = await api_client.get("/api/games/not-an-id")
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Play / rate / comment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
class TestPlayRateComment:
    async def test_play_returns_both_documents(self, api_client):
        game = await _create_game(api_client)
        user = await _create_user(api_client)

        resp = await _play(api_client, game["_id"], user["_id"], 2.5)

        assert resp.status_code == 200
        data = resp.json()
        assert data["game"]["playTime"] == 2.5
        assert data["game"]["userPlayTimes"] == [{"userId": user["_id"], "playTime": 2.5}]
        assert data["user"]["totalPlayTime"] == 2.5
        assert data["user"]["gamePlayTimes"] == [{"gameId": game["_id"], "playTime": 2.5}]
        assert data["user"]["mostPlayedGameId"] == game["_id"]
        assert data["user"]["mostPlayedGameName"] == "Hades"

    async def test_play_non_positive_hours_is_400(self, api_client):
        game = await _create_game(api_client)
        user = await _create_user(api_client)

        resp = await _play(api_client, game["_id"], user["_id"], 0)

        assert resp.status_code == 400
        assert resp.json()["message"] == "User ID and positive play hours are required"

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    async def test_play_non_finite_hours_is_400_without_writes(self, api_client, literal):
        game = await _create_game(api_client)
        user = await _create_user(api_client)
        raw = f'{{"userId": "{user["_id"]}", "hours": {literal}}}'

        resp = await api_client.patch(
            f"/api/games/{game['_id']}/play",
            content=raw.encode(),
            headers={"Content-Type": "application/json"},
        )

        assert resp.status_code == 400
        assert "hours" in resp.json()["message"]

        game_doc = (await api_client.get(f"/api/games/{game['_id']}")).json()
        assert game_doc["playTime"] == 0
        assert game_doc["userPlayTimes"] == []
        user_doc = (await api_client.get(f"/api/users/{user['_id']}")).json()
        assert user_doc["totalPlayTime"] == 0

    async def test_play_missing_hours_is_400(self, api_client):
        game = await _create_game(api_client)
        resp = await api_client.patch(
            f"/api/games/{game['_id']}/play", json={"userId": "x"}
        )
        assert resp.status_code == 400
        assert "hours" in resp.json()["message"]

    async def test_play_unknown_user_is_404(self, api_client):
        game = await _create_game(api_client)
        resp = await _play(api_client, game["_id"], MISSING_ID, 1)
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"

    async def test_rate_after_play(self, api_client):
        game = await _create_game(api_client)
        user = await _create_user(api_client)
        await _play(api_client, game["_id"], user["_id"], 3)

        resp = await api_client.post(
            f"/api/games/{game['_id']}/rate", json={"userId": user["_id"], "rating": 4}
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["game"]["rating"] == 4
        assert data["game"]["userRatings"] == [{"userId": user["_id"], "rating": 4}]
        assert data["user"]["averageRating"] == 4
        assert data["user"]["gameRatings"] == [{"gameId": game["_id"], "rating": 4}]

    async def test_rate_without_play_is_400(self, api_client):
        game = await _create_game(api_client)
        user = await _create_user(api_client)

        resp = await api_client.post(
            f"/api/games/{game['_id']}/rate", json={"userId": user["_id"], "rating": 4}
        )

        assert resp.status_code == 400
        assert "at least 1 hour" in resp.json()["message"]

    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rate_out_of_range_is_400(self, api_client, rating):
        game = await _create_game(api_client)
        user = await _create_user(api_client)
        await _play(api_client, game["_id"], user["_id"], 3)

        resp = await api_client.post(
            f"/api/games/{game['_id']}/rate", json={"userId": user["_id"], "rating": rating}
        )

        assert resp.status_code == 400

    async def test_rate_fractional_is_400(self, api_client):
        game = await _create_game(api_client)
        resp = await api_client.post(
            f"/api/games/{game['_id']}/rate", json={"userId": "x", "rating": 4.5}
        )
        assert resp.status_code == 400

    async def test_comment_materialized_on_both_sides(self, api_client):
        game = await _create_game(api_client, "Celeste")
        user = await _create_user(api_client, "Bo")
        await _play(api_client, game["_id"], user["_id"], 4)

        resp = await api_client.post(
            f"/api/games/{game['_id']}/comment",
            json={"userId": user["_id"], "content": "Tough but fair"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["game"]["comments"] == [{
            "userId": user["_id"],
            "userName": "Bo",
            "content": "Tough but fair",
            "playTime": 4,
        }]
        assert data["user"]["comments"] == [{
            "gameId": game["_id"],
            "gameName": "Celeste",
            "content": "Tough but fair",
            "playTime": 4,
        }]

    async def test_comments_ordered_longest_play_first(self, api_client):
        game = await _create_game(api_client)
        for name, hours in [("A", 3), ("B", 7), ("C", 1)]:
            user = await _create_user(api_client, name)
            await _play(api_client, game["_id"], user["_id"], hours)
            resp = await api_client.post(
                f"/api/games/{game['_id']}/comment",
                json={"userId": user["_id"], "content": f"{name} was here"},
            )
            assert resp.status_code == 200

        resp = await api_client.get(f"/api/games/{game['_id']}")
        assert [c["playTime"] for c in resp.json()["comments"]] == [7, 3, 1]

    async def test_empty_comment_is_400(self, api_client):
        game = await _create_game(api_client)
        user = await _create_user(api_client)
        await _play(api_client, game["_id"], user["_id"], 3)

        resp = await api_client.post(
            f"/api/games/{game['_id']}/comment",
            json={"userId": user["_id"], "content": ""},
        )

        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Rating status
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
class TestRatingStatus:
    async def test_disable_blocks_rating_and_comment(self, api_client):
        game = await _create_game(api_client)
        user = await _create_user(api_client)
        await _play(api_client, game["_id"], user["_id"], 3)

        resp = await api_client.patch(
            f"/api/games/{game['_id']}/rating-status", json={"enable": False}
        )
        assert resp.status_code == 200
        assert resp.json()["ratingEnabled"] is False

        resp = await api_client.post(
            f"/api/games/{game['_id']}/rate", json={"userId": user["_id"], "rating": 5}
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Rating is disabled for this game"

        resp = await api_client.post(
            f"/api/games/{game['_id']}/comment",
            json={"userId": user["_id"], "content": "hello"},
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Commenting is disabled for this game"

    async def test_re_enable(self, api_client):
        game = await _create_game(api_client)
        await api_client.patch(f"/api/games/{game['_id']}/rating-status", json={"enable": False})

        resp = await api_client.patch(
            f"/api/games/{game['_id']}/rating-status", json={"enable": True}
        )

        assert resp.status_code == 200
        assert resp.json()["ratingEnabled"] is True

    @pytest.mark.parametrize("value", ["false", 0, None])
    async def test_non_boolean_is_400(self, api_client, value):
        game = await _create_game(api_client)
        resp = await api_client.patch(
            f"/api/games/{game['_id']}/rating-status", json={"enable": value}
        )
        assert resp.status_code == 400
        assert "enable" in resp.json()["message"]

    async def test_unknown_game_is_404(self, api_client):
        resp = await api_client.patch(
            f"/api/games/{MISSING_ID}/rating-status", json={"enable": True}
        )
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
class TestDeleteGame:
    async def test_delete_cleans_users(self, api_client):
        game = await _create_game(api_client)
        user = await _create_user(api_client)
        await _play(api_client, game["_id"], user["_id"], 3)
        await api_client.post(
            f"/api/games/{game['_id']}/rate", json={"userId": user["_id"], "rating": 5}
        )

        resp = await api_client.delete(f"/api/games/{game['_id']}")

        assert resp.status_code == 200
        assert resp.json() == {"message": "Game deleted"}
        assert (await api_client.get(f"/api/games/{game['_id']}")).status_code == 404

        user_doc = (await api_client.get(f"/api/users/{user['_id']}")).json()
        assert user_doc["gamePlayTimes"] == []
        assert user_doc["gameRatings"] == []
        assert user_doc["averageRating"] == 0
        assert user_doc["mostPlayedGameId"] is None

    async def test_delete_unknown_is_404(self, api_client):
        resp = await api_client.delete(f"/api/games/{MISSING_ID}")
        assert resp.status_code == 404
        assert resp.json() == {"message": "Game not found"}


@pytest.mark.asyncio
class TestUnknownApiPath:
    async def test_unknown_api_path_is_404(self, api_client):
        resp = await api_client.get("/api/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {"message": "API endpoint not found"}

    async def test_wrong_method_on_known_path_is_405(self, api_client):
        resp = await api_client.put("/api/games", json={})
        assert resp.status_code == 405
        assert resp.json() == {"message": "Method Not Allowed"}
        assert set(resp.headers["allow"].split(", ")) == {"GET", "POST"}

    async def test_wrong_method_on_action_path_is_405(self, api_client):
        game = await _create_game(api_client)
        resp = await api_client.get(f"/api/games/{game['_id']}/play")
        assert resp.status_code == 405
        assert resp.headers["allow"] == "PATCH"
