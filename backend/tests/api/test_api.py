import pytest
from unittest.mock import Mock
from fastapi.testclient import TestClient

from cinemamax.main import app
from cinemamax.db.database import get_db
from cinemamax.db.models import AdminSessionORM, UserORM
from cinemamax.domain.models import Movie
from cinemamax.service.dependencies import get_catalog_provider
from cinemamax.exceptions.catalog import ProviderUnavailableException


@pytest.fixture
def mock_provider():
    provider = Mock()
    provider.get_movie.return_value = None
    provider.search_movies.side_effect = ProviderUnavailableException("down")
    provider.get_genres.side_effect = ProviderUnavailableException("down")
    return provider


@pytest.fixture
def client(session_factory, mock_provider):
    """Serve the app against the in-memory test database."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_provider] = lambda: mock_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, username="alice", email="a@x.com", password="secret123", name="Alice A"):
    return client.post("/auth/signup", json={
        "username": username,
        "email": email,
        "password": password,
        "name": name
    })


@pytest.fixture
def user_token(client):
    return signup(client).json()["token"]


@pytest.fixture
def admin_token(client, make_user):
    make_user("admin", role="admin", password="admin123")
    response = client.post("/auth/admin/login", json={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    return response.json()["token"]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_signup_then_signin_by_username(client):
    """Test that a new account can sign in with its username."""
    # Test
    created = signup(client)
    signed_in = client.post("/auth/signin", json={"email": "alice", "password": "secret123"})

    # Verify
    assert created.status_code == 201
    body = created.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["first_name"] == "Alice"
    assert body["user"]["last_name"] == "A"
    assert body["user"]["role"] == "user"
    assert "hashed_password" not in body["user"]

    assert signed_in.status_code == 200
    assert signed_in.json()["message"] == "Login successful"
    assert signed_in.json()["user"]["id"] == body["user"]["id"]


def test_signup_duplicate_is_conflict(client):
    signup(client)
    response = signup(client, email="other@x.com")

    assert response.status_code == 409
    assert "error" in response.json()


def test_signin_wrong_password(client):
    signup(client)
    response = client.post("/auth/signin", json={"email": "a@x.com", "password": "nope"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid credentials"}


def test_validation_error_is_bad_request(client):
    """Test that malformed bodies use the common error envelope."""
    response = client.post("/auth/signup", json={"username": "bob", "email": "not-an-email", "password": "x", "name": "Bob"})

    assert response.status_code == 400
    assert "email" in response.json()["error"]


LONG_EMAIL = "a@" + "b" * 50 + "." + "c" * 50 + ".com"


@pytest.mark.parametrize("field, value", [
    ("email", LONG_EMAIL),
    ("name", "A" * 60),
    ("username", "u" * 51),
])
def test_signup_rejects_values_wider_than_columns(client, session, field, value):
    """Test that oversized signup fields are a 400 and create no account."""
    body = {"username": "alice", "email": "a@x.com", "password": "secret123", "name": "Alice A"}
    body[field] = value

    response = client.post("/auth/signup", json=body)

    assert response.status_code == 400
    assert session.query(UserORM).count() == 0


def test_current_user(client, user_token):
    response = client.get("/auth/user", headers=auth_header(user_token))

    assert response.status_code == 200
    assert response.json()["user"]["username"] == "alice"


def test_missing_token_is_unauthorized(client):
    response = client.get("/users/profile")

    assert response.status_code == 401
    assert response.json() == {"error": "No authorization token"}


def test_update_profile(client, user_token):
    response = client.put("/users/profile", json={"last_name": "Anders"}, headers=auth_header(user_token))

    assert response.status_code == 200
    assert response.json()["user"]["last_name"] == "Anders"


def test_update_profile_rejects_long_email(client, user_token):
    response = client.put("/users/profile", json={"email": LONG_EMAIL}, headers=auth_header(user_token))

    assert response.status_code == 400
    assert "email" in response.json()["error"]


def test_admin_login_wrong_password_writes_no_session(client, make_user, session):
    """Test that a failed admin login opens no session."""
    make_user("admin", role="admin", password="admin123")

    response = client.post("/auth/admin/login", json={"username": "admin", "password": "wrong"})

    assert response.status_code == 400
    assert session.query(AdminSessionORM).count() == 0


def test_unknown_movie_is_not_found(client):
    response = client.get("/movies/999999")

    assert response.status_code == 404
    assert "error" in response.json()


def test_movie_from_provider(client, mock_provider):
    """Test that a movie missing locally is served from the provider."""
    mock_provider.get_movie.return_value = Movie(id=550, tmdb_id=550, title="Fight Club", source="tmdb")

    response = client.get("/movies/550")

    assert response.status_code == 200
    assert response.json()["movie"]["source"] == "tmdb"
    assert response.json()["reviews"] == []


def test_list_and_search_local_movies(client, make_movie):
    make_movie("The Dark Knight", genres="Action, Crime")
    make_movie("Inception", genres="Action, Science Fiction")
    make_movie("Draft Movie", status="draft")

    listing = client.get("/movies", params={"page": 1, "limit": 20}).json()
    found = client.get("/movies/search/dark").json()

    assert listing["total"] == 2
    assert {movie["title"] for movie in listing["movies"]} == {"The Dark Knight", "Inception"}
    assert [movie["title"] for movie in found["results"]] == ["The Dark Knight"]


def test_search_provider_failure_is_empty(client):
    response = client.get("/movies/search/nothing-here")

    assert response.status_code == 200
    assert response.json()["results"] == []


def test_genres_fall_back_to_builtin_list(client):
    genres = client.get("/movies/genres/list").json()["genres"]

    assert {"id": 28, "name": "Action"} in genres


def test_invalid_paging_is_bad_request(client):
    assert client.get("/movies", params={"limit": 0}).status_code == 400


def test_review_lifecycle(client, user_token, make_movie):
    """Test create, duplicate, update and delete of a review."""
    movie = make_movie("Alien")
    headers = auth_header(user_token)

    created = client.post(f"/users/reviews/{movie.id}", json={"rating": 8, "comment": "great"}, headers=headers)
    duplicate = client.post(f"/users/reviews/{movie.id}", json={"rating": 8, "comment": "great"}, headers=headers)
    updated = client.put(f"/users/reviews/{movie.id}", json={"rating": 9, "comment": "better"}, headers=headers)

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert updated.status_code == 200
    assert updated.json()["rating"] == 9

    details = client.get(f"/movies/{movie.id}").json()
    assert details["movie"]["review_count"] == 1
    assert details["movie"]["average_rating"] == 9
    assert details["reviews"][0]["comment"] == "better"

    assert client.delete(f"/users/reviews/{movie.id}", headers=headers).status_code == 200
    assert client.delete(f"/users/reviews/{movie.id}", headers=headers).status_code == 404


def test_review_rating_out_of_range(client, user_token, make_movie):
    movie = make_movie("Alien")

    response = client.post(f"/users/reviews/{movie.id}", json={"rating": 11}, headers=auth_header(user_token))

    assert response.status_code == 400
    assert client.get("/users/reviews", headers=auth_header(user_token)).json() == []


def test_favorites_round_trip(client, user_token, make_movie):
    """Test adding, listing and removing a favorite; removing twice is fine."""
    movie = make_movie("Alien", poster_path="/alien.jpg")
    headers = auth_header(user_token)

    assert client.post(f"/users/favorites/{movie.id}", headers=headers).status_code == 201
    assert client.post(f"/users/favorites/{movie.id}", headers=headers).status_code == 409

    favorites = client.get("/users/favorites", headers=headers).json()
    assert [favorite["movie_id"] for favorite in favorites] == [movie.id]
    assert favorites[0]["title"] == "Alien"

    assert client.delete(f"/users/favorites/{movie.id}", headers=headers).status_code == 200
    assert client.delete(f"/users/favorites/{movie.id}", headers=headers).status_code == 200
    assert client.get("/users/favorites", headers=headers).json() == []


def test_favorite_unknown_movie(client, user_token):
    response = client.post("/users/favorites/424242", headers=auth_header(user_token))

    assert response.status_code == 404


def test_watchlist_and_history(client, user_token, make_movie):
    movie = make_movie("Alien")
    headers = auth_header(user_token)

    assert client.post(f"/users/watchlist/{movie.id}", headers=headers).status_code == 201
    assert client.post(f"/users/watchlist/{movie.id}", headers=headers).status_code == 409
    assert client.post(f"/users/history/{movie.id}", json={"progress_seconds": 300}, headers=headers).status_code == 201
    assert client.post(f"/users/history/{movie.id}", headers=headers).status_code == 201

    assert len(client.get("/users/watchlist", headers=headers).json()) == 1
    assert len(client.get("/users/history", headers=headers).json()) == 2
    assert client.delete(f"/users/watchlist/{movie.id}", headers=headers).status_code == 200


def test_admin_routes_need_admin_session(client, user_token):
    """Test that a regular user's token is not enough for the admin API."""
    assert client.get("/admin/stats").status_code == 401
    assert client.get("/admin/stats", headers=auth_header(user_token)).status_code == 401


def test_admin_stats_and_signout(client, admin_token, user_token):
    """Test that an admin session grants access until signout."""
    headers = auth_header(admin_token)

    stats = client.get("/admin/stats", headers=headers)
    assert stats.status_code == 200
    assert stats.json()["total_users"] == 1

    assert client.get("/auth/admin/verify", headers=headers).json()["user"]["username"] == "admin"

    assert client.post("/auth/signout", headers=headers).status_code == 200
    assert client.get("/admin/stats", headers=headers).status_code == 401


def test_second_admin_session_survives_first_signout(client, admin_token):
    """Test that each admin login gets its own session."""
    second = client.post("/auth/admin/login", json={"username": "admin", "password": "admin123"}).json()["token"]
    assert second != admin_token

    assert client.post("/auth/signout", headers=auth_header(admin_token)).status_code == 200

    assert client.get("/auth/admin/verify", headers=auth_header(admin_token)).status_code == 401
    assert client.get("/auth/admin/verify", headers=auth_header(second)).status_code == 200


def test_signout_without_token(client):
    response = client.post("/auth/signout")

    assert response.status_code == 200
    assert response.json() == {"message": "Signed out successfully"}


def test_admin_manages_movies(client, admin_token):
    """Test adding, editing and deleting a movie through the admin API."""
    headers = auth_header(admin_token)

    created = client.post("/admin/movies", json={"title": "Heat", "genres": "Action, Crime"}, headers=headers)
    assert created.status_code == 201
    movie_id = created.json()["id"]
    assert created.json()["status"] == "published"

    updated = client.put(f"/admin/movies/{movie_id}", json={"runtime": 170}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["runtime"] == 170

    stats = client.get("/admin/movies/stats", headers=headers).json()
    assert stats["total"] == 1

    assert client.delete(f"/admin/movies/{movie_id}", headers=headers).status_code == 200
    assert client.delete(f"/admin/movies/{movie_id}", headers=headers).status_code == 404


def test_admin_movie_fields_wider_than_columns(client, admin_token):
    headers = auth_header(admin_token)

    created = client.post("/admin/movies", json={"title": "Heat", "director": "M" * 101}, headers=headers)
    assert created.status_code == 400
    assert "director" in created.json()["error"]

    movie_id = client.post("/admin/movies", json={"title": "Heat"}, headers=headers).json()["id"]
    updated = client.put(f"/admin/movies/{movie_id}", json={"poster_path": "/" + "p" * 500}, headers=headers)
    assert updated.status_code == 400
    assert "poster_path" in updated.json()["error"]


def test_admin_import_movie(client, admin_token, mock_provider):
    """Test importing a provider movie and rejecting a second import."""
    headers = auth_header(admin_token)
    mock_provider.get_movie.return_value = Movie(id=550, tmdb_id=550, title="Fight Club", source="tmdb")

    first = client.post("/admin/movies/import/550", headers=headers)
    second = client.post("/admin/movies/import/550", headers=headers)

    assert first.status_code == 201
    assert first.json()["tmdb_id"] == 550
    assert first.json()["source"] == "local"
    assert second.status_code == 409


def test_admin_manages_users(client, admin_token, user_token):
    headers = auth_header(admin_token)

    users = client.get("/admin/users", headers=headers).json()
    assert users["total"] == 1
    user_id = users["users"][0]["id"]

    updated = client.put(f"/admin/users/{user_id}", json={"is_active": False}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["user"]["is_active"] is False

    # the deactivated user is locked out
    assert client.get("/users/profile", headers=auth_header(user_token)).status_code == 401

    assert client.delete(f"/admin/users/{user_id}", headers=headers).status_code == 200
    assert client.get("/admin/users", headers=headers).json()["total"] == 0


def test_admin_user_update_rejects_long_email(client, admin_token, user_token):
    headers = auth_header(admin_token)
    user_id = client.get("/admin/users", headers=headers).json()["users"][0]["id"]

    response = client.put(f"/admin/users/{user_id}", json={"email": LONG_EMAIL}, headers=headers)

    assert response.status_code == 400
    assert "email" in response.json()["error"]


def test_moderator_cannot_change_roles(client, make_user, user_token):
    make_user("moderator", role="moderator", password="mod123")
    token = client.post("/auth/admin/login", json={"username": "moderator", "password": "mod123"}).json()["token"]
    headers = auth_header(token)
    user_id = client.get("/admin/users", headers=headers).json()["users"][0]["id"]

    response = client.put(f"/admin/users/{user_id}", json={"role": "admin"}, headers=headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Only super admin can change user roles"}


def test_admin_activity_and_health(client, admin_token, user_token):
    headers = auth_header(admin_token)

    activity = client.get("/admin/activity", headers=headers).json()
    health = client.get("/admin/health", headers=headers).json()
    purge = client.post("/admin/sessions/purge", headers=headers).json()

    assert [item["activity_type"] for item in activity] == ["signup"]
    assert health["status"] == "healthy"
    assert purge == {"removed": 0}
