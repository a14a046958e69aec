import pytest
import requests
from datetime import date
from unittest.mock import Mock

from cinemamax.providers.tmdb_provider import TMDBProvider
from cinemamax.exceptions.catalog import ProviderUnavailableException


def make_response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    return response


@pytest.fixture
def mock_http():
    return Mock()


@pytest.fixture
def provider(mock_http):
    return TMDBProvider("key", base_url="https://tmdb.test/3/", timeout=3, http=mock_http)


FIGHT_CLUB = {
    "id": 550,
    "title": "Fight Club",
    "overview": "An insomniac office worker...",
    "release_date": "1999-10-15",
    "runtime": 139,
    "vote_average": 8.4,
    "vote_count": 26280,
    "poster_path": "/poster.jpg",
    "genres": [{"id": 18, "name": "Drama"}],
    "credits": {
        "crew": [{"name": "Jim Uhls", "job": "Screenplay"}, {"name": "David Fincher", "job": "Director"}],
        "cast": [{"name": f"Actor {i}"} for i in range(8)]
    }
}


def test_get_movie_normalizes_details(provider, mock_http):
    """Test that a details payload becomes a provider movie keyed by its TMDB id."""
    # Setup
    mock_http.get.return_value = make_response(FIGHT_CLUB)

    # Test
    movie = provider.get_movie(550)

    # Verify
    url = mock_http.get.call_args[0][0]
    params = mock_http.get.call_args[1]["params"]
    assert url == "https://tmdb.test/3/movie/550"
    assert params["api_key"] == "key"
    assert params["append_to_response"] == "credits"
    assert mock_http.get.call_args[1]["timeout"] == 3

    assert movie.id == 550
    assert movie.tmdb_id == 550
    assert movie.source == "tmdb"
    assert movie.release_date == date(1999, 10, 15)
    assert movie.genres == "Drama"
    assert movie.director == "David Fincher"
    assert movie.movie_cast == "Actor 0, Actor 1, Actor 2, Actor 3, Actor 4"


def test_get_movie_missing_is_none(provider, mock_http):
    """Test that a 404 from the provider is a miss, not a failure."""
    mock_http.get.return_value = make_response(status_code=404)

    assert provider.get_movie(999999) is None


def test_upstream_error_raises(provider, mock_http):
    mock_http.get.return_value = make_response(status_code=500)

    with pytest.raises(ProviderUnavailableException) as error:
        provider.get_movie(550)

    assert error.value.status_code == 500


def test_network_error_raises(provider, mock_http):
    mock_http.get.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(ProviderUnavailableException):
        provider.get_popular()


def test_missing_api_key_raises_without_request(mock_http):
    """Test that a provider without a key never calls out."""
    provider = TMDBProvider("", http=mock_http)

    with pytest.raises(ProviderUnavailableException):
        provider.search_movies("alien")

    mock_http.get.assert_not_called()


def test_search_envelope_maps_genre_ids(provider, mock_http):
    """Test that list results map genre ids through the built-in genre table."""
    mock_http.get.return_value = make_response({
        "page": 2,
        "total_pages": 7,
        "total_results": 133,
        "results": [
            {"id": 348, "title": "Alien", "genre_ids": [27, 878, 123456], "release_date": ""},
        ]
    })

    result = provider.search_movies("alien", page=2)

    params = mock_http.get.call_args[1]["params"]
    assert params["query"] == "alien"
    assert params["page"] == 2
    assert result["page"] == 2
    assert result["total_pages"] == 7
    assert result["total_results"] == 133
    movie = result["results"][0]
    assert movie.genres == "Horror, Science Fiction"
    assert movie.release_date is None
    assert movie.director is None


def test_trending_and_genre_paths(provider, mock_http):
    mock_http.get.return_value = make_response({"results": []})

    provider.get_trending("day")
    assert mock_http.get.call_args[0][0].endswith("/trending/movie/day")

    provider.get_by_genre(28, page=3)
    assert mock_http.get.call_args[0][0].endswith("/discover/movie")
    assert mock_http.get.call_args[1]["params"]["with_genres"] == 28


def test_get_genres(provider, mock_http):
    mock_http.get.return_value = make_response({"genres": [{"id": 28, "name": "Action"}]})

    assert provider.get_genres() == [{"id": 28, "name": "Action"}]
