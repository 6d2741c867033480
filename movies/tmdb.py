import requests
from django.conf import settings

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TIMEOUT_SECONDS = 10


def tmdb_get(path, params=None):
    if params is None:
        params = {}
    params["api_key"] = settings.TMDB_API_KEY
    response = requests.get(
        f"{TMDB_BASE_URL}{path}", params=params, timeout=TIMEOUT_SECONDS
    )
    response.raise_for_status()
    return response.json()


def is_configured():
    return bool(settings.TMDB_API_KEY)


def fetch_movie_details(tmdb_id):
    return tmdb_get(f"/movie/{tmdb_id}")


def fetch_movie_credits(tmdb_id):
    return tmdb_get(f"/movie/{tmdb_id}/credits")
