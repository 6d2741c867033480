from io import StringIO
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from nominations.models import Category, Nomination
from .models import Movie, MovieCredit, MovieView, Person
from .services.credits import ingest_credits_for_movie

User = get_user_model()


class MoviePoolTests(TestCase):
    @override_settings(NEW_RELEASE_MIN_YEAR=2025)
    def test_pool_for_year(self):
        self.assertEqual(Movie.pool_for_year(2025), Movie.NEW_RELEASE)
        self.assertEqual(Movie.pool_for_year(2026), Movie.NEW_RELEASE)
        self.assertEqual(Movie.pool_for_year(1942), Movie.CLASSIC)
        self.assertEqual(Movie.pool_for_year(None), Movie.ALL)

    @override_settings(NEW_RELEASE_MIN_YEAR=2025)
    def test_pool_set_on_create(self):
        movie = Movie.objects.create(tmdb_id=1, title="Casablanca", year=1942)
        self.assertEqual(movie.pool, Movie.CLASSIC)

    def test_explicit_pool_kept(self):
        movie = Movie.objects.create(
            tmdb_id=2, title="Casablanca", year=1942, pool=Movie.ALL
        )
        self.assertEqual(movie.pool, Movie.ALL)


class MovieAPITests(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(username="alice", password="testpass123")
        self.bob = User.objects.create_user(username="bob", password="testpass123")
        self.anora = Movie.objects.create(
            tmdb_id=1064213, title="Anora", year=2024, pool=Movie.NEW_RELEASE
        )
        self.conclave = Movie.objects.create(
            tmdb_id=974576, title="Conclave", year=2024, pool=Movie.NEW_RELEASE
        )
        MovieView.objects.create(movie=self.anora, user=self.alice)
        MovieView.objects.create(movie=self.anora, user=self.bob)
        MovieView.objects.create(movie=self.conclave, user=self.alice)
        self.client.force_authenticate(user=self.alice)

    def test_list_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse("movie-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_includes_viewers_and_validity(self):
        response = self.client.get(reverse("movie-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        by_title = {item["title"]: item for item in response.data}
        self.assertEqual(by_title["Anora"]["viewer_count"], 2)
        self.assertTrue(by_title["Anora"]["is_valid"])
        self.assertEqual(by_title["Conclave"]["viewer_count"], 1)
        self.assertFalse(by_title["Conclave"]["is_valid"])
        self.assertEqual(
            {view["user"]["username"] for view in by_title["Anora"]["views"]},
            {"alice", "bob"},
        )

    def test_list_filters(self):
        response = self.client.get(reverse("movie-list"), {"valid": "true"})
        self.assertEqual([item["title"] for item in response.data], ["Anora"])

        response = self.client.get(reverse("movie-list"), {"search": "conc"})
        self.assertEqual([item["title"] for item in response.data], ["Conclave"])

        response = self.client.get(reverse("movie-list"), {"pool": Movie.CLASSIC})
        self.assertEqual(response.data, [])

    def test_retrieve_single_movie(self):
        response = self.client.get(reverse("movie-detail", args=[self.anora.tmdb_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["title"], "Anora")
        self.assertEqual(response.data["viewer_count"], 2)

    def test_delete_movie_by_tmdb_id_cascades(self):
        director = MovieCredit.objects.create(
            movie=self.anora,
            person=Person.objects.create(tmdb_id=1, name="Sean Baker"),
            role=MovieCredit.DIRECTOR,
        )
        picture = Category.objects.create(name="Best Picture", type=Category.FILM)
        best_director = Category.objects.create(
            name="Best Director", type=Category.DIRECTOR
        )
        Nomination.objects.create(
            user=self.alice, category=picture, rank=1, movie=self.anora
        )
        Nomination.objects.create(
            user=self.alice, category=best_director, rank=1, movie_credit=director
        )

        response = self.client.delete(
            reverse("movie-detail", args=[self.anora.tmdb_id])
        )

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Movie.objects.filter(tmdb_id=1064213).exists())
        self.assertFalse(MovieView.objects.filter(movie_id=self.anora.id).exists())
        self.assertFalse(MovieCredit.objects.exists())
        self.assertFalse(Nomination.objects.exists())
        # other movies stay logged
        self.assertTrue(Movie.objects.filter(pk=self.conclave.pk).exists())
        self.assertEqual(MovieView.objects.filter(movie=self.conclave).count(), 1)

    def test_delete_unknown_movie(self):
        response = self.client.delete(reverse("movie-detail", args=[424242]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Movie.objects.count(), 2)

    def test_delete_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.client.delete(
            reverse("movie-detail", args=[self.anora.tmdb_id])
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertTrue(Movie.objects.filter(pk=self.anora.pk).exists())

    def test_user_list(self):
        response = self.client.get(reverse("user-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data,
            [
                {"id": self.alice.id, "username": "alice"},
                {"id": self.bob.id, "username": "bob"},
            ],
        )

    def test_user_list_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse("user-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(TMDB_API_KEY="", NEW_RELEASE_MIN_YEAR=2025)
class SuggestMovieTests(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(username="alice", password="testpass123")
        self.bob = User.objects.create_user(username="bob", password="testpass123")
        self.url = reverse("movie-suggest")
        self.client.force_authenticate(user=self.alice)

    def test_creates_movie_with_viewers(self):
        response = self.client.post(
            self.url,
            {
                "tmdb_id": 1184918,
                "title": "The Wild Robot",
                "year": 2025,
                "original_language": "en",
                "viewer_ids": [self.alice.id, self.bob.id],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["pool"], Movie.NEW_RELEASE)
        self.assertEqual(response.data["viewer_count"], 2)
        self.assertTrue(response.data["is_valid"])

    def test_existing_movie_gains_new_viewers_only(self):
        movie = Movie.objects.create(tmdb_id=289, title="Casablanca", year=1942)
        MovieView.objects.create(movie=movie, user=self.alice)

        response = self.client.post(
            self.url,
            {
                "tmdb_id": 289,
                "title": "Casablanca",
                "viewer_ids": [self.alice.id, self.bob.id, self.bob.id],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pool"], Movie.CLASSIC)
        self.assertEqual(MovieView.objects.filter(movie=movie).count(), 2)

    def test_blank_language_stored_as_null(self):
        response = self.client.post(
            self.url,
            {
                "tmdb_id": 7,
                "title": "Flow",
                "year": 2024,
                "original_language": "",
                "viewer_ids": [self.alice.id],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(Movie.objects.get(tmdb_id=7).original_language)

    def test_unknown_viewer_rejected(self):
        response = self.client.post(
            self.url,
            {"tmdb_id": 1, "title": "Nobody", "viewer_ids": [999999]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("viewer_ids", response.data)
        self.assertFalse(Movie.objects.exists())

    @override_settings(TMDB_API_KEY="test-key")
    @mock.patch("movies.views.ingest_credits_for_movie")
    def test_ingests_credits_when_configured(self, ingest):
        response = self.client.post(
            self.url,
            {"tmdb_id": 1, "title": "Anora", "year": 2024, "viewer_ids": [self.alice.id]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        ingest.assert_called_once()

    @override_settings(TMDB_API_KEY="test-key")
    @mock.patch(
        "movies.views.ingest_credits_for_movie",
        side_effect=requests.ConnectionError("down"),
    )
    def test_tmdb_failure_does_not_fail_request(self, ingest):
        response = self.client.post(
            self.url,
            {"tmdb_id": 1, "title": "Anora", "year": 2024, "viewer_ids": [self.alice.id]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Movie.objects.filter(tmdb_id=1).exists())

    @mock.patch("movies.views.ingest_credits_for_movie")
    def test_skips_credits_without_api_key(self, ingest):
        self.client.post(
            self.url,
            {"tmdb_id": 1, "title": "Anora", "viewer_ids": [self.alice.id]},
            format="json",
        )

        ingest.assert_not_called()


class ToggleSeenTests(APITestCase):
    def setUp(self):
        self.alice = User.objects.create_user(username="alice", password="testpass123")
        self.bob = User.objects.create_user(username="bob", password="testpass123")
        self.movie = Movie.objects.create(tmdb_id=42, title="Anora", year=2024)
        MovieView.objects.create(movie=self.movie, user=self.alice)
        self.url = reverse("movie-toggle-seen")
        self.client.force_authenticate(user=self.alice)

    def test_toggle_seen(self):
        response = self.client.post(
            self.url,
            {"tmdb_id": 42, "user_id": self.alice.id, "has_seen": False},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(
            MovieView.objects.get(movie=self.movie, user=self.alice).has_seen
        )
        # unseen entries still count as viewers
        self.assertEqual(response.data["viewer_count"], 1)

    def test_unknown_movie(self):
        response = self.client.post(
            self.url,
            {"tmdb_id": 7, "user_id": self.alice.id, "has_seen": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "Movie not found.")

    def test_user_without_log_entry(self):
        response = self.client.post(
            self.url,
            {"tmdb_id": 42, "user_id": self.bob.id, "has_seen": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(MovieView.objects.filter(user=self.bob).exists())


class IngestCreditsTests(TestCase):
    CREDITS = {
        "cast": [
            {"id": 1, "name": "Mikey Madison", "character": "Ani", "order": 0, "gender": 1},
            {"id": 2, "name": "Mark Eydelshteyn", "character": "Vanya", "order": 1, "gender": 2},
        ],
        "crew": [
            {"id": 3, "name": "Sean Baker", "job": "Director", "gender": 2},
            {"id": 3, "name": "Sean Baker", "job": "Editor", "gender": 2},
        ],
    }

    def setUp(self):
        self.movie = Movie.objects.create(tmdb_id=1064213, title="Anora", year=2024)

    @mock.patch("movies.services.credits.fetch_movie_credits")
    def test_ingests_cast_and_directors(self, fetch):
        fetch.return_value = self.CREDITS

        written = ingest_credits_for_movie(self.movie)

        self.assertEqual(written, 3)
        fetch.assert_called_once_with(1064213)
        lead = MovieCredit.objects.get(person__name="Mikey Madison")
        self.assertEqual(lead.role, MovieCredit.ACTOR)
        self.assertEqual(lead.billing_order, 0)
        self.assertEqual(lead.person.gender, Person.GENDER_FEMALE)
        director = MovieCredit.objects.get(role=MovieCredit.DIRECTOR)
        self.assertEqual(director.person.name, "Sean Baker")

    @mock.patch("movies.services.credits.fetch_movie_credits")
    def test_running_twice_does_not_duplicate(self, fetch):
        fetch.return_value = self.CREDITS

        ingest_credits_for_movie(self.movie)
        ingest_credits_for_movie(self.movie)

        self.assertEqual(MovieCredit.objects.filter(movie=self.movie).count(), 3)
        self.assertEqual(Person.objects.count(), 3)


class ManagementCommandTests(TestCase):
    def test_seed_categories_is_idempotent(self):
        out = StringIO()
        call_command("seed_categories", stdout=out)
        first = Category.objects.count()
        call_command("seed_categories", stdout=out)

        self.assertGreater(first, 0)
        self.assertEqual(Category.objects.count(), first)
        self.assertTrue(
            Category.objects.filter(
                name="Best Foreign Language Film", pool=Movie.ALL
            ).exists()
        )

    @override_settings(TMDB_API_KEY="")
    def test_tmdb_commands_require_api_key(self):
        with self.assertRaises(CommandError):
            call_command("ingest_credits", stdout=StringIO())
        with self.assertRaises(CommandError):
            call_command("backfill_language", stdout=StringIO())

    @override_settings(TMDB_API_KEY="test-key")
    @mock.patch("movies.tmdb.fetch_movie_details")
    def test_backfill_language(self, fetch):
        fetch.return_value = {"original_language": "fr"}
        movie = Movie.objects.create(tmdb_id=5, title="Emilia Perez", year=2024)

        call_command("backfill_language", stdout=StringIO())

        movie.refresh_from_db()
        self.assertEqual(movie.original_language, "fr")

    @override_settings(TMDB_API_KEY="test-key")
    @mock.patch("movies.tmdb.fetch_movie_details")
    def test_backfill_language_fills_blank_values(self, fetch):
        fetch.return_value = {"original_language": "lv"}
        movie = Movie.objects.create(
            tmdb_id=6, title="Flow", year=2024, original_language=""
        )
        Movie.objects.create(
            tmdb_id=8, title="Anora", year=2024, original_language="en"
        )

        call_command("backfill_language", stdout=StringIO())

        movie.refresh_from_db()
        self.assertEqual(movie.original_language, "lv")
        fetch.assert_called_once_with(6)
