from datetime import datetime, timezone as dt_timezone
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from movies.models import Movie, MovieCredit, MovieView, Person
from .deadline import OPEN_ENDED, Deadline, parse_deadline
from .exceptions import Forbidden, InvalidArgument, NotFound, Unauthenticated
from .models import Category, Nomination
from .services.eligibility import cap_credits_per_movie, resolve_eligible
from .services.store import (
    fetch_nominations,
    get_completed_category_ids,
    get_nominations,
)
from .services.submission import validate_and_save

User = get_user_model()

OPEN = Deadline(closes_at=OPEN_ENDED)
CLOSED = Deadline(
    closes_at=datetime(2026, 1, 1, tzinfo=dt_timezone.utc),
    clock=lambda: datetime(2026, 1, 2, tzinfo=dt_timezone.utc),
)


class NominationFixtures:
    """Users, movies and credits shared by the test cases below."""

    def setUp(self):
        self.alice = User.objects.create_user(
            username="alice", email="alice@example.com", password="testpass123"
        )
        self.bob = User.objects.create_user(
            username="bob", email="bob@example.com", password="testpass123"
        )
        self.carol = User.objects.create_user(
            username="carol", email="carol@example.com", password="testpass123"
        )
        self._next_tmdb_id = 1000

    def make_movie(self, title, pool=Movie.NEW_RELEASE, viewers=2, language="en"):
        self._next_tmdb_id += 1
        movie = Movie.objects.create(
            tmdb_id=self._next_tmdb_id,
            title=title,
            year=2025,
            pool=pool,
            original_language=language,
        )
        for user in [self.alice, self.bob, self.carol][:viewers]:
            MovieView.objects.create(movie=movie, user=user)
        return movie

    def make_credit(self, movie, name, role=MovieCredit.ACTOR, order=None, gender=None):
        self._next_tmdb_id += 1
        person = Person.objects.create(
            tmdb_id=self._next_tmdb_id, name=name, gender=gender
        )
        return MovieCredit.objects.create(
            movie=movie, person=person, role=role, billing_order=order
        )


class EligibilityTests(NominationFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.best_picture = Category.objects.create(
            name="Best Picture", type=Category.FILM, pool=Movie.NEW_RELEASE
        )

    def test_film_category_requires_two_viewers(self):
        seen_twice = self.make_movie("Anora", viewers=2)
        self.make_movie("Babygirl", viewers=1)
        self.make_movie("Conclave", viewers=0)

        _, eligible = resolve_eligible(self.best_picture.id)

        self.assertEqual([m.id for m in eligible], [seen_twice.id])

    def test_film_category_sorted_by_title(self):
        self.make_movie("Wicked")
        self.make_movie("Anora")
        self.make_movie("Memoir of a Snail")

        _, eligible = resolve_eligible(self.best_picture.id)

        self.assertEqual(
            [m.title for m in eligible], ["Anora", "Memoir of a Snail", "Wicked"]
        )

    def test_pool_matching(self):
        new = self.make_movie("New One", pool=Movie.NEW_RELEASE)
        wildcard = self.make_movie("Any Pool", pool=Movie.ALL)
        self.make_movie("Old One", pool=Movie.CLASSIC)

        _, eligible = resolve_eligible(self.best_picture.id)

        self.assertEqual({m.id for m in eligible}, {new.id, wildcard.id})

    def test_all_pool_category_accepts_every_pool(self):
        category = Category.objects.create(
            name="Best Picture", type=Category.FILM, pool=Movie.ALL
        )
        self.make_movie("New One", pool=Movie.NEW_RELEASE)
        self.make_movie("Old One", pool=Movie.CLASSIC)

        _, eligible = resolve_eligible(category.id)

        self.assertEqual(len(eligible), 2)

    def test_eligible_movies_carry_viewer_count(self):
        self.make_movie("Anora", viewers=3)

        _, eligible = resolve_eligible(self.best_picture.id)

        self.assertEqual(eligible[0].viewer_count, 3)

    def test_foreign_language_category_excludes_english_and_unknown(self):
        category = Category.objects.create(
            name="Best Foreign Language Film",
            type=Category.FILM,
            pool=Movie.NEW_RELEASE,
        )
        french = self.make_movie("Emilia Perez", language="fr")
        self.make_movie("Anora", language="en")
        self.make_movie("Mystery Film", language=None)

        _, eligible = resolve_eligible(category.id)

        self.assertEqual([m.id for m in eligible], [french.id])

    def test_empty_category_returns_empty_list(self):
        _, eligible = resolve_eligible(self.best_picture.id)
        self.assertEqual(eligible, [])

    def test_unknown_category_raises_not_found(self):
        with self.assertRaises(NotFound):
            resolve_eligible(999999)

    def test_credit_included_with_two_viewers(self):
        category = Category.objects.create(
            id=10, name="Best Performance", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Anora", viewers=2)
        credit = self.make_credit(movie, "Mikey Madison", order=0)

        _, eligible = resolve_eligible(10)

        self.assertEqual(category.id, 10)
        self.assertIn(credit.id, [c.id for c in eligible])

    def test_credit_excluded_with_one_viewer(self):
        Category.objects.create(
            id=10, name="Best Performance", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Anora", viewers=1)
        credit = self.make_credit(movie, "Mikey Madison", order=0)

        _, eligible = resolve_eligible(10)

        self.assertNotIn(credit.id, [c.id for c in eligible])

    def test_director_category_only_returns_directors(self):
        category = Category.objects.create(
            name="Best Director", type=Category.DIRECTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Anora")
        director = self.make_credit(movie, "Sean Baker", role=MovieCredit.DIRECTOR)
        self.make_credit(movie, "Mikey Madison", order=0)

        _, eligible = resolve_eligible(category.id)

        self.assertEqual([c.id for c in eligible], [director.id])

    def test_credits_sorted_by_billing_then_name(self):
        category = Category.objects.create(
            name="Best Performance", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Anora")
        third = self.make_credit(movie, "Yura Borisov", order=2)
        first = self.make_credit(movie, "Mikey Madison", order=0)
        second_b = self.make_credit(movie, "Mark Eydelshteyn", order=1)
        second_a = self.make_credit(movie, "Karren Karagulian", order=1)
        unbilled = self.make_credit(movie, "Aaron Extra", order=None)

        _, eligible = resolve_eligible(category.id)

        self.assertEqual(
            [c.id for c in eligible],
            [first.id, second_a.id, second_b.id, third.id, unbilled.id],
        )

    def test_lead_actress_filters_gender_and_billing(self):
        category = Category.objects.create(
            name="Best Actress", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Anora")
        lead = self.make_credit(movie, "Mikey Madison", order=0, gender=Person.GENDER_FEMALE)
        edge = self.make_credit(movie, "Lindsey Normington", order=2, gender=Person.GENDER_FEMALE)
        self.make_credit(movie, "Mark Eydelshteyn", order=1, gender=Person.GENDER_MALE)
        self.make_credit(movie, "Vache Tovmasyan", order=5, gender=Person.GENDER_FEMALE)
        self.make_credit(movie, "Unknown Order", order=None, gender=Person.GENDER_FEMALE)

        _, eligible = resolve_eligible(category.id)

        self.assertEqual([c.id for c in eligible], [lead.id, edge.id])
        for credit in eligible:
            self.assertEqual(credit.person.gender, Person.GENDER_FEMALE)
            self.assertLessEqual(credit.billing_order, 2)

    def test_supporting_actor_filters_gender_and_billing(self):
        category = Category.objects.create(
            name="Best Supporting Actor", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Anora")
        self.make_credit(movie, "Mark Eydelshteyn", order=1, gender=Person.GENDER_MALE)
        supporting = self.make_credit(movie, "Yura Borisov", order=3, gender=Person.GENDER_MALE)
        self.make_credit(movie, "Lindsey Normington", order=4, gender=Person.GENDER_FEMALE)

        _, eligible = resolve_eligible(category.id)

        self.assertEqual([c.id for c in eligible], [supporting.id])
        for credit in eligible:
            self.assertEqual(credit.person.gender, Person.GENDER_MALE)
            self.assertGreaterEqual(credit.billing_order, 2)

    def test_acting_category_capped_per_movie(self):
        category = Category.objects.create(
            name="Best Supporting Actress", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        crowded = self.make_movie("Crowded Cast")
        other = self.make_movie("Small Cast")
        for order in range(2, 9):
            self.make_credit(
                crowded, f"Actress {order}", order=order, gender=Person.GENDER_FEMALE
            )
        solo = self.make_credit(other, "Solo Actress", order=3, gender=Person.GENDER_FEMALE)

        _, eligible = resolve_eligible(category.id)

        from_crowded = [c for c in eligible if c.movie_id == crowded.id]
        self.assertEqual(len(from_crowded), 5)
        self.assertEqual(
            [c.billing_order for c in from_crowded], [2, 3, 4, 5, 6]
        )
        self.assertIn(solo.id, [c.id for c in eligible])

    def test_unnamed_acting_category_is_not_capped(self):
        category = Category.objects.create(
            name="Best Ensemble", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Crowded Cast")
        for order in range(8):
            self.make_credit(movie, f"Actor {order}", order=order)

        _, eligible = resolve_eligible(category.id)

        self.assertEqual(len(eligible), 8)


class CapCreditsPerMovieTests(TestCase):
    def test_keeps_first_n_per_movie_in_order(self):
        credits = [
            MovieCredit(movie_id=1, billing_order=0),
            MovieCredit(movie_id=2, billing_order=0),
            MovieCredit(movie_id=1, billing_order=1),
            MovieCredit(movie_id=1, billing_order=2),
            MovieCredit(movie_id=2, billing_order=1),
        ]

        kept = cap_credits_per_movie(credits, limit=2)

        self.assertEqual(
            [(c.movie_id, c.billing_order) for c in kept],
            [(1, 0), (2, 0), (1, 1), (2, 1)],
        )


class SubmissionTests(NominationFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.best_picture = Category.objects.create(
            name="Best Picture", type=Category.FILM, pool=Movie.NEW_RELEASE
        )
        self.best_director = Category.objects.create(
            name="Best Director", type=Category.DIRECTOR, pool=Movie.NEW_RELEASE
        )
        self.anora = self.make_movie("Anora")
        self.conclave = self.make_movie("Conclave")
        self.wicked = self.make_movie("Wicked")

    def save(self, proposed, category=None, principal=None, deadline=OPEN):
        category = category or self.best_picture
        principal = principal if principal is not None else self.alice.id
        return validate_and_save(
            principal, self.alice.id, category.id, proposed, deadline=deadline
        )

    def stored(self, category=None):
        category = category or self.best_picture
        return [
            (n.rank, n.movie_id, n.movie_credit_id)
            for n in fetch_nominations(self.alice.id, category.id)
        ]

    def test_round_trip(self):
        self.save([
            {"rank": 1, "movie_id": self.anora.id},
            {"rank": 2, "movie_id": self.conclave.id},
        ])

        nominations = get_nominations(self.alice.id, self.alice.id, self.best_picture.id)

        self.assertEqual(len(nominations), 2)
        self.assertEqual([n.rank for n in nominations], [1, 2])
        self.assertEqual(
            [n.movie.id for n in nominations], [self.anora.id, self.conclave.id]
        )
        self.assertEqual(nominations[0].movie.title, "Anora")

    def test_round_trip_with_fixed_ids(self):
        for movie_id, title in ((5, "Flow"), (7, "Nosferatu")):
            movie = Movie.objects.create(
                id=movie_id, tmdb_id=9000 + movie_id, title=title, pool=Movie.ALL
            )
            MovieView.objects.create(movie=movie, user=self.alice)
            MovieView.objects.create(movie=movie, user=self.bob)

        self.save([{"rank": 1, "movie_id": 5}, {"rank": 2, "movie_id": 7}])

        nominations = get_nominations(self.alice.id, self.alice.id, self.best_picture.id)
        self.assertEqual(
            [(n.rank, n.movie.id) for n in nominations], [(1, 5), (2, 7)]
        )

    def test_returns_saved_set_ordered_by_rank(self):
        saved = self.save([
            {"rank": 3, "movie_id": self.wicked.id},
            {"rank": 1, "movie_id": self.anora.id},
        ])

        self.assertEqual([n.rank for n in saved], [1, 3])
        self.assertEqual(saved[1].movie.title, "Wicked")

    def test_saving_same_list_twice_is_idempotent(self):
        proposed = [
            {"rank": 1, "movie_id": self.anora.id},
            {"rank": 2, "movie_id": self.conclave.id},
        ]

        self.save(proposed)
        first = self.stored()
        self.save(proposed)

        self.assertEqual(self.stored(), first)
        self.assertEqual(Nomination.objects.count(), 2)

    def test_save_replaces_previous_set(self):
        self.save([
            {"rank": 1, "movie_id": self.anora.id},
            {"rank": 2, "movie_id": self.conclave.id},
        ])
        self.save([{"rank": 1, "movie_id": self.wicked.id}])

        self.assertEqual(self.stored(), [(1, self.wicked.id, None)])

    def test_empty_list_clears_set(self):
        self.save([{"rank": 1, "movie_id": self.anora.id}])
        self.save([])

        self.assertEqual(self.stored(), [])

    def test_save_leaves_other_users_and_categories_alone(self):
        Nomination.objects.create(
            user=self.bob, category=self.best_picture, rank=1, movie=self.anora
        )

        self.save([{"rank": 1, "movie_id": self.conclave.id}])

        self.assertEqual(
            Nomination.objects.filter(user=self.bob).count(), 1
        )

    def test_duplicate_rank_rejected_without_writes(self):
        self.save([{"rank": 1, "movie_id": self.wicked.id}])
        before = self.stored()

        with self.assertRaisesMessage(InvalidArgument, "Duplicate rank"):
            self.save([
                {"rank": 1, "movie_id": self.anora.id},
                {"rank": 1, "movie_id": self.conclave.id},
            ])

        self.assertEqual(self.stored(), before)

    def test_duplicate_rank_with_no_prior_set_writes_nothing(self):
        with self.assertRaises(InvalidArgument):
            self.save([
                {"rank": 1, "movie_id": self.anora.id},
                {"rank": 1, "movie_id": self.conclave.id},
            ])

        self.assertEqual(Nomination.objects.count(), 0)

    def test_too_many_nominations(self):
        movies = [self.make_movie(f"Extra {i}") for i in range(3)]
        proposed = [
            {"rank": rank, "movie_id": movie.id}
            for rank, movie in enumerate(
                [self.anora, self.conclave, self.wicked] + movies, start=1
            )
        ]

        with self.assertRaisesMessage(InvalidArgument, "Too many nominations"):
            self.save(proposed)

    def test_rank_out_of_range(self):
        for rank in (0, 6):
            with self.assertRaisesMessage(InvalidArgument, "Rank out of range"):
                self.save([{"rank": rank, "movie_id": self.anora.id}])

    def test_film_category_rejects_credit_ids(self):
        credit = self.make_credit(self.anora, "Mikey Madison", order=0)

        with self.assertRaisesMessage(InvalidArgument, "FILM categories require movie_id only"):
            self.save([{"rank": 1, "movie_credit_id": credit.id}])

        with self.assertRaisesMessage(InvalidArgument, "FILM categories require movie_id only"):
            self.save([
                {"rank": 1, "movie_id": self.anora.id, "movie_credit_id": credit.id}
            ])

    def test_director_category_rejects_movie_ids(self):
        with self.assertRaisesMessage(
            InvalidArgument, "DIRECTOR categories require movie_credit_id only"
        ):
            self.save(
                [{"rank": 1, "movie_id": self.anora.id}],
                category=self.best_director,
            )

    def test_duplicate_item(self):
        with self.assertRaisesMessage(InvalidArgument, "Duplicate item"):
            self.save([
                {"rank": 1, "movie_id": self.anora.id},
                {"rank": 2, "movie_id": self.anora.id},
            ])

    def test_missing_movie(self):
        with self.assertRaisesMessage(InvalidArgument, "Movie 987654 not found"):
            self.save([{"rank": 1, "movie_id": 987654}])

    def test_missing_credit(self):
        with self.assertRaisesMessage(InvalidArgument, "Movie credit 987654 not found"):
            self.save(
                [{"rank": 1, "movie_credit_id": 987654}],
                category=self.best_director,
            )

    def test_credit_role_must_match_category(self):
        actor = self.make_credit(self.anora, "Mikey Madison", order=0)

        with self.assertRaisesMessage(InvalidArgument, "role mismatch"):
            self.save(
                [{"rank": 1, "movie_credit_id": actor.id}],
                category=self.best_director,
            )

    def test_pool_mismatch(self):
        classic = self.make_movie("Casablanca", pool=Movie.CLASSIC)

        with self.assertRaisesMessage(InvalidArgument, 'Movie "Casablanca" pool mismatch'):
            self.save([{"rank": 1, "movie_id": classic.id}])

    def test_all_pool_movie_accepted_anywhere(self):
        wildcard = self.make_movie("Any Pool", pool=Movie.ALL)

        self.save([{"rank": 1, "movie_id": wildcard.id}])

        self.assertEqual(self.stored(), [(1, wildcard.id, None)])

    def test_credit_on_single_viewer_movie_rejected(self):
        lonely = self.make_movie("Lonely Film", viewers=1)
        director = self.make_credit(lonely, "Solo Director", role=MovieCredit.DIRECTOR)

        with self.assertRaisesMessage(
            InvalidArgument, 'Movie "Lonely Film" needs 2+ viewers'
        ):
            self.save(
                [{"rank": 1, "movie_credit_id": director.id}],
                category=self.best_director,
            )

        self.assertEqual(Nomination.objects.count(), 0)

    def test_credit_on_other_pool_movie_rejected(self):
        classic = self.make_movie("Casablanca", pool=Movie.CLASSIC)
        director = self.make_credit(classic, "Michael Curtiz", role=MovieCredit.DIRECTOR)

        with self.assertRaisesMessage(InvalidArgument, 'Movie "Casablanca" pool mismatch'):
            self.save(
                [{"rank": 1, "movie_credit_id": director.id}],
                category=self.best_director,
            )

        self.assertEqual(Nomination.objects.count(), 0)

    def test_rejected_credit_keeps_previous_set(self):
        director = self.make_credit(self.anora, "Sean Baker", role=MovieCredit.DIRECTOR)
        self.save(
            [{"rank": 1, "movie_credit_id": director.id}],
            category=self.best_director,
        )
        lonely = self.make_movie("Lonely Film", viewers=1)
        lonely_director = self.make_credit(
            lonely, "Solo Director", role=MovieCredit.DIRECTOR
        )

        with self.assertRaises(InvalidArgument):
            self.save(
                [
                    {"rank": 1, "movie_credit_id": director.id},
                    {"rank": 2, "movie_credit_id": lonely_director.id},
                ],
                category=self.best_director,
            )

        self.assertEqual(
            self.stored(category=self.best_director), [(1, None, director.id)]
        )

    def test_credit_on_all_pool_movie_accepted(self):
        wildcard = self.make_movie("Any Pool", pool=Movie.ALL)
        director = self.make_credit(wildcard, "Some Director", role=MovieCredit.DIRECTOR)

        self.save(
            [{"rank": 1, "movie_credit_id": director.id}],
            category=self.best_director,
        )

        self.assertEqual(
            self.stored(category=self.best_director), [(1, None, director.id)]
        )

    def test_saved_set_is_read_inside_the_transaction(self):
        depth_before = len(connection.savepoint_ids)
        depths = []

        def read_back(user_id, category_id):
            depths.append(len(connection.savepoint_ids))
            return fetch_nominations(user_id, category_id)

        with mock.patch(
            "nominations.services.store.fetch_nominations", side_effect=read_back
        ):
            saved = self.save([{"rank": 1, "movie_id": self.anora.id}])

        self.assertEqual(depths, [depth_before + 1])
        self.assertEqual([n.movie_id for n in saved], [self.anora.id])

    def test_single_viewer_movie_rejected(self):
        lonely = self.make_movie("Lonely Film", viewers=1)

        with self.assertRaisesMessage(
            InvalidArgument, 'Movie "Lonely Film" needs 2+ viewers'
        ):
            self.save([
                {"rank": 1, "movie_id": self.anora.id},
                {"rank": 2, "movie_id": lonely.id},
            ])

        self.assertEqual(Nomination.objects.count(), 0)

    def test_unseen_views_still_count(self):
        movie = self.make_movie("Half Seen")
        MovieView.objects.filter(movie=movie).update(has_seen=False)

        self.save([{"rank": 1, "movie_id": movie.id}])

        self.assertEqual(self.stored(), [(1, movie.id, None)])

    def test_director_credit_saved_and_hydrated(self):
        director = self.make_credit(
            self.anora, "Sean Baker", role=MovieCredit.DIRECTOR
        )

        saved = self.save(
            [{"rank": 1, "movie_credit_id": director.id}],
            category=self.best_director,
        )

        self.assertEqual(saved[0].movie_credit.person.name, "Sean Baker")
        self.assertEqual(saved[0].movie_credit.movie.title, "Anora")
        self.assertIsNone(saved[0].movie)

    def test_deadline_passed_rejects_without_writes(self):
        with self.assertRaisesMessage(Forbidden, "period closed"):
            self.save([{"rank": 1, "movie_id": self.anora.id}], deadline=CLOSED)

        self.assertEqual(Nomination.objects.count(), 0)

    def test_deadline_passed_rejects_invalid_list_too(self):
        with self.assertRaises(Forbidden):
            self.save(
                [
                    {"rank": 1, "movie_id": self.anora.id},
                    {"rank": 1, "movie_id": self.anora.id},
                ],
                deadline=CLOSED,
            )

    def test_requires_principal(self):
        with self.assertRaises(Unauthenticated):
            validate_and_save(
                None, self.alice.id, self.best_picture.id, [], deadline=OPEN
            )

    def test_principal_must_match_user(self):
        with self.assertRaises(Forbidden):
            self.save(
                [{"rank": 1, "movie_id": self.anora.id}], principal=self.bob.id
            )

        self.assertEqual(Nomination.objects.count(), 0)

    def test_unknown_category(self):
        with self.assertRaisesMessage(NotFound, "Category 999999 not found"):
            validate_and_save(
                self.alice.id, self.alice.id, 999999, [], deadline=OPEN
            )


class CompletedCategoriesTests(NominationFixtures, TestCase):
    def test_categories_with_any_saved_nomination(self):
        picture = Category.objects.create(
            name="Best Picture", type=Category.FILM, pool=Movie.ALL
        )
        editing = Category.objects.create(
            name="Best Editing", type=Category.FILM, pool=Movie.ALL
        )
        Category.objects.create(name="Best Score", type=Category.FILM, pool=Movie.ALL)
        anora = self.make_movie("Anora")
        conclave = self.make_movie("Conclave")

        Nomination.objects.create(user=self.alice, category=picture, rank=1, movie=anora)
        Nomination.objects.create(user=self.alice, category=picture, rank=2, movie=conclave)
        Nomination.objects.create(user=self.alice, category=editing, rank=1, movie=anora)
        Nomination.objects.create(user=self.bob, category=picture, rank=1, movie=anora)

        completed = get_completed_category_ids(self.alice.id, self.alice.id)

        self.assertEqual(completed, {picture.id, editing.id})

    def test_other_users_status_forbidden(self):
        with self.assertRaises(Forbidden):
            get_completed_category_ids(self.bob.id, self.alice.id)


class DeadlineTests(TestCase):
    def test_parse_day_month_year(self):
        self.assertEqual(
            parse_deadline("15/03/2026"),
            datetime(2026, 3, 15, tzinfo=dt_timezone.utc),
        )

    def test_empty_means_open(self):
        self.assertEqual(parse_deadline(""), OPEN_ENDED)

    def test_malformed_value(self):
        with self.assertRaises(ValueError):
            parse_deadline("2026-03-15")

    def test_is_passed_uses_clock(self):
        closes_at = datetime(2026, 3, 15, tzinfo=dt_timezone.utc)
        before = Deadline(closes_at, clock=lambda: datetime(2026, 3, 14, tzinfo=dt_timezone.utc))
        after = Deadline(closes_at, clock=lambda: datetime(2026, 3, 16, tzinfo=dt_timezone.utc))

        self.assertFalse(before.is_passed())
        self.assertTrue(after.is_passed())


class NominationAPITests(NominationFixtures, APITestCase):
    def setUp(self):
        super().setUp()
        self.category = Category.objects.create(
            name="Best Picture", type=Category.FILM, pool=Movie.NEW_RELEASE
        )
        self.actor_category = Category.objects.create(
            name="Best Actress", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        self.anora = self.make_movie("Anora")
        self.conclave = self.make_movie("Conclave")
        self.url = reverse("nomination-list")

    def payload(self, nominations, user=None, category=None):
        return {
            "user_id": (user or self.alice).id,
            "category_id": (category or self.category).id,
            "nominations": nominations,
        }

    def test_put_saves_and_returns_hydrated_list(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.put(
            self.url,
            self.payload([
                {"rank": 2, "movie_id": self.conclave.id},
                {"rank": 1, "movie_id": self.anora.id},
            ]),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["rank"] for item in response.data], [1, 2])
        self.assertEqual(response.data[0]["movie"]["title"], "Anora")
        self.assertIsNone(response.data[0]["movie_credit"])
        self.assertEqual(Nomination.objects.filter(user=self.alice).count(), 2)

    def test_put_requires_authentication(self):
        response = self.client.put(
            self.url,
            self.payload([{"rank": 1, "movie_id": self.anora.id}]),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(Nomination.objects.count(), 0)

    def test_put_for_another_user_forbidden(self):
        self.client.force_authenticate(user=self.bob)

        response = self.client.put(
            self.url,
            self.payload([{"rank": 1, "movie_id": self.anora.id}]),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Nomination.objects.count(), 0)

    @override_settings(NOMINATIONS_DEADLINE="01/01/2000")
    def test_put_after_deadline_forbidden(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.put(
            self.url,
            self.payload([{"rank": 1, "movie_id": self.anora.id}]),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["detail"], "Nominations period closed")
        self.assertEqual(Nomination.objects.count(), 0)

    def test_put_unknown_category(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.put(
            self.url,
            {"user_id": self.alice.id, "category_id": 999999, "nominations": []},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "Category 999999 not found")

    def test_put_missing_fields(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.put(
            self.url, {"user_id": self.alice.id}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("category_id", response.data)
        self.assertIn("nominations", response.data)

    def test_put_duplicate_rank(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.put(
            self.url,
            self.payload([
                {"rank": 1, "movie_id": self.anora.id},
                {"rank": 1, "movie_id": self.conclave.id},
            ]),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Duplicate rank")
        self.assertEqual(Nomination.objects.count(), 0)

    def test_get_returns_ranked_list(self):
        Nomination.objects.create(
            user=self.alice, category=self.category, rank=2, movie=self.conclave
        )
        Nomination.objects.create(
            user=self.alice, category=self.category, rank=1, movie=self.anora
        )
        self.client.force_authenticate(user=self.alice)

        response = self.client.get(
            self.url, {"user_id": self.alice.id, "category_id": self.category.id}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [item["movie"]["id"] for item in response.data],
            [self.anora.id, self.conclave.id],
        )

    def test_get_hydrates_credits(self):
        credit = self.make_credit(
            self.anora, "Mikey Madison", order=0, gender=Person.GENDER_FEMALE
        )
        Nomination.objects.create(
            user=self.alice,
            category=self.actor_category,
            rank=1,
            movie_credit=credit,
        )
        self.client.force_authenticate(user=self.alice)

        response = self.client.get(
            self.url,
            {"user_id": self.alice.id, "category_id": self.actor_category.id},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item = response.data[0]["movie_credit"]
        self.assertEqual(item["person"]["name"], "Mikey Madison")
        self.assertEqual(item["movie"]["title"], "Anora")

    def test_get_missing_params(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.get(self.url, {"user_id": self.alice.id})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_requires_authentication(self):
        response = self.client.get(
            self.url, {"user_id": self.alice.id, "category_id": self.category.id}
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_get_other_users_list_forbidden(self):
        self.client.force_authenticate(user=self.bob)

        response = self.client.get(
            self.url, {"user_id": self.alice.id, "category_id": self.category.id}
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class EligibleAPITests(NominationFixtures, APITestCase):
    def setUp(self):
        super().setUp()
        self.url = reverse("nomination-eligible")
        self.client.force_authenticate(user=self.alice)

    def test_film_category_returns_movies(self):
        category = Category.objects.create(
            name="Best Picture", type=Category.FILM, pool=Movie.NEW_RELEASE
        )
        self.make_movie("Anora")
        self.make_movie("Lonely", viewers=1)

        response = self.client.get(self.url, {"category_id": category.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m["title"] for m in response.data], ["Anora"])
        self.assertEqual(response.data[0]["viewer_count"], 2)

    def test_actor_category_returns_credits(self):
        category = Category.objects.create(
            name="Best Actress", type=Category.ACTOR, pool=Movie.NEW_RELEASE
        )
        movie = self.make_movie("Anora")
        self.make_credit(movie, "Mikey Madison", order=0, gender=Person.GENDER_FEMALE)

        response = self.client.get(self.url, {"category_id": category.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]["person"]["name"], "Mikey Madison")
        self.assertEqual(response.data[0]["movie"]["title"], "Anora")
        self.assertEqual(response.data[0]["movie"]["viewer_count"], 2)

    def test_missing_category_id(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_category_id(self):
        response = self.client.get(self.url, {"category_id": "abc"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_category(self):
        response = self.client.get(self.url, {"category_id": 999999})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class StatusAndCategoryAPITests(NominationFixtures, APITestCase):
    def setUp(self):
        super().setUp()
        self.picture = Category.objects.create(
            name="Best Picture", type=Category.FILM, pool=Movie.ALL
        )
        self.director = Category.objects.create(
            name="Best Director", type=Category.DIRECTOR, pool=Movie.ALL
        )
        self.status_url = reverse("nomination-status")

    def test_status_lists_completed_categories(self):
        anora = self.make_movie("Anora")
        Nomination.objects.create(
            user=self.alice, category=self.picture, rank=1, movie=anora
        )
        self.client.force_authenticate(user=self.alice)

        response = self.client.get(self.status_url, {"user_id": self.alice.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["completed_category_ids"], [self.picture.id])
        self.assertFalse(response.data["is_locked"])

    @override_settings(NOMINATIONS_DEADLINE="01/01/2000")
    def test_status_reports_locked_period(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.get(self.status_url, {"user_id": self.alice.id})

        self.assertTrue(response.data["is_locked"])

    def test_status_for_another_user_forbidden(self):
        self.client.force_authenticate(user=self.bob)

        response = self.client.get(self.status_url, {"user_id": self.alice.id})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_category_list(self):
        self.client.force_authenticate(user=self.alice)

        response = self.client.get(reverse("category-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [c["name"] for c in response.data], ["Best Director", "Best Picture"]
        )
