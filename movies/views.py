import logging

import requests
from django.conf import settings
from django.db import transaction
from django.db.models import Count
from django.contrib.auth import get_user_model
from rest_framework import generics, mixins, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from . import tmdb
from .models import Movie, MovieView
from .serializers import (
    MovieListSerializer,
    SuggestMovieSerializer,
    ToggleSeenSerializer,
    ViewerSerializer,
)
from .services.credits import ingest_credits_for_movie

logger = logging.getLogger(__name__)

User = get_user_model()


def movie_with_views(queryset):
    return queryset.annotate(
        viewer_count=Count("views", distinct=True)
    ).prefetch_related("views__user")


class MovieViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Provides /api/movies/  (list, newest first)
            /api/movies/<tmdb_id>/ (detail, DELETE removes it from the log)

    Deleting a movie also removes its views, credits and any nominations
    pointing at it.

    Supports filters:
    - ?search=term
    - ?pool=NEW_RELEASE|CLASSIC|ALL
    - ?valid=true  (only movies with enough viewers to be nominated)
    """

    serializer_class = MovieListSerializer
    lookup_field = "tmdb_id"
    lookup_value_regex = r"\d+"

    def perform_destroy(self, instance):
        logger.info("Deleting movie %s (tmdb_id=%s)", instance, instance.tmdb_id)
        instance.delete()

    def get_queryset(self):
        params = self.request.query_params
        qs = movie_with_views(Movie.objects.all())

        search = params.get("search")
        if search:
            qs = qs.filter(title__icontains=search)

        pool = params.get("pool")
        if pool:
            qs = qs.filter(pool=pool)

        valid = params.get("valid")
        if valid and valid.lower() == "true":
            qs = qs.filter(viewer_count__gte=settings.MIN_VIEWERS)

        return qs.order_by("-created_at")


class SuggestMovieView(APIView):
    """
    POST /api/movies/suggest/

    Log a movie for one or more viewers. Creates the movie on first
    suggestion, otherwise adds the viewers that are not on it yet.
    Credits are pulled from TMDB the first time; a TMDB failure is
    logged and does not fail the request.
    """

    def post(self, request):
        serializer = SuggestMovieSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        viewer_ids = data.pop("viewer_ids")
        tmdb_id = data.pop("tmdb_id")

        with transaction.atomic():
            movie, created = Movie.objects.get_or_create(
                tmdb_id=tmdb_id, defaults=data
            )
            existing = set(movie.views.values_list("user_id", flat=True))
            MovieView.objects.bulk_create(
                [
                    MovieView(movie=movie, user_id=user_id)
                    for user_id in viewer_ids
                    if user_id not in existing
                ]
            )

        if created:
            logger.info("Created movie %s (pool %s)", movie, movie.pool)

        if tmdb.is_configured() and not movie.credits.exists():
            try:
                ingest_credits_for_movie(movie)
            except requests.RequestException:
                logger.exception("Failed to ingest credits for tmdb_id=%s", tmdb_id)

        movie = movie_with_views(Movie.objects.filter(pk=movie.pk)).get()
        return Response(
            MovieListSerializer(movie).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class ToggleSeenView(APIView):
    """
    POST /api/movies/toggle-seen/   body: {tmdb_id, user_id, has_seen}
    """

    def post(self, request):
        serializer = ToggleSeenSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            movie = Movie.objects.get(tmdb_id=data["tmdb_id"])
        except Movie.DoesNotExist:
            return Response(
                {"detail": "Movie not found."},
                status=status.HTTP_404_NOT_FOUND,
            )

        updated = MovieView.objects.filter(
            movie=movie, user_id=data["user_id"]
        ).update(has_seen=data["has_seen"])
        if not updated:
            return Response(
                {"detail": "This user has not logged this movie."},
                status=status.HTTP_404_NOT_FOUND,
            )

        movie = movie_with_views(Movie.objects.filter(pk=movie.pk)).get()
        return Response(MovieListSerializer(movie).data)


class UserListView(generics.ListAPIView):
    """
    GET /api/users/

    Club members, for picking viewer_ids when logging a movie.
    """

    serializer_class = ViewerSerializer
    queryset = User.objects.order_by("username")
