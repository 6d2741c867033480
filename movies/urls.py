from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import MovieViewSet, SuggestMovieView, ToggleSeenView, UserListView

router = DefaultRouter()
router.register(r"movies", MovieViewSet, basename="movie")

urlpatterns = [
    path("movies/suggest/", SuggestMovieView.as_view(), name="movie-suggest"),
    path("movies/toggle-seen/", ToggleSeenView.as_view(), name="movie-toggle-seen"),
    path("users/", UserListView.as_view(), name="user-list"),
    path("", include(router.urls)),
]
