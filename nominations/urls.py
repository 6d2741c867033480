from django.urls import path

from .views import (
    CategoryListView,
    EligibleView,
    NominationStatusView,
    NominationView,
)

urlpatterns = [
    path("categories/", CategoryListView.as_view(), name="category-list"),
    path("nominations/", NominationView.as_view(), name="nomination-list"),
    path(
        "nominations/eligible/",
        EligibleView.as_view(),
        name="nomination-eligible",
    ),
    path(
        "nominations/status/",
        NominationStatusView.as_view(),
        name="nomination-status",
    ),
]
