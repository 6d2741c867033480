from django.contrib import admin
from .models import Movie, MovieCredit, MovieView, Person


@admin.register(Movie)
class MovieAdmin(admin.ModelAdmin):
    list_display = ("title", "year", "pool", "original_language", "created_at")
    search_fields = ("title",)
    list_filter = ("pool", "year")


@admin.register(MovieView)
class MovieViewAdmin(admin.ModelAdmin):
    list_display = ("movie", "user", "has_seen", "created_at")
    search_fields = ("movie__title", "user__username")
    list_filter = ("has_seen",)


@admin.register(MovieCredit)
class MovieCreditAdmin(admin.ModelAdmin):
    list_display = ("person", "role", "movie", "billing_order")
    search_fields = ("person__name", "movie__title")
    list_filter = ("role",)


admin.site.register(Person)
