from django.contrib import admin
from .models import Category, Nomination


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "pool")
    list_filter = ("type", "pool")


@admin.register(Nomination)
class NominationAdmin(admin.ModelAdmin):
    list_display = ("user", "category", "rank", "movie", "movie_credit", "created_at")
    search_fields = ("user__username", "movie__title", "movie_credit__person__name")
    list_filter = ("category",)
