from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Movie, MovieCredit, MovieView, Person

User = get_user_model()


class ViewerSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username"]


class PersonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Person
        fields = ["id", "tmdb_id", "name", "photo_path", "gender"]


class MovieSerializer(serializers.ModelSerializer):
    viewer_count = serializers.SerializerMethodField()

    class Meta:
        model = Movie
        fields = [
            "id",
            "tmdb_id",
            "title",
            "year",
            "poster_path",
            "overview",
            "pool",
            "original_language",
            "viewer_count",
            "created_at",
        ]

    def get_viewer_count(self, obj):
        # annotated by list/eligibility queries, counted otherwise
        count = getattr(obj, "viewer_count", None)
        if count is None:
            count = obj.views.count()
        return count


class MovieViewSerializer(serializers.ModelSerializer):
    user = ViewerSerializer(read_only=True)

    class Meta:
        model = MovieView
        fields = ["id", "user", "has_seen", "created_at"]


class MovieListSerializer(MovieSerializer):
    """Movie log entry with who logged it and whether it can be nominated."""
    is_valid = serializers.SerializerMethodField()
    views = MovieViewSerializer(many=True, read_only=True)

    class Meta(MovieSerializer.Meta):
        fields = MovieSerializer.Meta.fields + ["is_valid", "views"]

    def get_is_valid(self, obj):
        return self.get_viewer_count(obj) >= settings.MIN_VIEWERS


class MovieCreditSerializer(serializers.ModelSerializer):
    person = PersonSerializer(read_only=True)
    movie = MovieSerializer(read_only=True)

    class Meta:
        model = MovieCredit
        fields = ["id", "role", "character", "billing_order", "person", "movie"]


class SuggestMovieSerializer(serializers.Serializer):
    """Validates input for /movies/suggest/."""
    tmdb_id = serializers.IntegerField()
    title = serializers.CharField(max_length=255)
    year = serializers.IntegerField(required=False, allow_null=True)
    poster_path = serializers.CharField(
        required=False, allow_null=True, allow_blank=True
    )
    overview = serializers.CharField(
        required=False, allow_null=True, allow_blank=True
    )
    original_language = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=10
    )
    viewer_ids = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=False,
    )

    def validate_original_language(self, value):
        # stored as NULL so backfill_language picks it up
        return value or None

    def validate_viewer_ids(self, value):
        value = list(dict.fromkeys(value))
        found = set(
            User.objects.filter(id__in=value).values_list("id", flat=True)
        )
        missing = [user_id for user_id in value if user_id not in found]
        if missing:
            raise serializers.ValidationError(
                f"Unknown users: {', '.join(str(m) for m in missing)}"
            )
        return value


class ToggleSeenSerializer(serializers.Serializer):
    tmdb_id = serializers.IntegerField()
    user_id = serializers.IntegerField()
    has_seen = serializers.BooleanField()
