from rest_framework import serializers

from movies.serializers import MovieCreditSerializer, MovieSerializer
from .models import Category, Nomination


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "type", "pool"]


class NominationSerializer(serializers.ModelSerializer):
    user = serializers.ReadOnlyField(source="user_id")
    category = serializers.ReadOnlyField(source="category_id")
    movie = MovieSerializer(read_only=True)
    movie_credit = MovieCreditSerializer(read_only=True)

    class Meta:
        model = Nomination
        fields = [
            "id",
            "user",
            "category",
            "rank",
            "movie",
            "movie_credit",
            "created_at",
        ]


class ProposedNominationSerializer(serializers.Serializer):
    """
    One entry of a submitted list.

    Only types are checked here; rank range and which id goes with which
    category type are decided by the submission service.
    """
    rank = serializers.IntegerField()
    movie_id = serializers.IntegerField(required=False, allow_null=True)
    movie_credit_id = serializers.IntegerField(required=False, allow_null=True)


class NominationSubmissionSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    category_id = serializers.IntegerField()
    nominations = ProposedNominationSerializer(many=True, allow_empty=True)


class NominationQuerySerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    category_id = serializers.IntegerField()


class StatusQuerySerializer(serializers.Serializer):
    user_id = serializers.IntegerField()


class EligibleQuerySerializer(serializers.Serializer):
    category_id = serializers.IntegerField()
