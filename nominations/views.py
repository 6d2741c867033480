from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from movies.serializers import MovieCreditSerializer, MovieSerializer
from .deadline import PERIOD_CLOSED, get_deadline
from .exceptions import Forbidden, NominationError
from .models import Category
from .serializers import (
    CategorySerializer,
    EligibleQuerySerializer,
    NominationQuerySerializer,
    NominationSerializer,
    NominationSubmissionSerializer,
    StatusQuerySerializer,
)
from .services.eligibility import resolve_eligible
from .services.store import get_completed_category_ids, get_nominations
from .services.submission import validate_and_save


def principal_id(request):
    user = request.user
    if user and user.is_authenticated:
        return user.pk
    return None


def error_response(exc: NominationError):
    return Response({"detail": exc.message}, status=exc.status_code)


class CategoryListView(generics.ListAPIView):
    """
    GET /api/categories/
    """

    serializer_class = CategorySerializer
    queryset = Category.objects.order_by("pool", "type", "name")


class EligibleView(APIView):
    """
    GET /api/nominations/eligible/?category_id=<id>

    Movies (FILM) or credits (ACTOR/DIRECTOR) that may be nominated in
    the category right now.
    """

    def get(self, request):
        query = EligibleQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            category, eligible = resolve_eligible(
                query.validated_data["category_id"]
            )
        except NominationError as exc:
            return error_response(exc)

        if category.is_film:
            data = MovieSerializer(eligible, many=True).data
        else:
            data = MovieCreditSerializer(eligible, many=True).data
        return Response(data)


class NominationView(APIView):
    """
    GET /api/nominations/?user_id=<id>&category_id=<id>
        -> the user's ranked list for the category

    PUT /api/nominations/
        body: {"user_id", "category_id", "nominations": [
            {"rank", "movie_id" | "movie_credit_id"}, ...]}
        -> replaces the whole list, returns the stored list

    Identity is checked against the logged-in user in the service layer,
    so request-shape errors (400) come before 401/403.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        query = NominationQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            nominations = get_nominations(
                principal_id(request),
                query.validated_data["user_id"],
                query.validated_data["category_id"],
            )
        except NominationError as exc:
            return error_response(exc)

        return Response(NominationSerializer(nominations, many=True).data)

    def put(self, request):
        deadline = get_deadline()
        if deadline.is_passed():
            return error_response(Forbidden(PERIOD_CLOSED))

        serializer = NominationSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            saved = validate_and_save(
                principal_id(request),
                data["user_id"],
                data["category_id"],
                data["nominations"],
                deadline=deadline,
            )
        except NominationError as exc:
            return error_response(exc)

        return Response(NominationSerializer(saved, many=True).data)


class NominationStatusView(APIView):
    """
    GET /api/nominations/status/?user_id=<id>

    Categories the user has saved nominations for, plus the deadline.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        query = StatusQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            completed = get_completed_category_ids(
                principal_id(request), query.validated_data["user_id"]
            )
        except NominationError as exc:
            return error_response(exc)

        deadline = get_deadline()
        return Response(
            {
                "completed_category_ids": sorted(completed),
                "closes_at": deadline.closes_at,
                "is_locked": deadline.is_passed(),
            }
        )
