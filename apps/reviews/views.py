"""API views for managing reviews."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api import domain_error_response
from shared.domain.exceptions import DomainError

from .models import Review
from .serializers import ReviewCreateSerializer, ReviewSerializer
from .services import submit_review


class ReviewViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Viewset for submitting and reading reviews."""

    queryset = Review.objects.select_related('renter', 'equipment', 'booking').all()
    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        equipment_id = self.request.query_params.get('equipment')
        if equipment_id:
            qs = qs.filter(equipment_id=equipment_id)
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            review = submit_review(request.user, data['equipment_id'], data['rating'], data['comment'])
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)
