import logging

from django.conf import settings
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from courses.serializers import CalendarEventSerializer
from courses.services import calendar_service
from lms_backend.clients import ClientsMixin

logger = logging.getLogger(__name__)


class CalendarEventListView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        events = calendar_service.user_events(request.user)
        return Response({
            "success": True,
            "message": "Events retrieved successfully.",
            "data": CalendarEventSerializer(events, many=True).data,
        })

    def post(self, request):
        event = calendar_service.create_event(request.user, request.data, self.clients.calendar)
        return Response({
            "success": True,
            "message": "Event created successfully.",
            "data": CalendarEventSerializer(event).data,
        }, status=status.HTTP_201_CREATED)


class CalendarEventDetailView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, event_id):
        event = calendar_service.update_event(request.user, event_id, request.data, self.clients.calendar)
        return Response({
            "success": True,
            "message": "Event updated successfully.",
            "data": CalendarEventSerializer(event).data,
        })

    patch = put

    def delete(self, request, event_id):
        calendar_service.delete_event(request.user, event_id, self.clients.calendar)
        return Response({"success": True, "message": "Event deleted successfully."})


class UpcomingEventsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        events = calendar_service.upcoming_events(request.user)
        return Response({
            "success": True,
            "message": "Upcoming events retrieved successfully.",
            "data": CalendarEventSerializer(events, many=True).data,
        })


class GoogleAuthUrlView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        url = calendar_service.authorization_url(request.user, self.clients.calendar)
        return Response({"success": True, "message": "Authorization URL created.", "data": {"url": url}})


class GoogleCallbackView(ClientsMixin, APIView):
    """Google redirects the browser here; the user is identified by the signed state."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        redirect_to = getattr(settings, "CALENDAR_CONNECTED_REDIRECT", "/")
        try:
            calendar_service.complete_oauth(
                request.query_params.get("code"), request.query_params.get("state"), self.clients.calendar
            )
        except APIException as exc:
            logger.warning("Google Calendar connection failed: %s", exc.detail)
            return HttpResponseRedirect(f"{redirect_to}?calendar=error")
        return HttpResponseRedirect(f"{redirect_to}?calendar=connected")


class GoogleDisconnectView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        calendar_service.disconnect(request.user)
        return Response({"success": True, "message": "Google Calendar disconnected successfully"})
