from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import allowed
from accounts.policy import Action
from courses.services.pagination import paginate_queryset_or_list
from lms_backend.clients import ClientsMixin

from . import services
from .serializers import InvitationSerializer, PublicInvitationSerializer


class InvitationListView(ClientsMixin, APIView):
    permission_classes = [allowed(Action.INVITATION_MANAGE)]

    def get(self, request):
        invitations = services.list_invitations(status=request.query_params.get("status"))
        return paginate_queryset_or_list(
            request, invitations, InvitationSerializer, message="Invitations retrieved successfully."
        )

    def post(self, request):
        """
        Invite a comma separated list of emails. Addresses that already
        belong to a user are reported under ``already_exists``.
        """
        results = services.create_invitations(
            request.data.get("emails"),
            request.data.get("role"),
            request.data.get("batches") or request.data.get("batchIds") or [],
            request.data.get("expires_on", request.data.get("batchSubscriptions")),
            request.user,
            self.clients.mailer,
        )
        return Response({
            "success": True,
            "message": f"{len(results['success'])} invitation(s) sent.",
            "data": results,
        }, status=status.HTTP_201_CREATED)


class RevokeInvitationView(APIView):
    permission_classes = [allowed(Action.INVITATION_MANAGE)]

    def post(self, request, invitation_id):
        invitation = services.revoke_invitation(invitation_id)
        return Response({
            "success": True,
            "message": "Invitation revoked successfully.",
            "data": InvitationSerializer(invitation).data,
        })


class InvitationByTokenView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, token):
        invitation = services.get_by_token(token)
        return Response({
            "success": True,
            "message": "Invitation is valid.",
            "data": PublicInvitationSerializer(invitation).data,
        })
