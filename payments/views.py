from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from courses.serializers import EnrollmentSerializer
from lms_backend.clients import ClientsMixin

from . import services
from .serializers import TransactionSerializer


def _confirmation_fields(data):
    return (
        data.get("razorpay_order_id") or data.get("order_id"),
        data.get("razorpay_payment_id") or data.get("payment_id"),
        data.get("razorpay_signature") or data.get("signature"),
    )


class VerifyPaymentView(ClientsMixin, APIView):
    """
    Confirm a course payment after the Razorpay checkout succeeds. A repeated
    call for a captured order returns the enrollment it already produced.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        order_id, payment_id, signature = _confirmation_fields(request.data)
        enrollment = services.confirm_payment(
            order_id, payment_id, signature, self.clients.payments,
            user=request.user, mailer=self.clients.mailer,
        )
        return Response({
            "success": True,
            "message": "Payment verified successfully.",
            "data": EnrollmentSerializer(enrollment).data,
        })


class CreateSubscriptionView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            "success": True,
            "message": "Subscription plans retrieved successfully.",
            "data": services.subscription_plans(),
        })

    def post(self, request):
        payment = services.create_subscription_order(request.user, request.data.get("plan"), self.clients.payments)
        return Response({
            "success": True,
            "message": "Subscription order created.",
            "data": {"plan": request.data.get("plan"), **services.checkout_details(payment)},
        }, status=status.HTTP_201_CREATED)


class VerifySubscriptionView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        order_id, payment_id, signature = _confirmation_fields(request.data)
        enrollments = services.confirm_subscription(
            order_id, payment_id, signature, self.clients.payments,
            user=request.user, mailer=self.clients.mailer,
        )
        return Response({
            "success": True,
            "message": "Subscription activated successfully.",
            "data": {
                "enrolled_courses": len(enrollments),
                "enrollments": EnrollmentSerializer(enrollments, many=True).data,
            },
        })


class MyTransactionsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            "success": True,
            "message": "Transactions retrieved successfully.",
            "data": TransactionSerializer(services.user_transactions(request.user), many=True).data,
        })
