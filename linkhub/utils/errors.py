class BillingError(Exception):
    """Base for errors that surface at the HTTP boundary."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class NotFound(BillingError):
    status_code = 404
    default_message = "Not found"


class PlanNotFound(NotFound):
    # checkout treats an unknown or retired plan as a bad request
    status_code = 400
    default_message = "Plan not found or inactive"


class OrderNotFound(NotFound):
    default_message = "Order not found"


class ValidationError(BillingError):
    default_message = "Invalid request"


class InvalidPromoCode(BillingError):
    default_message = "Invalid promo code"


class SignatureInvalid(BillingError):
    default_message = "Payment verification failed: invalid signature"

    def __init__(self):
        # never say why
        super().__init__(self.default_message)


class OrderStateError(BillingError):
    default_message = "This order can no longer be verified. Please start checkout again."


class GatewayError(BillingError):
    status_code = 502
    default_message = "Failed to create payment order"


class GatewayNotConfigured(GatewayError):
    status_code = 500
    default_message = "Payment gateway not configured"


class ActivationFailed(BillingError):
    status_code = 500
    default_message = (
        "Your payment was received but we could not activate your plan. "
        "Please contact support with your payment reference."
    )

    def __init__(self, payment_id: str | None = None):
        message = self.default_message
        if payment_id:
            message = f"{message} Reference: {payment_id}"
        super().__init__(message)
        self.payment_id = payment_id
