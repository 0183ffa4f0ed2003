class MembershipError(Exception):
    """Base class for errors raised along the membership payment flow."""
    status_code = 400
    default_message = "Membership request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidPlan(MembershipError):
    default_message = "Invalid plan selected"


class ActiveMembershipExists(MembershipError):
    default_message = "User already has an active subscription"


class OrderCreationFailed(MembershipError):
    status_code = 500
    default_message = "Failed to create order"


class ValidationError(MembershipError):
    default_message = "Invalid registration details"

    def __init__(self, errors: dict, message: str = None):
        super().__init__(message)
        self.errors = errors


class RateLimited(MembershipError):
    status_code = 429
    default_message = "Too many payment attempts. Please try again later."

    def __init__(self, retry_after: int, message: str = None):
        super().__init__(message)
        self.retry_after = retry_after


class MissingSignature(MembershipError):
    default_message = "Missing signature"


class SignatureMismatch(MembershipError):
    default_message = "Invalid signature"


class PersistenceFailure(MembershipError):
    status_code = 500
    default_message = "Database update failed"
