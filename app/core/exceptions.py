from fastapi import status


class FestivaError(Exception):
    """Base class for errors that map onto an HTTP error response."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class Unauthorized(FestivaError):
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidPlan(FestivaError):
    status_code = status.HTTP_400_BAD_REQUEST


class ProviderError(FestivaError):
    """The payment provider answered with a non-success response or was unreachable."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreError(FestivaError):
    """Reading or writing the subscriptions table failed."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class MalformedRequest(FestivaError):
    status_code = status.HTTP_400_BAD_REQUEST


class PremiumRequired(FestivaError):
    status_code = status.HTTP_403_FORBIDDEN


class PlanLimitReached(FestivaError):
    status_code = status.HTTP_403_FORBIDDEN


class CardNotFound(FestivaError):
    status_code = status.HTTP_404_NOT_FOUND
