"""
ForkYes - Error taxonomy.

Every failure a request can end with maps to one of these classes.
The web layer turns them into `{"error": message}` bodies using
`status_code`.

AI replies that fail to parse are not errors; see forkyes.ai.parsing.
"""

from typing import Any


class ForkYesError(Exception):
    """
    Base exception for ForkYes errors.

    Attributes:
        message: Human-readable error description (returned to the caller)
        status_code: HTTP status the web layer responds with
        details: Extra context for logs, never sent to the caller
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class Unauthorized(ForkYesError):
    """No valid session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: dict[str, Any] | None = None):
        super().__init__(message, details)


class NotFound(ForkYesError):
    """A single requested record does not exist."""

    status_code = 404


# =============================================================================
# Precondition failures (400)
# =============================================================================


class PreconditionMissing(ForkYesError):
    """Something the request needs is absent. Not retryable."""

    status_code = 400


class FamilyMissing(PreconditionMissing):
    def __init__(self, message: str = "No family found. Please complete onboarding first."):
        super().__init__(message)


class PreferencesMissing(PreconditionMissing):
    def __init__(self, family_id: str | None = None):
        super().__init__(
            "Family preferences not found. Please complete onboarding first.",
            {"family_id": family_id},
        )


class PlannedMealsMissing(PreconditionMissing):
    def __init__(self):
        super().__init__("Planned meals are required for shopping list generation")


class MealMissing(PreconditionMissing):
    def __init__(self):
        super().__init__("A meal is required for modification")


class InvalidConstraints(PreconditionMissing):
    """Constraints were present but malformed."""


# =============================================================================
# Upstream failures (500)
# =============================================================================


class UpstreamFailure(ForkYesError):
    """A hosted service call failed. Surfaced once, never retried."""

    status_code = 500


class StoreUnavailable(UpstreamFailure):
    """Supabase query or RPC failed."""


class CompletionFailed(UpstreamFailure):
    """The completion API call failed or returned nothing."""
