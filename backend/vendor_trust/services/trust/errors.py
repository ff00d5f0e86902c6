"""
Trust engine errors.

Validation errors are raised before any external call is attempted.
External errors wrap a failed persistence or recalculation call; the cached
profile is dropped whenever one is raised.
"""
from typing import Optional


class TrustEngineError(Exception):
    """Base class for all trust engine failures."""


# =============================================================================
# VALIDATION (caller errors)
# =============================================================================

class TrustValidationError(TrustEngineError, ValueError):
    """Caller error. Nothing was written."""


class ProfileNotFoundError(TrustValidationError):
    def __init__(self, vendor_id: str):
        self.vendor_id = vendor_id
        super().__init__(f"Vendor trust profile not found: {vendor_id}")


class InvalidGoalIndexError(TrustValidationError):
    def __init__(self, goal_index: int, goal_count: int):
        self.goal_index = goal_index
        self.goal_count = goal_count
        super().__init__(
            f"Goal index {goal_index} out of range for {goal_count} recovery goal(s)"
        )


class VerificationNotEligibleError(TrustValidationError):
    def __init__(self, vendor_id: str, reason: str):
        self.vendor_id = vendor_id
        self.reason = reason
        super().__init__(f"Vendor {vendor_id} cannot request verification: {reason}")


class RecoveryNotCompletableError(TrustValidationError):
    def __init__(self, vendor_id: str, progress: float):
        self.vendor_id = vendor_id
        self.progress = progress
        super().__init__(
            f"Recovery for vendor {vendor_id} is at {progress:.0f}% and cannot be completed yet"
        )


# =============================================================================
# EXTERNAL (persistence / recalculation)
# =============================================================================

class ExternalServiceError(TrustEngineError):
    """A persistence or recalculation call failed. Retry is up to the caller."""

    def __init__(self, operation: str, vendor_id: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.vendor_id = vendor_id
        self.cause = cause
        message = f"{operation} failed for vendor {vendor_id}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ConcurrentModificationError(TrustEngineError):
    """The profile changed between read and write; the write was not applied."""

    def __init__(self, vendor_id: str, expected_version: int):
        self.vendor_id = vendor_id
        self.expected_version = expected_version
        super().__init__(
            f"Vendor trust profile {vendor_id} was modified concurrently "
            f"(expected version {expected_version})"
        )
