"""Errors reported by the remote API."""
from typing import Optional


class RemoteActionError(Exception):
    """Non-successful response returned by the remote API."""

    UNKNOWN_SCHEDULED_EVENT = 10070
    MISSING_ACCESS = 50001
    MISSING_PERMISSIONS = 50013

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: Optional[int] = None
    ):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        super().__init__(f"{status_code}: {error_code} {message}")

    @property
    def is_unknown_entity(self) -> bool:
        """True if the target no longer exists, e.g. already deleted."""
        return (
            self.status_code == 404 or
            self.error_code == self.UNKNOWN_SCHEDULED_EVENT
        )

    @property
    def is_missing_access(self) -> bool:
        """True if access to the target was denied or revoked."""
        return self.status_code == 403 or self.error_code in (
            self.MISSING_ACCESS,
            self.MISSING_PERMISSIONS
        )
