"""Custom exception hierarchy for pytoki."""

from __future__ import annotations


class TokiError(Exception):
    """Base exception for all pytoki errors."""


class TokiConfigError(TokiError):
    """Invalid or missing configuration."""


class ReferentialIntegrityError(TokiError):
    """A create operation named an owner that does not exist.

    Raised when a Card or Reservation is created for a Trip id that is
    not in the Trip table.  This always indicates a stale reference in
    the calling flow and is never recovered silently.
    """

    def __init__(
        self,
        message: str,
        *,
        entity: str = "",
        owner_id: str = "",
    ) -> None:
        self.entity = entity
        self.owner_id = owner_id
        super().__init__(message)


class TokiNotFoundError(TokiError):
    """An update/delete named an unknown identifier.

    Only raised when ``TokiConfig.strict_references`` is enabled; the
    default behaviour for stale identifiers is a silent no-op.
    """

    def __init__(self, message: str, *, entity: str = "", entity_id: str = "") -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message)


class TokiPersistenceError(TokiError):
    """Durable write or read failure in the persistence backend."""

    def __init__(self, message: str, *, table: str = "") -> None:
        self.table = table
        super().__init__(message)


class TokiMediaError(TokiError):
    """Remote media download failed (network, non-200, empty body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)
