# accounts/services/_shared/base.py
from __future__ import annotations

from accounts.core import errors as api_errors
from accounts.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InternalServiceError,
    NotFoundError,
    ServiceError,
    ValidationFailedError,
)
from accounts.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation to API errors.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply `SET TRANSACTION READ ONLY` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        Callers re-raise the result ``from exc`` so the chain is kept.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, ValidationFailedError):
            return api_errors.BadRequest(exc.message)

        if isinstance(exc, AuthenticationError):
            return api_errors.Unauthorized(exc.message)

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(exc.message)

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(exc.message)

        if isinstance(exc, InternalServiceError):
            return api_errors.InternalError(exc.message)

        # Any other ServiceError subclass → its own status hint
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=exc.message, status_code=exc.status_code)

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
