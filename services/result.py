import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from core.errors import ErrorAPI, ExternalServiceError

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """Outcome of a call to an external service: ``data`` or ``error``."""
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorAPI] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ErrorAPI) -> "Result[T]":
        return cls(success=False, error=error)

    def unwrap(self) -> Optional[T]:
        """Return ``data`` or raise the carried error."""
        if not self.success:
            raise self.error or ExternalServiceError()
        return self.data


def handler_service(fn: Callable[[], T], label: str) -> Result[T]:
    """Run ``fn`` and fold any raised error into a failed Result.

    ``label`` names the external operation and ends up in the error details.
    """
    try:
        return Result.ok(fn())
    except ErrorAPI as e:
        e.details.setdefault("service", label)
        log.warning("External operation failed (%s): %s", label, e.message)
        return Result.fail(e)
    except Exception:
        log.exception("Unexpected failure in external operation (%s)", label)
        return Result.fail(ExternalServiceError(
            f"Error inesperado al {label}", status_code=502, details={"service": label},
        ))
