"""Results handed from the service layer to the CLI.

CLI-facing service methods return a :class:`ServiceResult` instead of
raising :class:`~segseq.errors.SegseqError`; library callers use
:class:`~segseq.services.generator.TableGenerator` directly and get the
exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field

from segseq.errors import SegseqError


class ServiceError(BaseModel):
    """What went wrong, under a stable machine-readable code."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: SegseqError, **detail: Any) -> ServiceError:
        if exc.__cause__ is not None:
            detail.setdefault("cause", str(exc.__cause__))
        return cls(code=exc.code, message=str(exc), detail=detail)


class ServiceResult(BaseModel):
    """Outcome of one operation (``init``, ``next``, ``show``...).

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation.
        data: Operation-specific payload on success.
        warnings: Problems that did not stop the operation.
        error: Set exactly when ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any] | None = None,
        warnings: Iterable[str] = (),
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data or {}, warnings=list(warnings))

    @classmethod
    def failure(cls, op: str, exc: SegseqError, **detail: Any) -> ServiceResult:
        """Failed result carrying the code and message of *exc*."""
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc, **detail))

    @classmethod
    def rejected(cls, op: str, code: str, message: str) -> ServiceResult:
        """Failed result for a request refused before any work was done."""
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message))

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
