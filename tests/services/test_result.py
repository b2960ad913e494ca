"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from segseq.errors import ConfigurationError, StorageAccessError
from segseq.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="next", data={"ids": [1, 2]})
        assert result.ok is True
        assert result.op == "next"
        assert result.data == {"ids": [1, 2]}
        assert result.warnings == []
        assert result.error is None

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="init", data={"seeded": 2}, warnings=["slow"])
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["seeded"] == 2
        assert parsed["warnings"] == ["slow"]
        assert parsed["error"] is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="show")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestFailure:
    def test_from_exception(self) -> None:
        result = ServiceResult.failure("next", ConfigurationError("bad table"), generator="orders")
        assert result.ok is False
        assert result.error == ServiceError(
            code="CONFIGURATION_ERROR",
            message="bad table",
            detail={"generator": "orders"},
        )

    def test_includes_cause(self) -> None:
        try:
            try:
                raise OSError("disk I/O error")
            except OSError as exc:
                raise StorageAccessError("Unable to read segment 'x'") from exc
        except StorageAccessError as err:
            result = ServiceResult.failure("next", err)
        assert result.error is not None
        assert result.error.code == "STORAGE_ERROR"
        assert result.error.detail == {"cause": "disk I/O error"}


class TestConstructors:
    def test_success(self) -> None:
        result = ServiceResult.success("show", {"generators": []}, iter(["stale"]))
        assert result.ok
        assert result.warnings == ["stale"]
        assert result.exit_code == 0

    def test_rejected(self) -> None:
        result = ServiceResult.rejected("next", "INVALID_COUNT", "Count must be positive")
        assert not result.ok
        assert result.error == ServiceError(code="INVALID_COUNT", message="Count must be positive")
        assert result.exit_code == 1
