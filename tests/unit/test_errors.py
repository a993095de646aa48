"""Tests for pf_common.errors and pf_common.response."""

from src.pf_common.errors import (
    AccountNotFoundError,
    AppError,
    ConflictAlreadyResolvedError,
    ConflictTargetMissingError,
    ImportInProgressError,
    InvalidCsvError,
    InvalidSplitRatioError,
    RowValidationError,
)
from src.pf_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=3001, message="Bad file", http_status=422)
        assert err.http_status == 422

    def test_is_exception(self) -> None:
        err = AppError(code=3001, message="test")
        assert isinstance(err, Exception)


class TestSpecificErrors:
    def test_account_not_found(self) -> None:
        err = AccountNotFoundError(12)
        assert err.code == 2002
        assert err.http_status == 404
        assert "12" in err.message

    def test_invalid_csv(self) -> None:
        err = InvalidCsvError("missing columns: price")
        assert err.code == 3001
        assert err.http_status == 422
        assert "price" in err.message

    def test_import_in_progress(self) -> None:
        err = ImportInProgressError(3)
        assert err.code == 3002
        assert err.http_status == 409

    def test_conflict_already_resolved(self) -> None:
        err = ConflictAlreadyResolvedError(7, "ignored")
        assert err.code == 4004
        assert err.http_status == 409
        assert "ignored" in err.message

    def test_conflict_target_missing(self) -> None:
        err = ConflictTargetMissingError(7)
        assert err.code == 4005
        assert err.http_status == 409

    def test_invalid_split_ratio(self) -> None:
        err = InvalidSplitRatioError("1-5")
        assert err.code == 5001
        assert err.http_status == 422

    def test_row_validation_is_not_an_app_error(self) -> None:
        err = RowValidationError("Row 3: bad price")
        assert isinstance(err, ValueError)
        assert not isinstance(err, AppError)


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": 1}

    def test_error(self) -> None:
        resp = error_response(2002, "Account not found: 1")
        assert resp.code == 2002
        assert resp.message == "Account not found: 1"
        assert resp.data is None

    def test_serialization(self) -> None:
        d = ApiResponse(data={"imported": 2}).model_dump()
        assert set(d) == {"code", "message", "data", "timestamp", "request_id"}
        assert d["request_id"].startswith("req_")
