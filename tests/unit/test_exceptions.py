"""Unit tests for custom exception hierarchy"""
import logging
import pytest
from datetime import datetime

import psycopg

from soloist.exceptions import (
    SoloistError,
    ValidationError,
    ProgressionError,
    InvalidAmountError,
    AlreadyCompletedError,
    NotAvailableError,
    LockReason,
    DatabaseError,
    ConnectionError,
    QueryError,
    RecordNotFoundError,
    ConfigurationError,
    wrap_external_exception
)


class TestSoloistError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = SoloistError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = SoloistError(
            message="Snapshot save failed",
            user_id="hunter-1",
            operation="save_snapshot",
            context={"quest_id": "q-1"},
            user_message="Could not save your progress"
        )
        assert error.user_id == "hunter-1"
        assert error.operation == "save_snapshot"
        assert error.context["quest_id"] == "q-1"
        assert error.user_message == "Could not save your progress"

    def test_to_dict(self):
        """Test exception serialization"""
        error_dict = SoloistError(message="Test error", user_id="hunter-1").to_dict()
        assert error_dict["error"] == "SoloistError"
        assert error_dict["message"] == "Test error"
        assert "request_id" in error_dict
        assert "timestamp" in error_dict

    def test_logged_on_creation(self, caplog):
        """Test errors log themselves at ERROR"""
        with caplog.at_level(logging.WARNING, logger="soloist.exceptions"):
            SoloistError("boom")
        assert caplog.records[-1].levelno == logging.ERROR
        assert "boom" in caplog.records[-1].getMessage()


class TestProgressionErrors:
    """Test rejection errors"""

    def test_rejections_log_at_warning(self, caplog):
        """Test expected rejections log at WARNING"""
        with caplog.at_level(logging.WARNING, logger="soloist.exceptions"):
            AlreadyCompletedError("mission", "f-open")
        assert caplog.records[-1].levelno == logging.WARNING

    def test_invalid_amount(self):
        """Test invalid amount error"""
        error = InvalidAmountError(-5, user_id="hunter-1")
        assert isinstance(error, ProgressionError)
        assert error.amount == -5
        assert error.context["amount"] == -5
        assert error.user_id == "hunter-1"

    def test_already_completed(self):
        """Test already completed error"""
        error = AlreadyCompletedError("quest", "q-1")
        assert error.record_type == "quest"
        assert error.record_id == "q-1"
        assert "already" in error.user_message

    @pytest.mark.parametrize("reason", list(LockReason))
    def test_not_available_reasons(self, reason):
        """Test every lock reason has a user message"""
        error = NotAvailableError("m-1", reason)
        assert error.reason == reason
        assert error.context["reason"] == reason.value
        assert error.user_message

    def test_validation_error(self):
        """Test validation error with field"""
        error = ValidationError(message="out of range", field="task_index", value=9)
        assert error.field == "task_index"
        assert error.value == 9
        assert error.user_message == "Invalid task_index: out of range"


class TestDatabaseErrors:
    """Test database errors"""

    def test_hierarchy(self):
        """Test database errors share a base"""
        assert issubclass(ConnectionError, DatabaseError)
        assert issubclass(QueryError, DatabaseError)
        assert issubclass(RecordNotFoundError, DatabaseError)

    def test_query_error(self):
        """Test query error keeps the query"""
        error = QueryError("bad", query="SELECT 1")
        assert error.query == "SELECT 1"
        assert error.context["query"] == "SELECT 1"

    def test_record_not_found(self):
        """Test record not found error"""
        error = RecordNotFoundError("missing", record_type="User", record_id="hunter-1")
        assert error.user_message == "User not found."

    def test_configuration_error(self):
        """Test configuration error keeps the key"""
        error = ConfigurationError("bad table", config_key="rank_thresholds")
        assert error.config_key == "rank_thresholds"


class TestWrapExternalException:
    """Test wrapping psycopg exceptions"""

    def test_operational_error(self):
        """Test connection failures map to ConnectionError"""
        original = psycopg.OperationalError("connection refused")
        wrapped = wrap_external_exception(original, operation="load_user", user_id="hunter-1")
        assert isinstance(wrapped, ConnectionError)
        assert wrapped.cause is original
        assert wrapped.operation == "load_user"

    def test_query_failure(self):
        """Test other psycopg errors map to QueryError"""
        wrapped = wrap_external_exception(psycopg.ProgrammingError("syntax error"), operation="save_snapshot")
        assert isinstance(wrapped, QueryError)

    def test_generic_error(self):
        """Test non-database errors fall back to the base class"""
        wrapped = wrap_external_exception(RuntimeError("oops"), operation="seed")
        assert type(wrapped) is SoloistError
        assert "seed failed" in wrapped.message
