"""Tests for the error taxonomy and exception categories."""

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from referral_core.utils.exceptions import (
    AlreadyBound,
    AlreadySettled,
    ConcurrentUpdateError,
    InsufficientBalance,
    InvalidReferral,
    InvalidTransition,
    NotFound,
    ReferralCoreError,
    SelfReferral,
    ServerError,
    ValidationError,
    is_transient,
)


class TestReferralCoreError:
    """Base error behaviour."""

    def test_message_and_context(self):
        error = InsufficientBalance("Not enough", user_id=7, amount="50.01")

        assert str(error) == "Not enough"
        assert error.message == "Not enough"
        assert error.context == {"user_id": 7, "amount": "50.01"}

    def test_to_dict_stringifies_context(self):
        error = NotFound("User not found", user_id=7)

        assert error.to_dict() == {
            "error": "not_found",
            "message": "User not found",
            "context": {"user_id": "7"},
        }

    def test_all_are_referral_core_errors(self):
        for cls in (
            ValidationError,
            InvalidReferral,
            SelfReferral,
            AlreadyBound,
            InsufficientBalance,
            InvalidTransition,
            NotFound,
            AlreadySettled,
            ConcurrentUpdateError,
            ServerError,
        ):
            assert issubclass(cls, ReferralCoreError)

    def test_codes_are_unique(self):
        classes = [
            ValidationError,
            InvalidReferral,
            SelfReferral,
            AlreadyBound,
            InsufficientBalance,
            InvalidTransition,
            NotFound,
            AlreadySettled,
            ConcurrentUpdateError,
            ServerError,
        ]
        codes = [cls.code for cls in classes]
        assert len(codes) == len(set(codes))


class TestCategories:
    """Transient versus business errors."""

    def test_operational_error_is_transient(self):
        error = OperationalError("SELECT 1", {}, Exception("lock timeout"))
        assert is_transient(error) is True

    def test_concurrent_update_is_transient(self):
        assert is_transient(ConcurrentUpdateError("race")) is True

    def test_invalidated_connection_is_transient(self):
        error = DBAPIError(
            "SELECT 1", {}, Exception("gone"), connection_invalidated=True
        )
        assert is_transient(error) is True

    def test_integrity_error_is_not_transient(self):
        error = IntegrityError("INSERT", {}, Exception("unique"))
        assert is_transient(error) is False
