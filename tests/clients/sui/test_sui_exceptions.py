"""Tests for the Sui client exception hierarchy."""

import pytest

from fate_pools.clients.sui.exceptions import DecodeError, QueryError, QueryErrorKind, SuiError


class TestQueryError:
    """Tests for QueryError."""

    def test_message_carries_kind(self) -> None:
        """Test the string form is prefixed with the kind."""
        error = QueryError(msg="timed out", kind=QueryErrorKind.TRANSPORT)
        assert str(error) == "[transport] timed out"
        assert error.msg == "timed out"

    @pytest.mark.parametrize(
        ("kind", "retryable"),
        [
            (QueryErrorKind.TRANSPORT, True),
            (QueryErrorKind.EXECUTION, False),
            (QueryErrorKind.MISSING_RESULT, False),
            (QueryErrorKind.NOT_FOUND, False),
            (QueryErrorKind.UNSUPPORTED, False),
        ],
    )
    def test_only_transport_is_retryable(
        self,
        kind: QueryErrorKind,
        retryable: bool,  # noqa: FBT001
    ) -> None:
        """Test only transport failures are worth retrying on the next tick."""
        assert QueryError(msg="x", kind=kind).retryable is retryable

    def test_is_sui_error(self) -> None:
        """Test QueryError derives from SuiError."""
        assert isinstance(QueryError(msg="x", kind=QueryErrorKind.EXECUTION), SuiError)


class TestDecodeError:
    """Tests for DecodeError."""

    def test_message_and_shape(self) -> None:
        """Test the message names the shape being decoded."""
        error = DecodeError("need 8 bytes at offset 0, got 3", "u64")
        assert str(error) == "cannot decode u64: need 8 bytes at offset 0, got 3"
        assert error.shape == "u64"
        assert isinstance(error, SuiError)
