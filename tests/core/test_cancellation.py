from __future__ import annotations

import pytest

from pdftool.core.cancellation import CancellationToken
from pdftool.exceptions import ErrorCode, OperationCancelledError, OperationTimeoutError


def test_token_without_deadline_never_expires() -> None:
    token = CancellationToken.none()
    token.check("anything")
    assert token.remaining() is None


def test_expired_deadline_raises_timeout() -> None:
    token = CancellationToken(0, operation="merge")
    with pytest.raises(OperationTimeoutError) as excinfo:
        token.check("write")
    assert excinfo.value.code is ErrorCode.TIMEOUT
    assert excinfo.value.operation == "merge"


def test_cancel_is_distinct_from_timeout() -> None:
    token = CancellationToken(60)
    token.cancel()
    with pytest.raises(OperationCancelledError) as excinfo:
        token.check()
    assert excinfo.value.code is ErrorCode.CANCELLED
