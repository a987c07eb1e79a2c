from __future__ import annotations

from typing import Any, Optional


class ContractGenError(Exception):
    """Base class for failures talking to the completion or deployment services."""


class RequestFailure(ContractGenError):
    """Transport-level failure: connection error, timeout, non-2xx status."""


class MalformedResponse(ContractGenError):
    """The reply was not JSON, or did not have the expected shape."""


class ProviderReportedFailure(ContractGenError):
    def __init__(self, status: str, reply: Optional[Any] = None) -> None:
        super().__init__(f"Deployment provider reported status '{status}'")
        self.status = status
        self.reply = reply
