"""
Error taxonomy shared by the access subsystems.

Every error carries a short user-facing message so routes can surface it
directly. Running out of daily quota is a normal state and is not modelled
here.
"""

from typing import Optional


class AccessError(Exception):
    """Base class for access engine errors."""

    code = "access_error"
    default_message = "操作失败"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class Unauthorized(AccessError):
    """Actor tier is too low for the requested action."""

    code = "unauthorized"
    default_message = "权限不足"


class NotFound(AccessError):
    """Target principal, article or origin does not exist."""

    code = "not_found"
    default_message = "目标不存在"


class InvalidTransition(AccessError):
    """Approval status change not allowed from the current status."""

    code = "invalid_transition"
    default_message = "当前状态不允许此操作"


class InvalidRequest(AccessError):
    """Malformed input such as an unparsable origin."""

    code = "invalid_request"
    default_message = "请求参数无效"


class TransientBackendFailure(AccessError):
    """Storage or network call failed."""

    code = "backend_unavailable"
    default_message = "服务暂时不可用，请稍后再试"


class DuplicateRecord(AccessError):
    """Uniqueness conflict reported by a store on insert."""

    code = "duplicate"
    default_message = "记录已存在"


_HTTP_STATUS = {
    Unauthorized: 403,
    NotFound: 404,
    InvalidTransition: 400,
    InvalidRequest: 400,
    DuplicateRecord: 409,
    TransientBackendFailure: 503,
}


def http_status_for(error: AccessError) -> int:
    """HTTP status used when an error reaches a route."""
    for error_type, status in _HTTP_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500
