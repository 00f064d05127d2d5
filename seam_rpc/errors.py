"""
JSON-RPC 2.0 error model

Error codes, the RpcError exception and constructors for response envelopes.
Everything here is pure construction; encoding is left to the codec.
"""

from typing import Any, Dict, Mapping, Optional, Union

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Default for error descriptions that omit a code
SERVER_ERROR = -32000

RESERVED_CODE_MIN = -32768
RESERVED_CODE_MAX = -32000

DEFAULT_ERROR_MESSAGE = "Unauthorized"
APPLICATION_ERROR_MESSAGE = "Application error"


class RpcError(Exception):
    """JSON-RPC error with code, message, and optional data.

    Handlers raise it to report an application error. Missing fields are
    filled in when the error object is built.
    """

    def __init__(self, code: Optional[int] = None, message: Optional[str] = None, data: Any = None):
        super().__init__(message or "")
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a (possibly partial) error description."""
        error = {}
        if self.code is not None:
            error["code"] = self.code
        if self.message is not None:
            error["message"] = self.message
        if self.data is not None:
            error["data"] = self.data
        return error

    def __repr__(self):
        return f"RpcError(code={self.code!r}, message={self.message!r}, data={self.data!r})"


ErrorDescription = Union[RpcError, Mapping[str, Any]]


def is_reserved_code(code: int) -> bool:
    """Check whether a code falls in the range reserved by JSON-RPC 2.0"""
    return RESERVED_CODE_MIN <= code <= RESERVED_CODE_MAX


def error_object(error_data: Optional[ErrorDescription],
                 default_code: int = SERVER_ERROR,
                 default_message: str = DEFAULT_ERROR_MESSAGE) -> Dict[str, Any]:
    """Build a complete error object from a partial description

    Args:
        error_data: Mapping or RpcError with any of code/message/data
        default_code: Code used when the description has none
        default_message: Message used when the description has none

    Returns:
        Dict: Error object with code, message and (when present) data
    """
    if isinstance(error_data, RpcError):
        error_data = error_data.to_dict()
    elif error_data is not None and not isinstance(error_data, Mapping):
        # Bare values (e.g. a string reason) become the error data
        error_data = {"data": error_data}
    error_data = error_data or {}

    code = error_data.get("code")
    message = error_data.get("message")
    error = {
        "code": default_code if code is None else code,
        "message": default_message if message is None else message,
    }
    if error_data.get("data") is not None:
        error["data"] = error_data["data"]
    return error


def build_error_response(request_id: Any, error_data: Optional[ErrorDescription]) -> Dict[str, Any]:
    """Build a JSON-RPC 2.0 error response

    Args:
        request_id: Identifier of the originating request (None if unknown)
        error_data: Error description; code defaults to -32000 and message
            to "Unauthorized" when omitted

    Returns:
        Dict: Error response envelope
    """
    return {
        "jsonrpc": JSONRPC_VERSION,
        "error": error_object(error_data),
        "id": request_id,
    }


def build_result_response(request_id: Any, result: Any) -> Dict[str, Any]:
    """Build a JSON-RPC 2.0 success response"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "result": result,
        "id": request_id,
    }


def parse_error(data: Any = None) -> Dict[str, Any]:
    return {"code": PARSE_ERROR, "message": "Parse error", "data": data}


def invalid_request(data: Any = None) -> Dict[str, Any]:
    return {"code": INVALID_REQUEST, "message": "Invalid Request", "data": data}


def method_not_found(data: Any = None) -> Dict[str, Any]:
    return {"code": METHOD_NOT_FOUND, "message": "Method not found", "data": data}


def invalid_params(data: Any = None) -> Dict[str, Any]:
    return {"code": INVALID_PARAMS, "message": "Invalid params", "data": data}


def internal_error(data: Any = None) -> Dict[str, Any]:
    return {"code": INTERNAL_ERROR, "message": "Internal error", "data": data}
