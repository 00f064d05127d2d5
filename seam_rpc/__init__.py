"""
seam_rpc - transport-agnostic JSON-RPC 2.0 engine

Server side: message validation, a method registry and a middleware chain
run before dispatch. Client side: request construction through a middleware
chain, and correlation of responses with pending-call callbacks.

Both sides take and return encoded text, so they can be embedded in any
transport (socket, HTTP handler, message queue). A ZeroMQ binding lives in
seam_rpc.adapters.zeromq.
"""

from seam_rpc.client import PARSE_FAILED, RpcClient
from seam_rpc.codec import CodecError, DecodeError, EncodeError, JsonCodec
from seam_rpc.config import RpcOptions
from seam_rpc.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    RpcError,
    build_error_response,
    build_result_response,
)
from seam_rpc.server import MethodEntry, Outcome, RpcServer
from seam_rpc.validation import validate_request

__version__ = "0.1.0"

__all__ = [
    "RpcServer",
    "RpcClient",
    "RpcOptions",
    "MethodEntry",
    "Outcome",
    "RpcError",
    "JsonCodec",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "PARSE_FAILED",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
    "build_error_response",
    "build_result_response",
    "validate_request",
]
