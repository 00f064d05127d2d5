"""
Structural validation of decoded JSON-RPC 2.0 requests
"""

from typing import Any, Dict, Mapping, Optional

from seam_rpc.errors import (
    JSONRPC_VERSION,
    build_error_response,
    invalid_request,
    method_not_found,
)


def validate_request(request: Mapping[str, Any], methods: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Validate a decoded request against the registered methods

    Checks run in order and stop at the first failure.

    Args:
        request: Decoded request object
        methods: Registry of method name to method entry

    Returns:
        Dict: Error response for the first failed check, or None if valid
    """
    request_id = request.get("id")

    if request.get("jsonrpc") != JSONRPC_VERSION:
        return build_error_response(request_id, invalid_request("jsonrpc must be '2.0'"))

    method_name = request.get("method")
    if method_name is None:
        return build_error_response(request_id, invalid_request("method is required"))

    if not isinstance(method_name, str):
        return build_error_response(request_id, invalid_request("method must be a string"))

    if method_name not in methods:
        return build_error_response(
            request_id, method_not_found(f"Method '{method_name}' not registered")
        )

    return None
