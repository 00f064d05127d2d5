"""
JSON-RPC 2.0 client

Builds request envelopes and correlates inbound responses with the
callbacks registered for them. Sending and receiving bytes is left to the
embedder's transport.
"""

import uuid
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from seam_rpc.codec import DecodeError, JsonCodec
from seam_rpc.config import RpcOptions
from seam_rpc.errors import JSONRPC_VERSION
from seam_rpc.telemetry.metrics import increment_counter

logger = logging.getLogger(__name__)

ClientMiddleware = Callable[[Dict[str, Any]], Dict[str, Any]]
ResponseCallback = Callable[[Dict[str, Any]], Any]

# Returned by receive when a response cannot be decoded. A message that
# decodes to JSON false returns the same value; callers that need to tell the
# two apart should check for a dict response.
PARSE_FAILED = False


def _default_id_factory() -> str:
    return str(uuid.uuid4())


class RpcClient:
    """JSON-RPC 2.0 client owning a middleware chain and pending-call registry"""

    def __init__(self,
                 options: Union[RpcOptions, Mapping[str, Any], None] = None,
                 codec: Optional[JsonCodec] = None,
                 id_factory: Optional[Callable[[], Any]] = None):
        """Initialize the client

        Args:
            options: RpcOptions or mapping; log_errors defaults to True
            codec: Codec for the wire format, JSON by default
            id_factory: Generator of request identifiers, uuid4 strings by default
        """
        self.options = RpcOptions.coerce(options)
        self.codec = codec or JsonCodec()
        self.id_factory = id_factory or _default_id_factory
        self._middlewares: List[ClientMiddleware] = []
        self._callbacks: Dict[Any, ResponseCallback] = {}

    def use(self, middleware: ClientMiddleware):
        """Add middleware for request processing

        Middleware is called as ``middleware(request)`` and returns the
        request to pass on, either the same dict or a replacement.

        Raises:
            TypeError: middleware is not callable
        """
        if not callable(middleware):
            raise TypeError("middleware must be callable")
        self._middlewares.append(middleware)

    def _apply_middleware(self, request: Dict[str, Any]) -> Dict[str, Any]:
        for middleware in self._middlewares:
            request = middleware(request)
            if not isinstance(request, dict):
                raise TypeError(f"middleware must return a request dict, got {type(request).__name__}")
        return request

    @staticmethod
    def _normalize_params(params: Any) -> Any:
        if params is None:
            return []
        if isinstance(params, (tuple, set, frozenset)):
            return list(params)
        return params

    def create_call(self,
                    method: str,
                    params: Any = None,
                    callback: Optional[ResponseCallback] = None) -> Tuple[Any, Dict[str, Any]]:
        """Create a JSON-RPC call request

        Args:
            method: RPC method name
            params: Method parameters, an empty list when omitted
            callback: Response callback registered for the new identifier

        Returns:
            Tuple: (request_id, request)

        Raises:
            TypeError: method is not a string
        """
        if not isinstance(method, str):
            raise TypeError("method must be a string")

        request_id = self.id_factory()
        request = {
            "jsonrpc": JSONRPC_VERSION,
            "method": method,
            "params": self._normalize_params(params),
            "id": request_id,
        }
        request = self._apply_middleware(request)

        if callback is not None:
            self.register_handler(request_id, callback)

        increment_counter("rpc.client.requests", 1, {"method": method})
        return request_id, request

    def create_notify(self, method: str, params: Any = None) -> Dict[str, Any]:
        """Create a JSON-RPC notification request

        Raises:
            TypeError: method is not a string
        """
        if not isinstance(method, str):
            raise TypeError("method must be a string")

        request = {
            "jsonrpc": JSONRPC_VERSION,
            "method": method,
            "params": self._normalize_params(params),
        }
        request = self._apply_middleware(request)

        increment_counter("rpc.client.notifications", 1, {"method": method})
        return request

    def register_handler(self, request_id: Any, callback: ResponseCallback):
        """Register a one-shot response callback, replacing any previous one

        Raises:
            TypeError: callback is not callable
        """
        if not callable(callback):
            raise TypeError("handler must be callable")
        self._callbacks[request_id] = callback

    def discard_handler(self, request_id: Any) -> bool:
        """Drop a pending callback, e.g. after the embedder's own timeout

        Returns:
            bool: True if a callback was registered for request_id
        """
        return self._callbacks.pop(request_id, None) is not None

    @property
    def pending_ids(self) -> List[Any]:
        return list(self._callbacks)

    @property
    def pending_count(self) -> int:
        return len(self._callbacks)

    def receive(self, message: Union[str, bytes]) -> Any:
        """Process an incoming response

        Args:
            message: JSON-RPC response text

        Returns:
            The decoded response, or PARSE_FAILED if it cannot be decoded.
            A bare JSON false payload is returned as False too and cannot be
            told apart from PARSE_FAILED.
        """
        try:
            response = self.codec.decode(message)
        except DecodeError as e:
            if self.options.log_errors:
                logger.error(f"RPC response parse error: {e}")
            increment_counter("rpc.client.errors", 1, {"type": "parse_error"})
            return PARSE_FAILED

        if not isinstance(response, dict):
            return response

        request_id = response.get("id")
        try:
            callback = self._callbacks.pop(request_id, None)
        except TypeError:
            # Unhashable identifier, cannot match any pending call
            callback = None

        if callback is None:
            logger.debug(f"No pending call for response id {request_id!r}")
            return response

        increment_counter("rpc.client.responses.routed", 1)
        try:
            callback(response)
        except Exception as e:
            if self.options.log_errors:
                logger.error(f"RPC response callback error for id {request_id!r}: {e}")
            increment_counter("rpc.client.errors", 1, {"type": "callback_error"})

        return response

    def receive_batch(self, messages: List[Union[str, bytes]]) -> List[Any]:
        """Process batch of responses, each one independently and in order"""
        return [self.receive(message) for message in messages]
