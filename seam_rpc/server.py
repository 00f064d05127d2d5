"""
JSON-RPC 2.0 server

Transport-agnostic dispatcher: the embedder hands raw messages to
RpcServer.receive and sends back whatever text it returns. Every failure
(decode, middleware, validation, handler, encode) becomes an error response;
nothing raised while dispatching escapes receive.
"""

import time
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from opentelemetry import trace

from seam_rpc.codec import DecodeError, EncodeError, JsonCodec
from seam_rpc.config import RpcOptions
from seam_rpc.errors import (
    APPLICATION_ERROR_MESSAGE,
    SERVER_ERROR,
    ErrorDescription,
    RpcError,
    build_error_response,
    build_result_response,
    error_object,
    internal_error,
    invalid_params,
    invalid_request,
    is_reserved_code,
    parse_error,
)
from seam_rpc.telemetry.metrics import increment_counter, record_latency
from seam_rpc.telemetry.tracer import TRACE_CONTEXT_FIELD, create_span, extract_trace_context, with_trace_context
from seam_rpc.validation import validate_request

logger = logging.getLogger(__name__)


@dataclass
class MethodEntry:
    """A registered RPC method"""
    name: str
    handler: Callable[..., Any]
    metadata: Dict[str, Any] = field(default_factory=dict)


class Outcome(NamedTuple):
    """Handler return value carrying an application error next to the result

    When error is set it takes precedence over result.
    """
    result: Any = None
    error: Optional[ErrorDescription] = None


# Gate signature: (request, entry or None) -> False | (False, error) | True | None
ServerMiddleware = Callable[[Dict[str, Any], Optional[MethodEntry]], Union[bool, None, Tuple[Any, ...]]]


def _unpack_gate(outcome: Any) -> Tuple[Any, Optional[ErrorDescription]]:
    if isinstance(outcome, tuple):
        ok = outcome[0] if len(outcome) > 0 else None
        error_data = outcome[1] if len(outcome) > 1 else None
        return ok, error_data
    return outcome, None


class RpcServer:
    """JSON-RPC 2.0 server owning a method registry and a middleware chain

    Register methods and middleware before exposing the instance to traffic;
    dispatch only reads them.
    """

    def __init__(self, options: Union[RpcOptions, Mapping[str, Any], None] = None, codec: Optional[JsonCodec] = None):
        """Initialize the server

        Args:
            options: RpcOptions or mapping; log_errors defaults to True
            codec: Codec for the wire format, JSON by default
        """
        self.options = RpcOptions.coerce(options)
        self.codec = codec or JsonCodec()
        self._methods: Dict[str, MethodEntry] = {}
        self._middlewares: List[ServerMiddleware] = []

    @property
    def methods(self) -> Mapping[str, MethodEntry]:
        """Read-only view of the method registry"""
        return MappingProxyType(self._methods)

    def get_method(self, name: str) -> Optional[MethodEntry]:
        return self._methods.get(name)

    def register(self, name: str, handler: Callable[..., Any], metadata: Optional[Dict[str, Any]] = None) -> bool:
        """Register an RPC method

        Args:
            name: Method name; an existing entry with the same name is replaced
            handler: Callable invoked with the request params
            metadata: Opaque metadata handed to middleware

        Returns:
            bool: True on success

        Raises:
            TypeError: handler is not callable
        """
        if not callable(handler):
            raise TypeError("handler must be callable")

        self._methods[name] = MethodEntry(name=name, handler=handler, metadata=dict(metadata or {}))
        logger.debug(f"Registered RPC method: {name}")
        return True

    def register_many(self, methods: Mapping[str, Callable[..., Any]]):
        """Register multiple methods at once"""
        for name, handler in methods.items():
            self.register(name, handler)

    register_methods = register_many

    def method(self, name: Optional[str] = None, **metadata):
        """Decorator registering the wrapped function as an RPC method"""
        def decorator(func):
            self.register(name or func.__name__, func, metadata)
            return func
        return decorator

    def use(self, middleware: ServerMiddleware):
        """Add middleware for request processing

        Middleware is called as ``middleware(request, entry)`` where entry is
        the MethodEntry for the requested method, or None. Returning False or
        ``(False, error)`` rejects the request; anything else continues.

        Raises:
            TypeError: middleware is not callable
        """
        if not callable(middleware):
            raise TypeError("middleware must be callable")
        self._middlewares.append(middleware)

    def receive(self, message: Union[str, bytes]) -> str:
        """Process an incoming message

        Args:
            message: JSON-RPC request text

        Returns:
            str: Encoded JSON-RPC response
        """
        start_time = time.time()
        increment_counter("rpc.server.requests.received", 1)

        try:
            request = self.codec.decode(message)
        except DecodeError as e:
            increment_counter("rpc.server.errors", 1, {"type": "parse_error"})
            return self._encode(build_error_response(None, parse_error(str(e))))

        response = self._dispatch(request)

        latency_ms = (time.time() - start_time) * 1000
        method_name = request.get("method") if isinstance(request, dict) else None
        record_latency("rpc.server.request.latency", latency_ms, {
            "method": method_name if isinstance(method_name, str) else "unknown"
        })

        return self._encode(response)

    def receive_batch(self, messages: List[Union[str, bytes]]) -> List[str]:
        """Process batch of messages, each one independently and in order"""
        return [self.receive(message) for message in messages]

    def _dispatch(self, request: Any) -> Dict[str, Any]:
        if not isinstance(request, dict):
            increment_counter("rpc.server.errors", 1, {"type": "invalid_request"})
            return build_error_response(None, invalid_request("request must be an object"))

        rejection = self._run_middleware(request)
        if rejection is not None:
            return rejection

        error_response = validate_request(request, self._methods)
        if error_response is not None:
            increment_counter("rpc.server.errors", 1, {"type": "invalid_request"})
            return error_response

        return self._invoke(self._methods[request["method"]], request)

    def _run_middleware(self, request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        request_id = request.get("id")
        method_name = request.get("method")
        entry = self._methods.get(method_name) if isinstance(method_name, str) else None

        for middleware in self._middlewares:
            try:
                ok, error_data = _unpack_gate(middleware(request, entry))
            except KeyboardInterrupt:
                raise
            except BaseException as e:
                if self.options.log_errors:
                    logger.error(f"RPC middleware error for method {method_name}: {e}")
                increment_counter("rpc.server.errors", 1, {"type": "middleware_error"})
                return build_error_response(request_id, internal_error(str(e)))

            if ok is False:
                increment_counter("rpc.server.errors", 1, {"type": "middleware_rejected"})
                return build_error_response(
                    request_id, error_data if error_data is not None else internal_error("Invalid middleware response")
                )

        return None

    def _invoke(self, entry: MethodEntry, request: Dict[str, Any]) -> Dict[str, Any]:
        request_id = request.get("id")
        params = request.get("params")

        args, kwargs = (), {}
        if isinstance(params, list):
            args = params
        elif isinstance(params, dict):
            kwargs = params
        elif params is not None:
            increment_counter("rpc.server.errors", 1, {"type": "invalid_params"})
            return build_error_response(request_id, invalid_params("params must be an array or an object"))

        trace_context = extract_trace_context(request.get(TRACE_CONTEXT_FIELD))

        try:
            with with_trace_context(trace_context):
                with create_span(f"rpc.server/{entry.name}", {"rpc.method": entry.name}, kind=trace.SpanKind.SERVER):
                    increment_counter("rpc.server.method.calls", 1, {"method": entry.name})
                    outcome = entry.handler(*args, **kwargs)
        except RpcError as e:
            return self._application_error(entry, request_id, e)
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            if self.options.log_errors:
                logger.error(f"RPC error in method {entry.name}: {e}")
            increment_counter("rpc.server.method.errors", 1, {"method": entry.name})
            return build_error_response(request_id, internal_error(str(e)))

        if isinstance(outcome, Outcome):
            if outcome.error is not None:
                return self._application_error(entry, request_id, outcome.error)
            outcome = outcome.result

        return build_result_response(request_id, outcome)

    def _application_error(self, entry: MethodEntry, request_id: Any, error: ErrorDescription) -> Dict[str, Any]:
        error = error_object(error, SERVER_ERROR, APPLICATION_ERROR_MESSAGE)
        code = error["code"]
        increment_counter("rpc.server.method.errors", 1, {
            "method": entry.name,
            "code_range": "reserved" if isinstance(code, int) and is_reserved_code(code) else "application",
        })
        return build_error_response(request_id, error)

    def _encode(self, response: Dict[str, Any]) -> str:
        try:
            return self.codec.encode(response)
        except EncodeError as e:
            if self.options.log_errors:
                logger.error(f"RPC response encode error: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "encode_error"})
            return self.codec.encode(build_error_response(response.get("id"), internal_error(str(e))))
