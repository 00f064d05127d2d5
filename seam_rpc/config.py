"""
Configuration for RPC server and client instances
"""
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


@dataclass
class RpcOptions:
    """Options shared by RpcServer and RpcClient

    log_errors is the only recognized option; any other key is kept in
    ``extra`` without validation.
    """
    log_errors: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None) -> "RpcOptions":
        """Create options from a plain mapping"""
        options = dict(options or {})
        log_errors = options.pop("log_errors", True)
        if isinstance(log_errors, str):
            log_errors = _parse_bool(log_errors)
        return cls(log_errors=bool(log_errors), extra=options)

    @classmethod
    def from_env(cls, prefix: str = "SEAM_RPC_") -> "RpcOptions":
        """Create options from environment variables"""
        raw = os.getenv(f"{prefix}LOG_ERRORS")
        if raw is None:
            return cls()
        return cls(log_errors=_parse_bool(raw))

    @classmethod
    def coerce(cls, options: Union["RpcOptions", Mapping[str, Any], None]) -> "RpcOptions":
        if isinstance(options, cls):
            return options
        return cls.from_mapping(options)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "log_errors":
            return self.log_errors
        return self.extra.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {"log_errors": self.log_errors, **self.extra}
