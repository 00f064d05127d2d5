"""
Structured-data codec

Converts between wire text and in-memory envelopes. The server and client
take a codec instance so embedders can swap the encoding.
"""

import json
from typing import Any, Union


class CodecError(ValueError):
    """Base class for codec failures"""


class DecodeError(CodecError):
    """Raised when inbound text cannot be decoded"""


class EncodeError(CodecError):
    """Raised when an envelope cannot be encoded"""


class JsonCodec:
    """JSON codec backed by the json module"""

    def __init__(self, ensure_ascii: bool = False):
        self.ensure_ascii = ensure_ascii

    def decode(self, message: Union[str, bytes, bytearray]) -> Any:
        """Decode wire text into a structure

        Raises:
            DecodeError: The message is not valid JSON, not valid UTF-8, or nested too deeply
        """
        try:
            if isinstance(message, (bytes, bytearray)):
                message = message.decode("utf-8")
            return json.loads(message)
        except (TypeError, ValueError, RecursionError) as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors;
            # RecursionError comes from input nested deeper than the parser allows
            raise DecodeError(str(e)) from e

    def encode(self, envelope: Any) -> str:
        """Encode a structure into wire text

        Raises:
            EncodeError: The structure holds values JSON cannot represent or is nested too deeply
        """
        try:
            return json.dumps(envelope, ensure_ascii=self.ensure_ascii, separators=(",", ":"))
        except (TypeError, ValueError, RecursionError) as e:
            raise EncodeError(str(e)) from e
