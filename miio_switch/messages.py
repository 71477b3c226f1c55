#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
JSON request and response bodies carried inside encrypted miIO payloads.
"""

from __future__ import annotations

import json

from .internal_types import *
from .constants import COMMAND_ID
from .exceptions import EncodingError, DecodeError, NoPowerStateError

class MiioRequest:
    """A single miIO command, e.g. {"id": 1, "method": "set_power", "params": ["on"]}"""

    id: int
    method: str
    params: List[Jsonable]

    def __init__(self, method: str, params: Optional[Sequence[Jsonable]]=None, id: int=COMMAND_ID):
        self.id = id
        self.method = method
        self.params = [] if params is None else list(params)

    def to_jsonable(self) -> JsonableDict:
        return { "id": self.id, "method": self.method, "params": self.params }

    def encode(self) -> bytes:
        """Serializes the request to compact UTF-8 JSON."""
        try:
            return json.dumps(self.to_jsonable(), separators=(',', ':')).encode('utf-8')
        except (TypeError, ValueError) as e:
            raise EncodingError(f"cannot encode {self}: {e}") from e

    @classmethod
    def set_power(cls, on: bool) -> MiioRequest:
        return cls("set_power", ["on" if on else "off"])

    @classmethod
    def get_power(cls) -> MiioRequest:
        return cls("get_prop", ["power"])

    def __str__(self) -> str:
        return f"MiioRequest(id={self.id}, method={self.method!r}, params={self.params!r})"

    def __repr__(self) -> str:
        return str(self)

class MiioResponse:
    """A decoded reply, e.g. {"id": 1, "result": ["on"]}"""

    id: Optional[int]
    result: List[str]
    """The result strings. Empty if the reply had no result."""

    def __init__(self, result: Optional[Sequence[str]]=None, id: Optional[int]=None):
        self.id = id
        self.result = [] if result is None else list(result)

    @classmethod
    def decode(cls, data: bytes) -> MiioResponse:
        """Parses a decrypted reply payload.

        Some devices append NUL bytes after the JSON text; they are ignored.
        A missing "result" decodes to an empty result, and an "id" that is not an
        integer decodes to None. Raises DecodeError if the
        payload is not a JSON object or "result" is not a list of strings.
        """
        try:
            obj = json.loads(data.rstrip(b'\x00').decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"parsing response: {e}") from e
        if not isinstance(obj, dict):
            raise DecodeError(f"parsing response: expected a JSON object, got {type(obj).__name__}")
        result = obj.get("result", None)
        if result is None:
            result = []
        if not isinstance(result, list) or not all(isinstance(x, str) for x in result):
            raise DecodeError(f"parsing response: result is not a list of strings: {result!r}")
        id = obj.get("id", None)
        if not isinstance(id, int) or isinstance(id, bool):
            id = None
        return cls(result, id=id)

    @property
    def power_state(self) -> bool:
        """True iff the first result is "on". Raises NoPowerStateError if there is no result."""
        if len(self.result) == 0:
            raise NoPowerStateError()
        return self.result[0] == "on"

    def __str__(self) -> str:
        return f"MiioResponse(id={self.id}, result={self.result!r})"

    def __repr__(self) -> str:
        return str(self)
