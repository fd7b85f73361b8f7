"""
JSON-RPC Method Extraction
==========================
Normalizes a request body into an ordered tuple of method names.

A body is one of three shapes:
- SingleCall: one call object
- BatchCall: an ordered list of call objects
- MalformedBody: absent or anything else

Malformed input never raises here. Reporting it is the dispatcher's job,
and a malformed body names no methods.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union


@dataclass(frozen=True)
class Call:
    """One JSON-RPC invocation."""
    method: str
    id: Any = None
    params: Any = None


@dataclass(frozen=True)
class SingleCall:
    call: Call

    @property
    def methods(self) -> Tuple[str, ...]:
        return (self.call.method,)


@dataclass(frozen=True)
class BatchCall:
    calls: Tuple[Call, ...]

    @property
    def methods(self) -> Tuple[str, ...]:
        return tuple(call.method for call in self.calls)


@dataclass(frozen=True)
class MalformedBody:
    @property
    def methods(self) -> Tuple[str, ...]:
        return ()


RequestBody = Union[SingleCall, BatchCall, MalformedBody]


def _parse_call(item: Any) -> Optional[Call]:
    if not isinstance(item, dict):
        return None
    method = item.get("method")
    if not isinstance(method, str):
        return None
    return Call(method=method, id=item.get("id"), params=item.get("params"))


def parse_request_body(body: Any) -> RequestBody:
    """
    Classify a deserialized JSON body.

    Batch entries that are not call objects are skipped: they cannot name
    a method, and the rest of the batch is still checked.
    """
    if isinstance(body, list):
        calls = (_parse_call(item) for item in body)
        return BatchCall(calls=tuple(call for call in calls if call is not None))

    call = _parse_call(body)
    if call is None:
        return MalformedBody()
    return SingleCall(call=call)


def extract_methods(body: Any) -> Tuple[str, ...]:
    """Ordered method names named by a deserialized body (empty if malformed)."""
    return parse_request_body(body).methods


def decode_json_body(raw: Union[bytes, str, None]) -> Any:
    """Decode raw transport payload to JSON, or None if absent or undecodable."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return None
