# src/seedtrail/core/canonical.py
"""
Structured-text encoding for candidate keys.

Candidate keys are stored as JSON objects whose key order is the candidate
key's declared attribute order. The encoding is deterministic for a given
mapping, which is what lets the tracker find a destroyed tag by comparing
encoded candidate keys in SQL.

Decoding never fails: text that is not a JSON object is a legacy or custom
value and comes back as a RawKey holding the original text.

NaN and Infinity are REJECTED on encode, not silently converted.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from seedtrail.contracts.tags import CandidateKey, RawKey, StructuredKey


def _normalize_value(obj: Any) -> Any:
    """Convert a non-JSON-native attribute value to a JSON-safe primitive.

    Raises:
        TypeError: If the value has no stable text form
    """
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime | date | time):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        if not obj.is_finite():
            raise ValueError(f"Cannot encode non-finite Decimal in candidate key: {obj}")
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, bytes):
        return obj.hex()
    raise TypeError(f"Cannot encode {type(obj).__name__} in candidate key: {obj!r}")


def encode_candidate_key(values: Mapping[str, Any] | StructuredKey) -> str:
    """Encode an ordered attribute mapping as structured text.

    Raises:
        ValueError: If a value is a non-finite float or Decimal
        TypeError: If a value cannot be represented as text
    """
    if isinstance(values, StructuredKey):
        values = values.values
    for value in values.values():
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            raise ValueError(f"Cannot encode non-finite float in candidate key: {value}")
    return json.dumps(dict(values), default=_normalize_value, allow_nan=False)


def decode_candidate_key(text: str) -> CandidateKey:
    """Decode stored candidate-key text into its variant.

    JSON objects become StructuredKey; anything else, including valid JSON
    that is not an object (a bare number or string), stays a RawKey.
    """
    try:
        decoded = json.loads(text)
    except ValueError:
        return RawKey(text)
    if type(decoded) is not dict:
        return RawKey(text)
    return StructuredKey(decoded)
