from typing import Any

from .common import LookupDecodeError, LookupResult, NameLookup, UNDETERMINED, require_object

AGIFY_URL = "https://api.agify.io"
FULL_CONFIDENCE_COUNT = 1000.0


def confidence_from_count(count: int) -> float:
    """Sample-size heuristic: 1000 or more samples means full confidence."""
    return min(count / FULL_CONFIDENCE_COUNT, 1.0)


class AgeLookup(NameLookup):
    """Age estimate from agify.io.

    Response shape: {"name": str, "age": int | null, "count": int}
    """

    service = "age"
    default_base_url = AGIFY_URL

    def _interpret(self, data: Any) -> LookupResult:
        body = require_object(self.service, data)
        age = body.get("age")
        count = body.get("count") or 0
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise LookupDecodeError(f"age count is not a non-negative integer: {count!r}")
        if age is None:
            return UNDETERMINED
        if isinstance(age, bool) or not isinstance(age, int) or age < 0:
            raise LookupDecodeError(f"age is not a non-negative integer: {age!r}")
        return LookupResult(value=age, probability=confidence_from_count(count), count=count)
