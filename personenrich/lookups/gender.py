from typing import Any

from .common import LookupDecodeError, LookupResult, NameLookup, UNDETERMINED, as_probability, require_object

GENDERIZE_URL = "https://api.genderize.io"


class GenderLookup(NameLookup):
    """Gender estimate from genderize.io.

    Response shape: {"name": str, "gender": str | null, "probability": float, "count": int}
    """

    service = "gender"
    default_base_url = GENDERIZE_URL

    def _interpret(self, data: Any) -> LookupResult:
        body = require_object(self.service, data)
        gender = body.get("gender")
        if gender is None or gender == "":
            return UNDETERMINED
        if not isinstance(gender, str):
            raise LookupDecodeError(f"gender is not a string: {gender!r}")
        return LookupResult(
            value=gender,
            probability=as_probability(self.service, body.get("probability")),
            count=body.get("count"),
        )
