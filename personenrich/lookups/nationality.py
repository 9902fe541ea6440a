from typing import Any, Iterable, List, NamedTuple, Optional

from .common import LookupDecodeError, LookupResult, NameLookup, UNDETERMINED, as_probability, require_object
from ..schema import is_country_code

NATIONALIZE_URL = "https://api.nationalize.io"


class NationalityCandidate(NamedTuple):
    country_id: str
    probability: float


def select_best(candidates: Iterable[NationalityCandidate]) -> Optional[NationalityCandidate]:
    """
    Pick the most probable country.

    Only a strictly greater probability replaces the current best, so on an
    exact tie the candidate that came first wins. Returns None for no candidates.
    """
    best = None
    for candidate in candidates:
        if best is None or candidate[1] > best[1]:
            best = candidate
    return best


class NationalityLookup(NameLookup):
    """Nationality estimate from nationalize.io.

    Response shape: {"name": str, "country": [{"country_id": str, "probability": float}, ...]}
    """

    service = "nationality"
    default_base_url = NATIONALIZE_URL

    def _interpret(self, data: Any) -> LookupResult:
        body = require_object(self.service, data)
        candidates = self._candidates(body.get("country") or [])
        best = select_best(candidates)
        if best is None:
            return UNDETERMINED
        return LookupResult(value=best.country_id, probability=best.probability)

    def _candidates(self, raw: Any) -> List[NationalityCandidate]:
        if not isinstance(raw, list):
            raise LookupDecodeError("nationality country field is not a list")
        candidates = []
        for item in raw:
            if not isinstance(item, dict) or not isinstance(item.get("country_id"), str):
                raise LookupDecodeError(f"malformed nationality candidate: {item!r}")
            if not is_country_code(item["country_id"]):
                raise LookupDecodeError(f"nationality country_id is not a two-letter code: {item['country_id']!r}")
            candidates.append(NationalityCandidate(
                country_id=item["country_id"].upper(),
                probability=as_probability(self.service, item.get("probability")),
            ))
        return candidates
