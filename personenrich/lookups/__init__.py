from .common import (
    LookupFailure,
    EmptyNameError,
    LookupRequestError,
    LookupStatusError,
    LookupDecodeError,
    LookupResult,
)
from .age import AgeLookup
from .gender import GenderLookup
from .nationality import NationalityLookup, NationalityCandidate, select_best

__all__ = [
    "LookupFailure",
    "EmptyNameError",
    "LookupRequestError",
    "LookupStatusError",
    "LookupDecodeError",
    "LookupResult",
    "AgeLookup",
    "GenderLookup",
    "NationalityLookup",
    "NationalityCandidate",
    "select_best",
]
