"""Shared plumbing for the name-based lookup services."""

from dataclasses import dataclass
from typing import Any, Optional

import requests

from ..logger import StructuredLogger, get_logger

DEFAULT_TIMEOUT = 15.0


class LookupFailure(ValueError):
    """Base class for any failed lookup; callers treat all subclasses alike."""
    pass


class EmptyNameError(LookupFailure):
    """Raised before any network call when the name is empty."""

    def __init__(self):
        super().__init__("name cannot be empty")


class LookupRequestError(LookupFailure):
    """The request could not be sent or no response arrived."""
    pass


class LookupStatusError(LookupFailure):
    """The service answered with a non-200 status."""

    def __init__(self, service: str, status_code: int):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service} returned non-200 status code: {status_code}")


class LookupDecodeError(LookupFailure):
    """The response body was not the JSON the service documents."""
    pass


@dataclass(frozen=True)
class LookupResult:
    value: Any = None
    probability: float = 0.0
    count: Optional[int] = None

    @property
    def determined(self) -> bool:
        return self.value is not None and self.value != ""


UNDETERMINED = LookupResult()


class NameLookup:
    """
    Base class for a single-method lookup capability.

    Subclasses set `service` and `default_base_url` and implement `_interpret`,
    which turns the decoded JSON body into a LookupResult.
    """

    service = "lookup"
    default_base_url = ""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[StructuredLogger] = None,
    ):
        self.session = session or requests.Session()
        self.base_url = base_url or self.default_base_url
        self.timeout = timeout
        self.logger = logger or get_logger()

    def lookup_by_name(self, name: str) -> LookupResult:
        """
        Query the service for a first name.

        Raises:
            EmptyNameError: If name is empty (no request is made)
            LookupRequestError: On transport failure
            LookupStatusError: On a non-200 response
            LookupDecodeError: If the body cannot be interpreted
        """
        if not name or not name.strip():
            self.logger.error(f"Empty name provided for {self.service} lookup")
            raise EmptyNameError()

        self.logger.debug(f"Looking up {self.service}", name=name)
        self.logger.record_lookup_attempt(self.service)
        try:
            data = self._fetch_json(name)
            result = self._interpret(data)
        except LookupFailure as e:
            self.logger.record_lookup_failure(self.service, type(e).__name__)
            raise

        if result.determined:
            self.logger.record_lookup_success(self.service)
            self.logger.debug(
                f"Received {self.service} from API",
                name=name,
                value=result.value,
                probability=result.probability,
                count=result.count,
            )
        else:
            self.logger.record_lookup_undetermined(self.service)
            self.logger.debug(f"No {self.service} determination for name", name=name)
        return result

    def _fetch_json(self, name: str) -> Any:
        try:
            resp = self.session.get(self.base_url, params={"name": name}, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            self.logger.warning(f"{self.service} request timed out", url=self.base_url)
            raise LookupRequestError(f"{self.service} request timed out") from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{self.service} request error", url=self.base_url, error=str(e))
            raise LookupRequestError(f"{self.service} request error: {e}") from e

        if resp.status_code != 200:
            self.logger.error(f"{self.service} returned non-200 status code", status=resp.status_code)
            raise LookupStatusError(self.service, resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            self.logger.error(f"Failed to decode {self.service} response", error=str(e))
            raise LookupDecodeError(f"failed to decode {self.service} response: {e}") from e

    def _interpret(self, data: Any) -> LookupResult:
        raise NotImplementedError


def require_object(service: str, data: Any) -> dict:
    if not isinstance(data, dict):
        raise LookupDecodeError(f"{service} response is not a JSON object")
    return data


def as_probability(service: str, raw: Any) -> float:
    """Coerce a JSON number into a probability, rejecting anything outside [0, 1]."""
    if raw is None:
        return 0.0
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise LookupDecodeError(f"{service} probability is not a number: {raw!r}")
    if not 0.0 <= raw <= 1.0:
        raise LookupDecodeError(f"{service} probability out of range: {raw!r}")
    return float(raw)
