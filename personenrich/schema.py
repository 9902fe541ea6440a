import uuid
from typing import Any, Dict, List

REQUIRED_STR_FIELDS = ["name", "surname"]
OPTIONAL_STR_FIELDS = [
    "patronymic",
    "gender",
    "nationality",
]
MAX_NAME_LENGTH = 100
# value field -> its probability field
PROBABILITY_PAIRS = {
    "gender": "gender_probability",
    "nationality": "nationality_probability",
}


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def is_country_code(v: Any) -> bool:
    """Two ASCII letters, in either case."""
    return isinstance(v, str) and len(v) == 2 and v.isascii() and v.isalpha()


def _valid_uuid(v: Any) -> bool:
    if isinstance(v, uuid.UUID):
        return True
    try:
        uuid.UUID(str(v))
        return True
    except ValueError:
        return False


def validate_person(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data or data[f] is None:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")
        elif len(data[f].strip()) > MAX_NAME_LENGTH:
            errors.append(f"Field '{f}' must be at most {MAX_NAME_LENGTH} characters")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if data.get("id") is not None and not _valid_uuid(data["id"]):
        errors.append("Field 'id' must be a valid UUID")

    age = data.get("age")
    if age is not None:
        if isinstance(age, bool) or not isinstance(age, int) or age < 0:
            errors.append("Field 'age' must be a non-negative integer")

    for value_field, prob_field in PROBABILITY_PAIRS.items():
        prob = data.get(prob_field)
        if prob is not None:
            if not _is_number(prob) or not 0.0 <= prob <= 1.0:
                errors.append(f"Field '{prob_field}' must be a number between 0 and 1")
        has_value = data.get(value_field) not in (None, "")
        if has_value != (prob is not None):
            errors.append(f"Fields '{value_field}' and '{prob_field}' must be provided together")

    nationality = data.get("nationality")
    if isinstance(nationality, str) and nationality:
        if not is_country_code(nationality.strip()):
            errors.append("Field 'nationality' must be a two-letter country code")

    return errors
