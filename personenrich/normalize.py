from typing import Any, Dict, Optional


def normalize_text(s: str) -> str:
    return " ".join(s.strip().split())


def normalize_name(name: str) -> str:
    return normalize_text(name)


def normalize_gender(gender: Optional[str]) -> Optional[str]:
    if gender is None:
        return None
    return normalize_text(gender).lower() or None


def normalize_country_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    return code.strip().upper() or None


def normalize_person(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of validated person data with canonical text fields."""
    out = dict(data)
    for key in ("name", "surname"):
        if isinstance(out.get(key), str):
            out[key] = normalize_name(out[key])
    if isinstance(out.get("patronymic"), str):
        out["patronymic"] = normalize_name(out["patronymic"]) or None
    if "gender" in out:
        out["gender"] = normalize_gender(out["gender"])
    if "nationality" in out:
        out["nationality"] = normalize_country_code(out["nationality"])
    return out
