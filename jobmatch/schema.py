from typing import Any, Dict, List

from .errors import ValidationError

ID_FIELDS = ["job_id", "candidate_id", "requester_id"]


def _is_positive_int(v: Any) -> bool:
    # bool is an int subclass; True is not a valid id
    return isinstance(v, int) and not isinstance(v, bool) and v > 0


def validate_query(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    Checks ids and the percentage threshold passed to on-demand match
    queries. Only keys present in ``data`` are checked.
    """
    errors: List[str] = []

    for f in ID_FIELDS:
        if f in data and not _is_positive_int(data[f]):
            errors.append(f"Field '{f}' must be a positive integer")

    if "min_score_percent" in data:
        v = data["min_score_percent"]
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            errors.append("Field 'min_score_percent' must be a number")
        elif not 0 <= v <= 100:
            errors.append("Field 'min_score_percent' must be between 0 and 100")

    return errors


def validate_query_strict(**data: Any) -> None:
    """Raise ValidationError if any query argument is malformed."""
    errors = validate_query(data)
    if errors:
        raise ValidationError(errors)
