"""Front-matter decoding of scheduling constraints.

An event description may start with a YAML block delimited by ``---``
lines::

    ---
    relativeTo:
      summary: Week 1 kickoff
      anchor: end
      offsetDays: 2
    optional: true
    ---
    Free text description follows here.

Recognized keys are ``relativeTo``, ``fixed`` (``{week, day}``) and
``optional``. ``relativeTo`` and ``fixed`` are mutually exclusive.
"""

import re
from typing import Any

import yaml

from .models import Constraint, FixedConstraint, NoConstraint, RelativeConstraint


FRONT_MATTER_PATTERN = re.compile(r"\A\s*---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def has_front_matter(description: str) -> bool:
    """Check whether a description starts with a front-matter block."""
    return bool(description) and FRONT_MATTER_PATTERN.match(description) is not None


def split_front_matter(description: str) -> tuple[dict[str, Any], str]:
    """Split a description into its decoded front matter and the remaining text.

    Args:
        description: Raw event description.

    Returns:
        Tuple of (front matter mapping, remaining description). The mapping
        is empty if no block is present.

    Raises:
        ValueError: If the block is not valid YAML or not a mapping.
    """
    match = FRONT_MATTER_PATTERN.match(description or "")
    if not match:
        return {}, description or ""

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid front matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Front matter must be a mapping")

    return data, description[match.end():]


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"'{name}' must be an integer, got {value!r}")
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{name}' must be an integer, got {value!r}")


def decode_constraint(description: str) -> Constraint:
    """Decode the scheduling constraint embedded in an event description.

    Raises:
        ValueError: If the front matter is malformed.
    """
    data, _ = split_front_matter(description)
    optional = bool(data.get("optional", False))

    relative = data.get("relativeTo")
    fixed = data.get("fixed")

    if relative is not None and fixed is not None:
        raise ValueError("'relativeTo' and 'fixed' cannot be combined")

    if relative is not None:
        if isinstance(relative, str):
            relative = {"summary": relative}
        if not isinstance(relative, dict):
            raise ValueError("'relativeTo' must be a mapping or a summary string")
        return RelativeConstraint(
            summary=str(relative.get("summary", "")).strip(),
            anchor=str(relative.get("anchor", "start")).lower(),  # type: ignore[arg-type]
            offset_days=_as_int(relative.get("offsetDays", 0), "offsetDays"),
            optional=optional,
        )

    if fixed is not None:
        if not isinstance(fixed, dict):
            raise ValueError("'fixed' must be a mapping with 'week' and 'day'")
        if "week" not in fixed or "day" not in fixed:
            raise ValueError("'fixed' needs both 'week' and 'day'")
        return FixedConstraint(
            week=_as_int(fixed["week"], "week"),
            day=_as_int(fixed["day"], "day"),
            optional=optional,
        )

    return NoConstraint(optional=optional)
