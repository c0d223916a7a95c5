"""
Shared helpers for renderers.

Single Responsibility: reusable number probing, formatting and tiering
consumed by several display types.  No renderer-specific logic here.

Field probing is deliberately loose: when no explicit value field is
configured, the first numeric field in key order wins.  That order is
the order the plugin serialized the object in, so results can change if
a plugin reorders its keys.  Prefer configuring ``aggregation.field``.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

# ── Number coercion ──────────────────────────────────────────────

def to_number(value: Any) -> Optional[float]:
    """Finite float for numbers and numeric strings, else ``None``."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def first_numeric_field(record: Dict[str, Any]) -> Optional[Tuple[str, float]]:
    """``(key, value)`` of the first numeric entry, in key order."""
    for key, value in record.items():
        if isinstance(value, bool):
            continue
        number = to_number(value) if isinstance(value, (int, float)) else None
        if number is not None:
            return key, number
    return None


def probe_value(
    data: Any,
    preferred: Sequence[str] = ("value", "count", "total"),
    explicit: Optional[str] = None,
) -> Tuple[float, str]:
    """
    Best-guess ``(value, source)`` for a single-number display.

      number/numeric string → itself
      list                  → its length
      mapping               → explicit key, then *preferred* keys,
                              then the first numeric field
      anything else         → 0
    """
    if isinstance(data, list):
        return float(len(data)), "length"
    if isinstance(data, dict):
        keys: List[str] = [explicit] if explicit else []
        keys.extend(k for k in preferred if k not in keys)
        for key in keys:
            if key in data:
                number = to_number(data[key])
                if number is not None:
                    return number, key
        found = first_numeric_field(data)
        if found is not None:
            key, number = found
            return number, key
        return 0.0, "none"
    number = to_number(data)
    if number is not None:
        return number, "scalar"
    return 0.0, "none"


def numbers_in(items: Iterable[Any]) -> List[float]:
    """Numeric values of a list; objects contribute their ``value`` field."""
    out: List[float] = []
    for item in items:
        candidate = item.get("value") if isinstance(item, dict) else item
        number = to_number(candidate)
        if number is not None:
            out.append(number)
    return out


# ── Derived values ───────────────────────────────────────────────

def percent_change(current: float, previous: float) -> float:
    """Relative change in percent; a zero baseline reports no change."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def js_round(value: float, digits: int = 0) -> float:
    """Half-up rounding (``Math.round`` semantics) rather than banker's."""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def tier(percentage: float, high: float, medium: float) -> str:
    if percentage >= high:
        return "high"
    if percentage >= medium:
        return "medium"
    return "low"


def compact_number(value: float) -> str:
    """``1500`` → ``1.5K``, ``2300000`` → ``2.3M``."""
    if value == 0:
        return "0"
    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{value / 1_000:.1f}K"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def clean_number(value: float) -> float:
    """Integral floats become ints for JSON output."""
    return int(value) if float(value).is_integer() else value


# ── Widget metadata ──────────────────────────────────────────────

_CATEGORY_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    ("Security", ("security", "incident", "critical", "high priority")),
    ("Issues", ("issues", "open", "unresolved", "problems")),
    ("Activity", ("performance", "activity", "recent", "updated")),
    ("Analytics", ("report", "analytics", "distribution", "trend")),
    ("Timeline", ("time", "duration", "month", "daily")),
    ("Clients", ("client", "user", "assignee")),
]

_BUSINESS_NAMES: List[Tuple[str, str]] = [
    (r"jira", ""),
    (r"security incidents", "Security Alerts"),
    (r"issues", "Items"),
    (r"\bopen\b", "Active"),
    (r"created", "New"),
    (r"updated", "Modified"),
    (r"unassigned", "Pending Assignment"),
]


def widget_category(name: str) -> str:
    """Coarse category from keywords in the widget name."""
    lowered = (name or "").lower()
    for category, keywords in _CATEGORY_RULES:
        if any(k in lowered for k in keywords):
            return category
    return "General"


def business_name(name: str) -> str:
    """Business-friendly title for a technical widget name."""
    result = name or ""
    for pattern, replacement in _BUSINESS_NAMES:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    result = re.sub(r"\s{2,}", " ", result).strip()
    return result or name
