#!/usr/bin/env python3
"""
Matching Models - Records consumed and produced by the scoring engine.

Rows from the backing store are loosely shaped (a location may be a string
or an object, list columns may be CSV strings). They are resolved into these
dataclasses once, in the ``from_row`` classmethods, so the engine only ever
sees explicit optional fields.
"""

import math
import numbers
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from matchscout.exceptions import CacheEntryError

Numeric = Union[int, float, Decimal, str]

_TRUTHY = {"true", "yes", "1"}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted). Naive values are UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Not a timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _string_list(value: Any) -> Tuple[str, ...]:
    """Accept a list of strings or a comma-separated string."""
    if isinstance(value, str):
        return tuple(value.split(","))
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(item for item in (_text(v) for v in value) if item is not None)
    return ()


def _numeric(value: Any) -> Optional[Numeric]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (numbers.Real, Decimal, str)):
        return value
    return None


def _stored_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise CacheEntryError(f"Stored '{name}' is not a finite number")
    if isinstance(value, int):
        return value
    if not isinstance(value, float) or not math.isfinite(value):
        raise CacheEntryError(f"Stored '{name}' is not a finite number")
    return int(value)


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, numbers.Real):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    return False


@dataclass(frozen=True)
class StructuredLocation:
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    remote: bool = False

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "StructuredLocation":
        return cls(
            city=_text(raw.get("city")),
            state=_text(raw.get("state")),
            country=_text(raw.get("country")),
            remote=_flag(raw.get("remote")),
        )


# Free text, structured, or unknown.
Location = Union[str, StructuredLocation, None]


def resolve_location(raw: Any) -> Location:
    if isinstance(raw, StructuredLocation):
        return raw
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Mapping):
        return StructuredLocation.from_dict(raw)
    return None


@dataclass(frozen=True)
class SalaryRange:
    """Raw salary bounds; parsed with ``to_numeric`` at scoring time."""
    min: Optional[Numeric] = None
    max: Optional[Numeric] = None
    currency: Optional[str] = None
    period: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SalaryRange":
        return cls(
            min=_numeric(raw.get("min")),
            max=_numeric(raw.get("max")),
            currency=_text(raw.get("currency")),
            period=_text(raw.get("period")),
        )


@dataclass(frozen=True)
class JobRecord:
    """A job posting as seen by the scoring engine."""
    role: Optional[str] = None
    related_roles: Tuple[str, ...] = ()
    ai_roles: Tuple[str, ...] = ()
    required_skills: Tuple[str, ...] = ()
    ai_skills: Tuple[str, ...] = ()
    location: Location = None
    experience_level: Optional[str] = None
    employment_type: Optional[str] = None
    sector: Optional[str] = None
    salary_range: Optional[SalaryRange] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "JobRecord":
        """
        Build from a ``jobs`` row. Malformed columns resolve to empty values.

        ``role`` falls back to ``title`` when empty.
        """
        salary = row.get("salary_range")
        return cls(
            role=_text(row.get("role")) or _text(row.get("title")),
            related_roles=_string_list(row.get("related_roles")),
            ai_roles=_string_list(row.get("ai_enhanced_roles")),
            required_skills=_string_list(row.get("skills_required")),
            ai_skills=_string_list(row.get("ai_enhanced_skills")),
            location=resolve_location(row.get("location")),
            experience_level=_text(row.get("experience_level")),
            employment_type=_text(row.get("employment_type")),
            sector=_text(row.get("sector")),
            salary_range=SalaryRange.from_dict(salary) if isinstance(salary, Mapping) else None,
        )


@dataclass(frozen=True)
class CandidateProfile:
    """A candidate's onboarding preferences."""
    target_roles: Tuple[str, ...] = ()
    skills: Tuple[str, ...] = ()
    preferred_locations: Tuple[str, ...] = ()
    experience_level: Optional[str] = None
    salary_min: Optional[Numeric] = None
    salary_max: Optional[Numeric] = None
    employment_type: Optional[str] = None
    sector: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CandidateProfile":
        """Build from an onboarding row (``cv_skills``, ``job_type`` column names)."""
        sector = _text(row.get("sector"))
        if sector is not None and sector.strip().lower() == "null":
            sector = None
        skills = row.get("cv_skills")
        if skills is None:
            skills = row.get("skills")
        return cls(
            target_roles=_string_list(row.get("target_roles")),
            skills=_string_list(skills),
            preferred_locations=_string_list(row.get("preferred_locations")),
            experience_level=_text(row.get("experience_level")),
            salary_min=_numeric(row.get("salary_min")),
            salary_max=_numeric(row.get("salary_max")),
            employment_type=_text(row.get("job_type")),
            sector=sector,
        )


# Persisted key names. Stored entries outlive any one release, so these stay fixed.
_BREAKDOWN_KEYS = {
    "roles_score": "rolesScore",
    "roles_reason": "rolesReason",
    "skills_score": "skillsScore",
    "skills_reason": "skillsReason",
    "sector_score": "sectorScore",
    "sector_reason": "sectorReason",
    "location_score": "locationScore",
    "experience_score": "experienceScore",
    "salary_score": "salaryScore",
    "type_score": "typeScore",
}


@dataclass(frozen=True)
class MatchBreakdown:
    """Per-dimension sub-scores behind a match score."""
    roles_score: int = 0
    roles_reason: str = "no role match"
    skills_score: int = 0
    skills_reason: str = "no skills match"
    sector_score: int = 0
    sector_reason: str = "no sector match"
    location_score: int = 0
    experience_score: int = 0
    salary_score: int = 0
    type_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {stored: getattr(self, attr) for attr, stored in _BREAKDOWN_KEYS.items()}

    @classmethod
    def from_dict(cls, raw: Any) -> "MatchBreakdown":
        if not isinstance(raw, Mapping):
            raise CacheEntryError(f"Breakdown is not an object: {type(raw).__name__}")
        values: Dict[str, Any] = {}
        for attr, stored in _BREAKDOWN_KEYS.items():
            if stored not in raw:
                raise CacheEntryError(f"Breakdown missing '{stored}'")
            value = raw[stored]
            if attr.endswith("_score"):
                value = _stored_int(value, stored)
            else:
                value = str(value)
            values[attr] = value
        return cls(**values)


@dataclass(frozen=True)
class MatchResult:
    """Output of ``score_job``. ``computed_at`` is informational only."""
    score: int
    breakdown: MatchBreakdown
    computed_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "breakdown": self.breakdown.to_dict(),
            "computedAt": format_timestamp(self.computed_at),
        }


@dataclass(frozen=True)
class CachedEntry:
    """Stored projection of a MatchResult; ``cached_at`` drives expiry."""
    score: int
    breakdown: MatchBreakdown
    cached_at: datetime

    @classmethod
    def from_result(cls, result: MatchResult, cached_at: Optional[datetime] = None) -> "CachedEntry":
        return cls(
            score=result.score,
            breakdown=result.breakdown,
            cached_at=cached_at or result.computed_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "breakdown": self.breakdown.to_dict(),
            "cachedAt": format_timestamp(self.cached_at),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "CachedEntry":
        if not isinstance(raw, Mapping):
            raise CacheEntryError(f"Entry is not an object: {type(raw).__name__}")
        score = _stored_int(raw.get("score"), "score")
        try:
            cached_at = parse_timestamp(raw.get("cachedAt"))
        except ValueError as e:
            raise CacheEntryError(f"Entry cachedAt is invalid: {e}") from e
        return cls(
            score=score,
            breakdown=MatchBreakdown.from_dict(raw.get("breakdown")),
            cached_at=cached_at,
        )


@dataclass(frozen=True)
class JobMatch:
    """One row of a batch scoring pass."""
    job_id: str
    score: int
    breakdown: Optional[MatchBreakdown] = None
    from_cache: bool = False
