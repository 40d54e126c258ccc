#!/usr/bin/env python3
"""
Scoring Engine - Rule-based job/candidate compatibility score (0-100).

Dimensions:
- Roles: tiered, first match wins (exact > related > AI-suggested)
- Skills: per-match points for required skills, AI-suggested skills fill the
  remaining headroom under the skills cap
- Sector, location, experience, salary, employment type: flat points

Roles + skills + sector share a combined cap before the flat dimensions are
added. Missing or malformed data scores zero for that dimension; nothing here
raises.
"""

import logging
from typing import Optional, Set, Tuple

from matchscout.config_loader import ScoringWeights
from matchscout.matching.models import (
    CandidateProfile,
    JobRecord,
    MatchBreakdown,
    MatchResult,
    StructuredLocation,
    utc_now,
)
from matchscout.matching.normalize import (
    normalize_array_strings,
    normalize_string,
    to_numeric,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = ScoringWeights()

REMOTE_TOKEN = "remote"
ANY_EMPLOYMENT_TYPE = "any"


def job_role_tokens(role: Optional[str]) -> Set[str]:
    """A job can declare several role labels in one comma-separated field."""
    normalized = normalize_string(role)
    if not normalized:
        return set()
    return {token.strip() for token in normalized.split(",") if token.strip()}


def job_location_tokens(location) -> Set[str]:
    if isinstance(location, str):
        token = normalize_string(location)
        return {token} if token else set()
    tokens: Set[str] = set()
    if isinstance(location, StructuredLocation):
        for part in (location.city, location.state, location.country):
            token = normalize_string(part)
            if token:
                tokens.add(token)
        if location.remote:
            tokens.add(REMOTE_TOKEN)
    return tokens


def score_roles(
    target_roles: Set[str],
    job: JobRecord,
    weights: ScoringWeights
) -> Tuple[int, str]:
    if target_roles & job_role_tokens(job.role):
        return weights.role_exact, "role exact"
    if target_roles & normalize_array_strings(job.related_roles):
        return weights.role_related, "role related"
    if target_roles & normalize_array_strings(job.ai_roles):
        return weights.role_ai, "role ai"
    return 0, "no role match"


def score_skills(
    candidate_skills: Set[str],
    job: JobRecord,
    weights: ScoringWeights
) -> Tuple[int, str]:
    """
    Required skills first; AI-suggested skills only fill remaining headroom.

    The reason reports raw match counts per tier. AI matches are only counted
    when the required tier left headroom under the cap.
    """
    required_matches = len(candidate_skills & normalize_array_strings(job.required_skills))
    score = required_matches * weights.skill_required

    ai_matches = 0
    if score < weights.skills_cap:
        ai_matches = len(candidate_skills & normalize_array_strings(job.ai_skills))
        if weights.skill_ai > 0:
            headroom = weights.skills_cap - score
            admitted = min(ai_matches, headroom // weights.skill_ai)
            score += admitted * weights.skill_ai

    score = min(weights.skills_cap, score)

    parts = []
    if required_matches:
        parts.append(f"{required_matches} required")
    if ai_matches:
        parts.append(f"{ai_matches} ai")
    reason = f"{' + '.join(parts)} skills matched" if parts else "no skills match"
    return score, reason


def score_sector(candidate_sector: str, job_sector: str, weights: ScoringWeights) -> Tuple[int, str]:
    if candidate_sector and job_sector and candidate_sector == job_sector:
        return weights.sector, "sector exact match"
    return 0, "no sector match"


def score_salary(job: JobRecord, candidate: CandidateProfile, weights: ScoringWeights) -> int:
    """Both sides must be present; the job's ceiling has to reach the candidate's floor."""
    job_max = to_numeric(getattr(job.salary_range, "max", None))
    candidate_min = to_numeric(candidate.salary_min)
    if job_max is None or candidate_min is None:
        return 0
    return weights.salary if job_max >= candidate_min else 0


def score_employment_type(job_type: str, candidate_type: str, weights: ScoringWeights) -> int:
    if job_type == ANY_EMPLOYMENT_TYPE:
        return weights.employment_type
    if job_type and candidate_type and job_type == candidate_type:
        return weights.employment_type
    return 0


def total_from_breakdown(breakdown: MatchBreakdown, weights: Optional[ScoringWeights] = None) -> int:
    """Combine sub-scores: capped roles+skills+sector plus the flat dimensions, clamped to 0-100."""
    w = weights or DEFAULT_WEIGHTS
    core = min(w.core_cap, breakdown.roles_score + breakdown.skills_score + breakdown.sector_score)
    total = (
        core
        + breakdown.location_score
        + breakdown.experience_score
        + breakdown.salary_score
        + breakdown.type_score
    )
    return max(0, min(100, int(total)))


def score_job(
    job: JobRecord,
    candidate: CandidateProfile,
    weights: Optional[ScoringWeights] = None
) -> MatchResult:
    """Score one job against one candidate profile."""
    w = weights or DEFAULT_WEIGHTS

    target_roles = normalize_array_strings(candidate.target_roles)
    candidate_skills = normalize_array_strings(candidate.skills)
    preferred_locations = normalize_array_strings(candidate.preferred_locations)

    roles_score, roles_reason = score_roles(target_roles, job, w)
    skills_score, skills_reason = score_skills(candidate_skills, job, w)
    sector_score, sector_reason = score_sector(
        normalize_string(candidate.sector), normalize_string(job.sector), w
    )

    location_score = w.location if job_location_tokens(job.location) & preferred_locations else 0

    job_experience = normalize_string(job.experience_level)
    experience_score = (
        w.experience
        if job_experience and job_experience == normalize_string(candidate.experience_level)
        else 0
    )

    breakdown = MatchBreakdown(
        roles_score=roles_score,
        roles_reason=roles_reason,
        skills_score=skills_score,
        skills_reason=skills_reason,
        sector_score=sector_score,
        sector_reason=sector_reason,
        location_score=location_score,
        experience_score=experience_score,
        salary_score=score_salary(job, candidate, w),
        type_score=score_employment_type(
            normalize_string(job.employment_type),
            normalize_string(candidate.employment_type),
            w
        ),
    )

    score = total_from_breakdown(breakdown, w)
    logger.debug(f"Scored job: {score} ({roles_reason}; {skills_reason}; {sector_reason})")
    return MatchResult(score=score, breakdown=breakdown, computed_at=utc_now())
