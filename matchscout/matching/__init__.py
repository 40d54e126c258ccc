"""
Matching Module - Normalization, records and the rule-based scoring engine.

Public API:
- score_job: score one job against one candidate profile
- total_from_breakdown: recombine sub-scores with the shared cap
- JobRecord / CandidateProfile: inputs resolved from raw rows
- MatchResult / MatchBreakdown / CachedEntry / JobMatch: outputs
"""

from matchscout.matching.engine import score_job, total_from_breakdown
from matchscout.matching.models import (
    CachedEntry,
    CandidateProfile,
    JobMatch,
    JobRecord,
    MatchBreakdown,
    MatchResult,
    SalaryRange,
    StructuredLocation,
)
from matchscout.matching.normalize import (
    normalize_array_strings,
    normalize_string,
    to_numeric,
)

__all__ = [
    'score_job',
    'total_from_breakdown',
    'CachedEntry',
    'CandidateProfile',
    'JobMatch',
    'JobRecord',
    'MatchBreakdown',
    'MatchResult',
    'SalaryRange',
    'StructuredLocation',
    'normalize_array_strings',
    'normalize_string',
    'to_numeric',
]
