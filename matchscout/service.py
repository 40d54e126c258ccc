#!/usr/bin/env python3
"""
Matching Service - scores a user's job feed against the match cache.

Batch merge-then-write: the user's cache is loaded once, hits are reused,
misses are scored and staged into a local copy, and the copy is written back
with a single save at the end (only if something was staged). Persistence
cost per batch stays constant regardless of how many jobs are scored.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from matchscout.cache import MatchCacheService
from matchscout.config_loader import ScoringWeights
from matchscout.matching import (
    CachedEntry,
    CandidateProfile,
    JobMatch,
    JobRecord,
    MatchResult,
    score_job,
)

logger = logging.getLogger(__name__)


class MatchingService:
    """Orchestrates cache lookups and scoring. The cache never scores on its own."""

    def __init__(
        self,
        cache_service: MatchCacheService,
        weights: Optional[ScoringWeights] = None
    ):
        self.cache_service = cache_service
        self.weights = weights

    def score_jobs(
        self,
        user_id: Optional[str],
        candidate: CandidateProfile,
        job_rows: Iterable[Mapping[str, Any]]
    ) -> List[JobMatch]:
        """
        Score every job row for one user, in input order.

        Each row must carry an ``id``. Rows that cannot be resolved into a
        JobRecord score 0 with no breakdown instead of failing the batch.
        """
        user_cache = self.cache_service.for_user(user_id)
        cached = user_cache.load()
        updated = dict(cached)
        scored: Dict[str, MatchResult] = {}
        results: List[JobMatch] = []

        for row in job_rows:
            job_id = row.get("id") if isinstance(row, Mapping) else None
            if job_id is None:
                logger.warning("Skipping job row without an id")
                continue
            job_id = str(job_id)

            entry = cached.get(job_id)
            if entry is not None:
                results.append(JobMatch(
                    job_id=job_id,
                    score=entry.score,
                    breakdown=entry.breakdown,
                    from_cache=True
                ))
                continue

            # Repeated ids within one batch reuse the score computed earlier
            result = scored.get(job_id)
            if result is None:
                try:
                    result = score_job(JobRecord.from_row(row), candidate, self.weights)
                except Exception as e:
                    logger.error(f"Error processing match for job {job_id}: {e}")
                    results.append(JobMatch(job_id=job_id, score=0))
                    continue
                scored[job_id] = result
                if user_cache.user_id:
                    updated[job_id] = CachedEntry.from_result(result, cached_at=self.cache_service.clock())

            results.append(JobMatch(job_id=job_id, score=result.score, breakdown=result.breakdown))

        staged = len(updated) - len(cached)
        if staged:
            logger.info(f"Scored {staged} new jobs for user {user_id}, saving match cache")
            user_cache.save(updated)
        elif user_cache.user_id:
            logger.debug(f"All {len(results)} jobs served from match cache for user {user_id}")

        return results

    def refresh(
        self,
        user_id: Optional[str],
        candidate: CandidateProfile,
        job_rows: Iterable[Mapping[str, Any]]
    ) -> List[JobMatch]:
        """Drop the user's cached scores and rescore everything."""
        self.cache_service.for_user(user_id).clear()
        return self.score_jobs(user_id, candidate, job_rows)

    def score_one(
        self,
        user_id: Optional[str],
        job_id: str,
        job: JobRecord,
        candidate: CandidateProfile
    ) -> MatchResult:
        """Single-job path: reuse a cached score or compute and upsert it."""
        user_cache = self.cache_service.for_user(user_id)
        entry = user_cache.get_cached_match(job_id)
        if entry is not None:
            return MatchResult(score=entry.score, breakdown=entry.breakdown, computed_at=entry.cached_at)

        result = score_job(job, candidate, self.weights)
        user_cache.save_cached_match(job_id, result)
        return result
