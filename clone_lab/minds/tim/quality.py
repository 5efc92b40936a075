"""Per-source quality scoring.

Score = weighted average of four sub-scores in [0, 100], rounded half up.
"""

from datetime import datetime
from typing import Optional

from clone_lab.minds.scoring import clamp, round_score, weighted_average
from clone_lab.minds.schemas import ExtractedData, SourceType, as_utc
from clone_lab.minds.tim.heuristics import TimHeuristics
from clone_lab.minds.tim.schemas import (
    CredibilityFactor,
    DepthFactor,
    RecencyFactor,
    RelevanceFactor,
    SourceQuality,
)

QUALITY_WEIGHTS = {
    "credibility": 0.30,
    "recency": 0.20,
    "depth": 0.25,
    "relevance": 0.25,
}

CREDIBILITY_BASE = 50
CREDIBILITY_TYPE_BONUS = {
    SourceType.DOCUMENT: 15,
    SourceType.CHAT: 5,
    SourceType.VIDEO: 10,
    SourceType.AUDIO: 10,
}
LONG_CONTENT_WORDS = 500
LONG_CONTENT_BONUS = 10
METADATA_BONUS = 5

# (max age in days exclusive, score)
RECENCY_BUCKETS = [(30, 100), (90, 85), (180, 70), (365, 50), (730, 30)]
RECENCY_OLDEST = 15
RECENCY_UNKNOWN = 50

# (min word count inclusive, score)
DEPTH_BUCKETS = [(1000, 100), (500, 80), (200, 60), (100, 40), (50, 20)]
DEPTH_MINIMUM = 10
SUBSTANTIVE_WORDS = 200

RELEVANCE_BASE = 50


def count_words(content: str) -> int:
    return len(content.split())


def score_credibility(source: ExtractedData) -> CredibilityFactor:
    score = CREDIBILITY_BASE
    factors = [f"base {CREDIBILITY_BASE}"]

    bonus = CREDIBILITY_TYPE_BONUS.get(source.source_type, 0)
    if bonus:
        score += bonus
        factors.append(f"{source.source_type.value} source +{bonus}")

    if count_words(source.content) > LONG_CONTENT_WORDS:
        score += LONG_CONTENT_BONUS
        factors.append(f"over {LONG_CONTENT_WORDS} words +{LONG_CONTENT_BONUS}")

    if source.metadata:
        score += METADATA_BONUS
        factors.append(f"has metadata +{METADATA_BONUS}")

    return CredibilityFactor(score=int(clamp(score, 0, 100)), factors=factors)


def score_recency(timestamp: Optional[datetime], reference_time: datetime) -> RecencyFactor:
    if timestamp is None:
        return RecencyFactor(score=RECENCY_UNKNOWN, age_days=None)

    age_days = (as_utc(reference_time) - as_utc(timestamp)).days
    for max_age, score in RECENCY_BUCKETS:
        if age_days < max_age:
            return RecencyFactor(score=score, age_days=age_days)
    return RecencyFactor(score=RECENCY_OLDEST, age_days=age_days)


def score_depth(word_count: int) -> DepthFactor:
    score = DEPTH_MINIMUM
    for min_words, bucket_score in DEPTH_BUCKETS:
        if word_count >= min_words:
            score = bucket_score
            break
    return DepthFactor(
        score=score,
        word_count=word_count,
        is_substantive=word_count >= SUBSTANTIVE_WORDS,
    )


def score_relevance(content: str, heuristics: TimHeuristics) -> RelevanceFactor:
    matched = heuristics.indicators_in(content)
    score = RELEVANCE_BASE + sum(ind.points for ind in matched)
    return RelevanceFactor(
        score=int(clamp(score, 0, 100)),
        indicators=[ind.category for ind in matched],
    )


def assess_source(
    source: ExtractedData,
    reference_time: datetime,
    heuristics: TimHeuristics,
) -> SourceQuality:
    credibility = score_credibility(source)
    recency = score_recency(source.timestamp, reference_time)
    depth = score_depth(count_words(source.content))
    relevance = score_relevance(source.content, heuristics)

    combined = weighted_average(
        {
            "credibility": credibility.score,
            "recency": recency.score,
            "depth": depth.score,
            "relevance": relevance.score,
        },
        QUALITY_WEIGHTS,
    )
    return SourceQuality(
        source_id=source.id,
        score=round_score(combined),
        credibility=credibility,
        recency=recency,
        depth=depth,
        relevance=relevance,
    )
