"""Topic, temporal and format coverage of the source set.

Overall coverage = weighted mean of
    topic score      0.4
    temporal spread  0.2
    format diversity 0.2
    gap penalty      0.2
"""

from collections import Counter
from typing import Sequence

from clone_lab.minds.scoring import mean, round_score, weighted_average
from clone_lab.minds.schemas import ExtractedData, as_utc
from clone_lab.minds.tim.heuristics import TimHeuristics
from clone_lab.minds.tim.schemas import (
    CoverageGap,
    CoverageResult,
    FormatDiversity,
    GapSeverity,
    SourceQuality,
    TemporalDistribution,
    TemporalPeriod,
    TopicCoverage,
)

COVERAGE_WEIGHTS = {
    "topic": 0.4,
    "temporal": 0.2,
    "format": 0.2,
    "gaps": 0.2,
}

MIN_SOURCES_PER_TOPIC = 2
GAP_PENALTY = 15
TOPIC_BREADTH_POINTS = 10

# (min span in days exclusive, score)
SPREAD_BUCKETS = [(365, 100), (180, 80), (90, 60), (30, 50)]
SPREAD_MINIMUM = 30

# (min distinct source types inclusive, score)
FORMAT_BUCKETS = [(5, 100), (4, 80), (3, 60), (2, 40)]
FORMAT_MINIMUM = 20
VARIETY_TYPES = 3


def analyze_topics(
    sources: Sequence[ExtractedData],
    quality: Sequence[SourceQuality],
    heuristics: TimHeuristics,
) -> list[TopicCoverage]:
    """Topics with at least one contributing source, in table order."""
    scores = {q.source_id: q.score for q in quality}
    contributors: dict[str, list[str]] = {topic: [] for topic in heuristics.topic_patterns}
    for source in sources:
        for topic in heuristics.topics_in(source.content):
            contributors[topic].append(source.id)

    return [
        TopicCoverage(
            topic=topic,
            source_count=len(ids),
            source_ids=ids,
            quality=round_score(mean(scores.get(i, 0) for i in ids)),
        )
        for topic, ids in contributors.items()
        if ids
    ]


def identify_gaps(topics: Sequence[TopicCoverage], heuristics: TimHeuristics) -> list[CoverageGap]:
    present = {t.topic for t in topics}
    gaps = [
        CoverageGap(
            topic=topic,
            severity=GapSeverity.CRITICAL,
            recommendation=f"Add sources that discuss {topic} to improve personality accuracy",
        )
        for topic in heuristics.essential_topics
        if topic not in present
    ]
    gaps.extend(
        CoverageGap(
            topic=t.topic,
            severity=GapSeverity.MODERATE,
            recommendation=f"Add more sources about {t.topic} for better coverage",
        )
        for t in topics
        if t.source_count < MIN_SOURCES_PER_TOPIC
    )
    return gaps


def topic_score(topics: Sequence[TopicCoverage]) -> int:
    if not topics:
        return 0
    avg_quality = mean(t.quality for t in topics)
    breadth = min(100, len(topics) * TOPIC_BREADTH_POINTS)
    return round_score((avg_quality + breadth) / 2)


def analyze_temporal(sources: Sequence[ExtractedData]) -> TemporalDistribution:
    stamps = sorted(as_utc(s.timestamp) for s in sources if s.timestamp is not None)
    if not stamps:
        return TemporalDistribution(spread_score=SPREAD_MINIMUM)

    earliest, latest = stamps[0], stamps[-1]
    span_days = (latest - earliest).total_seconds() / 86400
    buckets = Counter(ts.strftime("%Y-%m") for ts in stamps)

    spread = SPREAD_MINIMUM
    for min_days, score in SPREAD_BUCKETS:
        if span_days > min_days:
            spread = score
            break

    return TemporalDistribution(
        earliest=earliest,
        latest=latest,
        span_days=round(span_days, 2),
        periods=[TemporalPeriod(period=p, count=c) for p, c in sorted(buckets.items())],
        spread_score=spread,
    )


def analyze_formats(sources: Sequence[ExtractedData]) -> FormatDiversity:
    by_type = Counter(s.source_type.value for s in sources)
    distinct = len(by_type)
    score = FORMAT_MINIMUM
    for min_types, bucket_score in FORMAT_BUCKETS:
        if distinct >= min_types:
            score = bucket_score
            break
    return FormatDiversity(
        score=score,
        by_type=dict(by_type),
        distinct_types=distinct,
        has_variety=distinct >= VARIETY_TYPES,
    )


def analyze_coverage(
    sources: Sequence[ExtractedData],
    quality: Sequence[SourceQuality],
    heuristics: TimHeuristics,
) -> CoverageResult:
    topics = analyze_topics(sources, quality, heuristics)
    gaps = identify_gaps(topics, heuristics)
    temporal = analyze_temporal(sources)
    formats = analyze_formats(sources)

    t_score = topic_score(topics)
    gap_score = 100 if not gaps else max(0, 100 - GAP_PENALTY * len(gaps))
    overall = weighted_average(
        {
            "topic": t_score,
            "temporal": temporal.spread_score,
            "format": formats.score,
            "gaps": gap_score,
        },
        COVERAGE_WEIGHTS,
    )
    return CoverageResult(
        score=round_score(overall),
        topic_score=t_score,
        gap_penalty_score=gap_score,
        topics=topics,
        gaps=gaps,
        temporal=temporal,
        formats=formats,
    )
