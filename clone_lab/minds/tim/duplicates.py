"""Duplicate detection by token-set Jaccard similarity.

Groups are formed by a single left-to-right sweep: each source not yet
claimed by a group collects every later unclaimed source whose similarity
to it clears the threshold. The group similarity is the running mean of
those pairwise similarities.
"""

import logging
from typing import Sequence

from clone_lab.minds.scoring import clamp, round_half_up
from clone_lab.minds.schemas import ExtractedData
from clone_lab.minds.tim.schemas import DuplicateGroup, DuplicateType, SourceQuality

logger = logging.getLogger(__name__)

EXACT_THRESHOLD = 0.98
NEAR_THRESHOLD = 0.90


def tokenize(content: str) -> frozenset[str]:
    return frozenset(content.lower().split())


def jaccard_similarity(a: frozenset[str], b: frozenset[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def classify_similarity(similarity: float) -> DuplicateType:
    if similarity > EXACT_THRESHOLD:
        return DuplicateType.EXACT
    if similarity > NEAR_THRESHOLD:
        return DuplicateType.NEAR
    return DuplicateType.SEMANTIC


def find_duplicate_groups(
    sources: Sequence[ExtractedData],
    quality: Sequence[SourceQuality],
    threshold: float,
) -> list[DuplicateGroup]:
    """Group near-identical sources.

    The primary source of a group is the member with the highest quality
    score; equal scores resolve to the member that appears first in input
    order.
    """
    scores = {q.source_id: q.score for q in quality}
    tokens = [tokenize(s.content) for s in sources]
    claimed: set[int] = set()
    groups: list[DuplicateGroup] = []

    for i, anchor in enumerate(sources):
        if i in claimed:
            continue

        members = [i]
        similarity = 0.0
        for j in range(i + 1, len(sources)):
            if j in claimed:
                continue
            pair = jaccard_similarity(tokens[i], tokens[j])
            if pair >= threshold:
                members.append(j)
                # running mean over accepted pairs
                similarity += (pair - similarity) / (len(members) - 1)

        if len(members) < 2:
            continue

        claimed.update(members)
        primary = members[0]
        for idx in members[1:]:
            if scores.get(sources[idx].id, 0) > scores.get(sources[primary].id, 0):
                primary = idx

        similarity = clamp(round_half_up(similarity, 4), 0.0, 1.0)
        groups.append(DuplicateGroup(
            group_id=f"dup-{len(groups) + 1}",
            source_ids=[sources[idx].id for idx in members],
            primary_source_id=sources[primary].id,
            similarity=similarity,
            type=classify_similarity(similarity),
        ))

    if groups:
        logger.info(
            f"Found {len(groups)} duplicate groups covering "
            f"{sum(len(g.source_ids) for g in groups)} sources"
        )
    return groups


def redundant_source_ids(groups: Sequence[DuplicateGroup]) -> set[str]:
    """Ids of every non-primary group member."""
    return {
        source_id
        for group in groups
        for source_id in group.source_ids
        if source_id != group.primary_source_id
    }
