"""Mind implementations and their shared contract.

- schemas: data model shared by every Mind and the orchestrator
- base: the abstract Mind (template for analyze / validate / lifecycle)
- validation: shared scoring rubric for MindResult validation
- tim, victoria, quinn: concrete Minds
- registry: static MindId -> implementation mapping
"""

from clone_lab.minds.base import Mind
from clone_lab.minds.schemas import (
    Evidence,
    ExtractedData,
    MindContext,
    MindHealthStatus,
    MindId,
    MindPersona,
    MindResult,
    PersonalityTrait,
    SourceType,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "Mind",
    "Evidence",
    "ExtractedData",
    "MindContext",
    "MindHealthStatus",
    "MindId",
    "MindPersona",
    "MindResult",
    "PersonalityTrait",
    "SourceType",
    "ValidationIssue",
    "ValidationResult",
]
