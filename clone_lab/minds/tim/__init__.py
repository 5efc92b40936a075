"""Tim: source quality, duplicate detection and coverage."""

from clone_lab.minds.tim.mind import TimMind, prioritize_sources, sources_to_remove
from clone_lab.minds.tim.schemas import TimAnalysis, TimOptions

__all__ = ["TimMind", "TimAnalysis", "TimOptions", "prioritize_sources", "sources_to_remove"]
