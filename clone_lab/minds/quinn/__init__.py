"""Quinn: cross-Mind quality assurance."""

from clone_lab.minds.quinn.mind import QuinnMind
from clone_lab.minds.quinn.schemas import QualityReport, QuinnOptions

__all__ = ["QuinnMind", "QualityReport", "QuinnOptions"]
