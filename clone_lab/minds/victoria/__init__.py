"""Victoria: feasibility, trade-offs, constraints and risks."""

from clone_lab.minds.victoria.mind import VictoriaMind, select_sources
from clone_lab.minds.victoria.schemas import VictoriaAnalysis, VictoriaOptions

__all__ = ["VictoriaMind", "VictoriaAnalysis", "VictoriaOptions", "select_sources"]
