"""Clone Lab Minds - dependency-ordered personality analysis pipeline.

The pipeline runs a closed set of analyzer units ("Minds") over extracted
source material:
- Minds (quality/coverage, feasibility, quality assurance)
- Orchestrator (dependency waves, shared context, validation pass)
- LLM content generator (optional, injected)
"""

__version__ = "0.1.0"
