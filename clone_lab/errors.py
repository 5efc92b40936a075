"""Exception taxonomy for the Mind pipeline.

Each error subclasses a builtin so callers that only know about
ValueError / RuntimeError / TimeoutError still catch it.

- PipelineConfigurationError: malformed setup or input, raised before any Mind runs
- MindPreconditionError: analyze() called while can_handle() is false, never retried
- GeneratorError / GeneratorTimeoutError: external content generator failed, retryable
- StageTimeoutError: a Mind exceeded its per-Mind timeout
"""

from typing import Optional


class PipelineConfigurationError(ValueError):
    """Unknown dependency, dependency cycle, duplicate registration or bad input."""


class MindPreconditionError(RuntimeError):
    """A Mind was asked to analyze a context it cannot handle."""

    def __init__(self, mind_id: str, unmet_dependencies: Optional[list[str]] = None, reason: str = ""):
        self.mind_id = mind_id
        self.unmet_dependencies = list(unmet_dependencies or [])
        if not reason:
            if self.unmet_dependencies:
                reason = f"unmet dependencies: {', '.join(self.unmet_dependencies)}"
            else:
                reason = "no extracted data to analyze"
        self.reason = reason
        super().__init__(f"Mind '{mind_id}' cannot analyze context: {reason}")


class GeneratorError(RuntimeError):
    """The injected content generator failed or returned unusable output."""


class GeneratorTimeoutError(GeneratorError):
    """The content generator did not answer in time."""


class StageTimeoutError(TimeoutError):
    """A Mind's analyze() exceeded its configured timeout."""

    def __init__(self, mind_id: str, timeout_s: float):
        self.mind_id = mind_id
        self.timeout_s = timeout_s
        super().__init__(f"Mind '{mind_id}' timed out after {timeout_s:g}s")
