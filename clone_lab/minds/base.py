"""Abstract Mind: the contract every analyzer stage implements.

Lifecycle:
    mind = TimMind()
    mind.initialize({"min_quality_score": 40})
    if mind.can_handle(context):
        result = mind.analyze(context)
        validation = mind.validate(result)
    mind.dispose()

Subclasses set the class attributes (persona, dependencies, options_model,
expected_categories, validity_threshold) and implement _analyze(). The
base class owns precondition checks, timing, statistics and health state.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, ClassVar, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from clone_lab.errors import GeneratorError, MindPreconditionError, PipelineConfigurationError
from clone_lab.llm.backends import ContentGenerator
from clone_lab.llm.client import parse_llm_json_response
from clone_lab.minds.schemas import (
    MindContext,
    MindHealthStatus,
    MindId,
    MindPersona,
    MindResult,
    MindStatistics,
    ValidationResult,
    utc_now,
)
from clone_lab.minds.validation import (
    DEFAULT_VALIDITY_THRESHOLD,
    Deduction,
    common_deductions,
    score_deductions,
)

logger = logging.getLogger(__name__)


class MindOptions(BaseModel):
    """Base for per-Mind option models. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


class Mind(ABC):
    """Base class for all analyzer stages."""

    persona: ClassVar[MindPersona]
    dependencies: ClassVar[tuple[MindId, ...]] = ()
    options_model: ClassVar[type[MindOptions]] = MindOptions
    expected_categories: ClassVar[tuple[str, ...]] = ()
    validity_threshold: ClassVar[int] = DEFAULT_VALIDITY_THRESHOLD

    def __init__(self, generator: Optional[ContentGenerator] = None):
        self._generator = generator
        self._options = self.options_model()
        self._ready = False
        self._last_success: Optional[datetime] = None
        self._last_error: Optional[str] = None

    @property
    def mind_id(self) -> MindId:
        return self.persona.id

    @property
    def options(self) -> MindOptions:
        return self._options

    def get_dependencies(self) -> list[MindId]:
        return list(self.dependencies)

    def unmet_dependencies(self, context: MindContext) -> list[MindId]:
        return [dep for dep in self.dependencies if dep not in context.previous_results]

    def can_handle(self, context: MindContext) -> bool:
        if not context.extracted_data:
            return False
        return not self.unmet_dependencies(context)

    def initialize(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """Merge option overrides onto the defaults and mark the Mind ready.

        Raises:
            pydantic.ValidationError: If an override is unknown or mistyped
            PipelineConfigurationError: If the options need a generator this
                Mind was built without
        """
        if options:
            merged = self._options.model_dump()
            merged.update(options)
            validated = self.options_model.model_validate(merged)
            self.check_options(validated)
            self._options = validated
        self._ready = True
        self._last_error = None
        logger.info(f"[{self.mind_id.value}] Initialized with options {self._options.model_dump()}")

    def check_options(self, options: MindOptions) -> None:
        """Raises PipelineConfigurationError if options enable generation without a generator."""
        if getattr(options, "use_generator", False) and self._generator is None:
            raise PipelineConfigurationError(
                f"Mind '{self.mind_id.value}' enables use_generator but no content generator is configured"
            )

    def analyze(self, context: MindContext) -> MindResult:
        """Run the analysis.

        Raises:
            MindPreconditionError: If can_handle(context) is false
        """
        if not self.can_handle(context):
            unmet = [d.value for d in self.unmet_dependencies(context)]
            self._last_error = "precondition failed"
            raise MindPreconditionError(self.mind_id.value, unmet)

        options = self._effective_options(context)
        start_time = time.time()
        try:
            result = self._analyze(context, options)
        except Exception as e:
            self._last_error = str(e)
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        stats = MindStatistics.model_validate(result.metadata.get("statistics", {}))
        stats.duration_ms = duration_ms
        metadata = dict(result.metadata)
        metadata["statistics"] = stats.model_dump()
        result = result.model_copy(update={"metadata": metadata})

        self._last_success = utc_now()
        self._last_error = None
        logger.info(
            f"[{self.mind_id.value}] Analysis complete in {duration_ms}ms: "
            f"{len(result.traits)} traits, confidence={result.confidence:.2f}"
        )
        return result

    @abstractmethod
    def _analyze(self, context: MindContext, options: MindOptions) -> MindResult:
        ...

    def validate(self, result: MindResult) -> ValidationResult:
        deductions = common_deductions(result, self.expected_categories)
        deductions.extend(self._extra_deductions(result))
        return score_deductions(deductions, self.validity_threshold)

    def _extra_deductions(self, result: MindResult) -> list[Deduction]:
        """Mind-specific validation checks. None by default."""
        return []

    def health_check(self) -> MindHealthStatus:
        return MindHealthStatus(
            mind_id=self.mind_id,
            healthy=self._ready,
            last_success=self._last_success,
            error=None if self._ready else (self._last_error or "not initialized"),
        )

    def dispose(self) -> None:
        if self._ready:
            logger.info(f"[{self.mind_id.value}] Disposed")
        self._ready = False

    # -- helpers for subclasses --

    def _effective_options(self, context: MindContext) -> MindOptions:
        """Options for one call: initialized options plus per-run overrides."""
        overrides = context.options.get(self.mind_id.value)
        if not overrides:
            return self._options
        merged = self._options.model_dump()
        merged.update(overrides)
        return self.options_model.model_validate(merged)

    def _build_result(
        self,
        *,
        traits,
        confidence: float,
        evidence,
        recommendations,
        statistics: MindStatistics,
        extra_metadata: Optional[dict[str, Any]] = None,
    ) -> MindResult:
        metadata: dict[str, Any] = {
            "timestamp": utc_now().isoformat(),
            "mind_version": self.persona.version,
            "statistics": statistics.model_dump(),
        }
        if extra_metadata:
            metadata.update(extra_metadata)
        return MindResult(
            mind_id=self.mind_id,
            traits=list(traits),
            confidence=confidence,
            evidence=list(evidence),
            recommendations=list(recommendations),
            metadata=metadata,
        )

    def _generate_json(
        self,
        context: MindContext,
        system_prompt: str,
        user_message: str,
        max_tokens: int,
    ) -> dict:
        """Call the injected generator and parse a JSON object from its answer.

        Raises:
            InterruptedError: If the run was cancelled before the call
            GeneratorError: If no generator is injected or the output is unusable
        """
        if self._generator is None:
            raise GeneratorError(f"[{self.mind_id.value}] No content generator configured")
        label = f"{self.mind_id.value}:{context.session_id or 'adhoc'}"
        if context.is_cancelled():
            raise InterruptedError(f"[{label}] Cancelled before generator call")

        response = self._generator.generate(
            system_prompt, user_message, max_tokens=max_tokens, label=label,
        )
        try:
            parsed = parse_llm_json_response(response.content)
        except json.JSONDecodeError as e:
            raise GeneratorError(f"[{label}] Generator returned invalid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise GeneratorError(f"[{label}] Generator returned {type(parsed).__name__}, expected object")
        return parsed
