"""Mind registry - the static set of implemented Minds keyed by MindId.

Adding a Mind means writing the class and listing it in MIND_REGISTRY;
the orchestrator resolves dependencies against whatever is registered.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from clone_lab.errors import PipelineConfigurationError
from clone_lab.llm.backends import ContentGenerator
from clone_lab.minds.base import Mind
from clone_lab.minds.quinn import QuinnMind
from clone_lab.minds.schemas import MindId
from clone_lab.minds.tim import TimMind
from clone_lab.minds.victoria import VictoriaMind

logger = logging.getLogger(__name__)

MIND_REGISTRY: dict[MindId, type[Mind]] = {
    MindId.TIM: TimMind,
    MindId.VICTORIA: VictoriaMind,
    MindId.QUINN: QuinnMind,
}


class MindSummary(BaseModel):
    """Lightweight description of a registered Mind for listings."""

    mind_id: MindId
    name: str
    description: Optional[str] = None
    expertise: list[str] = Field(default_factory=list)
    dependencies: list[MindId] = Field(default_factory=list)
    version: str


class MindRegistry:
    """Registry of Mind classes."""

    def __init__(self, minds: Optional[dict[MindId, type[Mind]]] = None):
        self._minds: dict[MindId, type[Mind]] = {}
        for mind_cls in (minds if minds is not None else MIND_REGISTRY).values():
            self.register(mind_cls)

    def register(self, mind_cls: type[Mind]) -> None:
        """Register a Mind class under its persona id.

        Raises:
            PipelineConfigurationError: If the id is already registered
        """
        mind_id = mind_cls.persona.id
        if mind_id in self._minds:
            raise PipelineConfigurationError(
                f"Mind '{mind_id.value}' registered twice "
                f"({self._minds[mind_id].__name__}, {mind_cls.__name__})"
            )
        self._minds[mind_id] = mind_cls
        logger.debug(f"Registered mind: {mind_id.value}")

    def get(self, mind_id: MindId) -> Optional[type[Mind]]:
        return self._minds.get(mind_id)

    def get_validated(self, mind_id: MindId) -> type[Mind]:
        """Get a Mind class by id, raising if not registered."""
        mind_cls = self.get(mind_id)
        if mind_cls is None:
            raise ValueError(
                f"Mind not registered: {mind_id}. "
                f"Available: {[m.value for m in self._minds]}"
            )
        return mind_cls

    def list_all(self) -> list[MindSummary]:
        return [
            MindSummary(
                mind_id=mind_id,
                name=cls.persona.name,
                description=cls.persona.description,
                expertise=list(cls.persona.expertise),
                dependencies=list(cls.dependencies),
                version=cls.persona.version,
            )
            for mind_id, cls in self._minds.items()
        ]

    def list_ids(self) -> list[MindId]:
        return list(self._minds)

    def count(self) -> int:
        return len(self._minds)

    def create_minds(self, generator: Optional[ContentGenerator] = None) -> list[Mind]:
        """Instantiate every registered Mind, sharing one generator."""
        return [cls(generator=generator) for cls in self._minds.values()]


_registry: Optional[MindRegistry] = None


def get_mind_registry() -> MindRegistry:
    """Get or create the MindRegistry singleton."""
    global _registry
    if _registry is None:
        _registry = MindRegistry()
    return _registry


def create_minds(generator: Optional[ContentGenerator] = None) -> list[Mind]:
    return get_mind_registry().create_minds(generator)
