"""Tests for execution planning and the Mind registry."""

import pytest

from clone_lab.errors import PipelineConfigurationError
from clone_lab.minds.registry import MIND_REGISTRY, MindRegistry, get_mind_registry
from clone_lab.minds.schemas import MindId
from clone_lab.minds.tim import TimMind
from clone_lab.orchestrator.planner import ExecutionPlanner, build_execution_plan

from tests.conftest import SpyMind

TIM, VICTORIA, QUINN, DANIEL = MindId.TIM, MindId.VICTORIA, MindId.QUINN, MindId.DANIEL


class TestBuildExecutionPlan:
    def test_chain_gives_one_mind_per_wave(self):
        plan = build_execution_plan({TIM: [], VICTORIA: [TIM], QUINN: [TIM, VICTORIA]})
        assert [w.mind_ids for w in plan.waves] == [[TIM], [VICTORIA], [QUINN]]
        assert plan.order == [TIM, VICTORIA, QUINN]

    def test_independent_minds_share_a_wave(self):
        """Declaration order is kept inside a wave."""
        plan = build_execution_plan({VICTORIA: [], TIM: [], QUINN: [VICTORIA, TIM]})
        assert [w.mind_ids for w in plan.waves] == [[VICTORIA, TIM], [QUINN]]

    def test_unknown_dependency(self):
        with pytest.raises(PipelineConfigurationError, match="unregistered"):
            build_execution_plan({VICTORIA: [TIM]})

    def test_cycle(self):
        with pytest.raises(PipelineConfigurationError, match="Circular"):
            build_execution_plan({TIM: [VICTORIA], VICTORIA: [TIM], QUINN: []})

    def test_self_dependency_is_a_cycle(self):
        with pytest.raises(PipelineConfigurationError):
            build_execution_plan({TIM: [TIM]})


class TestExecutionPlanner:
    def test_duplicate_mind_rejected(self):
        with pytest.raises(PipelineConfigurationError, match="twice"):
            ExecutionPlanner([SpyMind(TIM), SpyMind(TIM)])

    def test_dependents_are_transitive(self):
        planner = ExecutionPlanner([
            SpyMind(TIM),
            SpyMind(VICTORIA, [TIM]),
            SpyMind(QUINN, [VICTORIA]),
            SpyMind(DANIEL),
        ])
        assert planner.dependents_of(TIM) == {VICTORIA, QUINN}
        assert planner.dependents_of(DANIEL) == set()
        assert planner.wave_for(QUINN) == 2


class TestMindRegistry:
    def test_default_registry(self):
        registry = get_mind_registry()
        assert registry.list_ids() == [TIM, VICTORIA, QUINN]
        assert registry.count() == len(MIND_REGISTRY)

    def test_summaries_carry_dependencies(self):
        summaries = {s.mind_id: s for s in MindRegistry().list_all()}
        assert summaries[VICTORIA].dependencies == [TIM]
        assert summaries[QUINN].dependencies == [TIM, VICTORIA]

    def test_get_validated_unknown(self):
        with pytest.raises(ValueError):
            MindRegistry().get_validated(DANIEL)
        assert MindRegistry().get(DANIEL) is None

    def test_duplicate_registration(self):
        registry = MindRegistry({})
        registry.register(TimMind)
        with pytest.raises(PipelineConfigurationError):
            registry.register(TimMind)

    def test_create_minds_gives_fresh_instances(self):
        first = MindRegistry().create_minds()
        second = MindRegistry().create_minds()
        assert [m.mind_id for m in first] == [TIM, VICTORIA, QUINN]
        assert first[0] is not second[0]
