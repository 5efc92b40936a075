"""Tests for settings loading, pipeline assembly and the content generator."""

import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest
from pydantic import ValidationError

from clone_lab.config.settings import PipelineSettings, load_settings
from clone_lab.errors import GeneratorError, GeneratorTimeoutError
from clone_lab.llm import AnthropicGenerator, ContentGenerator, get_generator, parse_llm_json_response
from clone_lab.minds.schemas import MindId
from clone_lab.pipeline import build_orchestrator

from tests.conftest import FakeGenerator


class StubMessages:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text=self.text)],
            usage=SimpleNamespace(input_tokens=12, output_tokens=5),
        )


def stub_client(**kwargs):
    return SimpleNamespace(messages=StubMessages(**kwargs))


class TestLoadSettings:
    def test_packaged_defaults(self, monkeypatch):
        monkeypatch.delenv("CLONE_LAB_CONFIG", raising=False)
        monkeypatch.delenv("CLONE_LAB_LOG_LEVEL", raising=False)
        settings = load_settings()
        assert settings.log_level == "INFO"
        assert settings.orchestrator.timeout_for(MindId.VICTORIA) == 120
        assert settings.orchestrator.timeout_for(MindId.TIM) == 30
        assert settings.minds[MindId.TIM]["min_quality_score"] == 30
        assert not settings.generator_enabled()

    def test_explicit_file_and_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "log_level: warning\n"
            "orchestrator:\n"
            "  continue_on_error: true\n"
            "minds:\n"
            "  victoria:\n"
            "    use_generator: true\n"
        )
        monkeypatch.setenv("CLONE_LAB_LOG_LEVEL", "debug")
        monkeypatch.setenv("CLONE_LAB_GENERATOR_MODEL", "claude-haiku-4-5")
        settings = load_settings(path)

        assert settings.log_level == "DEBUG"
        assert settings.orchestrator.continue_on_error
        assert settings.generator.model_id == "claude-haiku-4-5"
        assert settings.generator_enabled()

    def test_config_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "other.yaml"
        path.write_text("log_level: ERROR\n")
        monkeypatch.setenv("CLONE_LAB_CONFIG", str(path))
        monkeypatch.delenv("CLONE_LAB_LOG_LEVEL", raising=False)
        assert load_settings().log_level == "ERROR"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            PipelineSettings(log_level="chatty")

    def test_unknown_mind_in_settings(self):
        with pytest.raises(ValidationError):
            PipelineSettings(minds={"zed": {}})


class TestBuildOrchestrator:
    def test_uses_settings(self):
        settings = PipelineSettings(minds={MindId.TIM: {"min_quality_score": 55}})
        orchestrator = build_orchestrator(settings)
        assert orchestrator.plan.order == [MindId.TIM, MindId.VICTORIA, MindId.QUINN]
        assert orchestrator.get_mind(MindId.TIM).options.min_quality_score == 55

    def test_invalid_mind_options_rejected(self):
        settings = PipelineSettings(minds={MindId.TIM: {"not_an_option": 1}})
        with pytest.raises(ValidationError):
            build_orchestrator(settings)

    def test_injected_generator_reaches_minds(self):
        generator = FakeGenerator()
        settings = PipelineSettings(minds={MindId.VICTORIA: {"use_generator": True}})
        orchestrator = build_orchestrator(settings, generator=generator)
        assert orchestrator.get_mind(MindId.VICTORIA)._generator is generator


class TestContentGenerator:
    def test_parse_fenced_json(self):
        assert parse_llm_json_response('```json\n{"a": 1}\n```') == {"a": 1}
        assert parse_llm_json_response(' {"b": 2} ') == {"b": 2}
        with pytest.raises(json.JSONDecodeError):
            parse_llm_json_response("not json")

    def test_factory(self):
        generator = get_generator("claude-sonnet-4-5-20250929", timeout_s=10)
        assert isinstance(generator, ContentGenerator)
        assert generator.model_id == "claude-sonnet-4-5-20250929"
        with pytest.raises(ValueError):
            get_generator("gpt-4o")

    def test_anthropic_generator_success(self):
        client = stub_client(text='  {"insights": []}  ')
        generator = AnthropicGenerator("claude-test", client=client)
        result = generator.generate("system", "user", max_tokens=100, label="t")

        assert result.content == '{"insights": []}'
        assert result.input_tokens == 12
        call = client.messages.calls[0]
        assert call["system"] == "system"
        assert call["messages"] == [{"role": "user", "content": "user"}]

    def test_empty_response(self):
        generator = AnthropicGenerator("claude-test", client=stub_client(text="   "))
        with pytest.raises(GeneratorError, match="Empty"):
            generator.generate("s", "u", max_tokens=10)

    def test_timeout_is_translated(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client = stub_client(error=anthropic.APITimeoutError(request=request))
        generator = AnthropicGenerator("claude-test", client=client)
        with pytest.raises(GeneratorTimeoutError):
            generator.generate("s", "u", max_tokens=10)

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        generator = AnthropicGenerator("claude-test")
        with pytest.raises(GeneratorError, match="ANTHROPIC_API_KEY"):
            generator.generate("s", "u", max_tokens=10)
