"""Tests for the run_pipeline command-line script."""

import importlib.util
import json
import sys
from pathlib import Path

import pytest

from clone_lab.errors import PipelineConfigurationError

from tests.conftest import CHAT_TEXT, DOCUMENT_TEXT

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "run_pipeline.py"


@pytest.fixture
def cli():
    spec = importlib.util.spec_from_file_location("run_pipeline", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def sources_file(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps({
        "sources": [
            {"id": "chat-1", "source_type": "chat", "content": CHAT_TEXT},
            {"id": "chat-2", "source_type": "chat", "content": CHAT_TEXT},
            {"id": "doc-1", "source_type": "document", "content": DOCUMENT_TEXT},
        ]
    }))
    return path


class FakeOrchestrator:
    def __init__(self, error):
        self.error = error
        self.disposed = False

    def execute(self, sources, session_id=None, reference_time=None):
        raise self.error

    def dispose(self):
        self.disposed = True


def run_main(cli, monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["run_pipeline.py", *map(str, args)])
    return cli.main()


class TestRunPipelineScript:
    def test_successful_run_writes_artifact(self, cli, monkeypatch, sources_file, tmp_path):
        output = tmp_path / "run.json"
        code = run_main(
            cli, monkeypatch, sources_file,
            "--reference-time", "2026-01-01T00:00:00+00:00",
            "--session", "cli-run",
            "--output", output,
        )
        assert code == 0
        artifact = json.loads(output.read_text())
        assert artifact["session_id"] == "cli-run"
        assert artifact["success"]

    def test_unreadable_sources(self, cli, monkeypatch, tmp_path):
        assert run_main(cli, monkeypatch, tmp_path / "missing.json") == 2

    def test_minds_disposed_when_execute_rejects_input(self, cli, monkeypatch, sources_file):
        fake = FakeOrchestrator(PipelineConfigurationError("Session cli-busy is already running"))
        monkeypatch.setattr(cli, "build_orchestrator", lambda settings: fake)

        assert run_main(cli, monkeypatch, sources_file) == 2
        assert fake.disposed

    def test_minds_disposed_when_execute_crashes(self, cli, monkeypatch, sources_file):
        fake = FakeOrchestrator(RuntimeError("worker pool died"))
        monkeypatch.setattr(cli, "build_orchestrator", lambda settings: fake)

        with pytest.raises(RuntimeError, match="worker pool died"):
            run_main(cli, monkeypatch, sources_file)
        assert fake.disposed
