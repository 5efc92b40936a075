#!/usr/bin/env python3
"""Run the Mind pipeline over a JSON file of extracted sources.

The input file holds either a list of source records or an object with a
"sources" list. Each record needs at least "id" and "content"; optional
fields are "source_type", "timestamp" (ISO 8601) and "metadata".

Usage:
    python scripts/run_pipeline.py sources.json [--config settings.yaml]
        [--session ID] [--reference-time 2026-01-01T00:00:00+00:00] [--output run.json]

Exit codes:
    0  run completed successfully
    1  run aborted or a stage failed (partial results are still written)
    2  invalid input or configuration
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from clone_lab.config.settings import configure_logging, load_settings
from clone_lab.errors import PipelineConfigurationError
from clone_lab.minds.schemas import ExtractedData
from clone_lab.pipeline import build_orchestrator

_SOURCES = TypeAdapter(list[ExtractedData])


def load_sources(path: Path) -> list[ExtractedData]:
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("sources", [])
    return _SOURCES.validate_python(data)


def print_summary(run) -> None:
    print(f"Session {run.session_id}: {'SUCCESS' if run.success else 'INCOMPLETE'}")
    if run.aborted:
        print(f"  Aborted at stage: {run.failed_stage.value}")
    if run.cancelled:
        print("  Cancelled")
    for mind_id, info in run.execution.items():
        line = f"  [{info.status.value:>9}] {mind_id.value}"
        result = run.results.get(mind_id)
        if result is not None:
            validation = run.validations.get(mind_id)
            line += f" confidence={result.confidence:.2f}"
            if validation is not None:
                line += f" validation={validation.score}{'' if validation.valid else ' (invalid)'}"
        if info.error:
            line += f" - {info.error}"
        print(line)


def main():
    parser = argparse.ArgumentParser(
        description="Run the Mind pipeline over extracted sources"
    )
    parser.add_argument("sources", type=Path, help="JSON file of extracted sources")
    parser.add_argument("--config", type=Path, help="Settings YAML (default: packaged defaults)")
    parser.add_argument("--session", type=str, help="Session id (default: random)")
    parser.add_argument(
        "--reference-time",
        type=datetime.fromisoformat,
        help="ISO timestamp used as 'now' for recency scoring",
    )
    parser.add_argument("--output", type=Path, help="Write the full run artifact as JSON here")
    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
    except (OSError, ValidationError) as e:
        print(f"Error: could not load settings: {e}")
        return 2
    configure_logging(settings)

    try:
        sources = load_sources(args.sources)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"Error: could not read sources from {args.sources}: {e}")
        return 2

    try:
        orchestrator = build_orchestrator(settings)
    except (PipelineConfigurationError, ValidationError) as e:
        print(f"Error: {e}")
        return 2

    try:
        try:
            run = orchestrator.execute(
                sources,
                session_id=args.session,
                reference_time=args.reference_time,
            )
        except PipelineConfigurationError as e:
            print(f"Error: {e}")
            return 2

        print_summary(run)
        if args.output:
            args.output.write_text(run.model_dump_json(indent=2))
            print(f"Wrote run artifact to {args.output}")
        return 0 if run.success else 1
    finally:
        orchestrator.dispose()


if __name__ == "__main__":
    sys.exit(main())
