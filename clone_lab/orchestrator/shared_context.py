"""Run-scoped shared state: source data and the append-only results table.

Only the orchestrator publishes, and only after a Mind's analyze() has
returned. Minds receive a MindContext holding an immutable snapshot of
the results published so far.
"""

import threading
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from clone_lab.minds.schemas import ExtractedData, MindContext, MindId, MindResult, as_utc, utc_now


class SharedContext:
    def __init__(
        self,
        extracted_data: Sequence[ExtractedData],
        session_id: str,
        options: Optional[Mapping[str, Any]] = None,
        reference_time: Optional[datetime] = None,
    ):
        self.extracted_data = tuple(extracted_data)
        self.session_id = session_id
        self.options = MappingProxyType(dict(options or {}))
        self.reference_time = as_utc(reference_time) if reference_time else utc_now()
        self._results: dict[MindId, MindResult] = {}
        self._lock = threading.Lock()

    def publish(self, mind_id: MindId, result: MindResult) -> None:
        with self._lock:
            if mind_id in self._results:
                raise ValueError(f"Result for '{mind_id.value}' already published")
            self._results[mind_id] = result

    def has(self, mind_id: MindId) -> bool:
        with self._lock:
            return mind_id in self._results

    def results(self) -> dict[MindId, MindResult]:
        """Copy of the published results, in publication order."""
        with self._lock:
            return dict(self._results)

    def snapshot(self, cancellation_check: Optional[Callable[[], bool]] = None) -> MindContext:
        return MindContext(
            extracted_data=self.extracted_data,
            previous_results=MappingProxyType(self.results()),
            options=self.options,
            session_id=self.session_id,
            reference_time=self.reference_time,
            cancellation_check=cancellation_check,
        )
