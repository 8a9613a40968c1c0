# agentvoice/api/metrics.py
from __future__ import annotations

import threading
from typing import Dict

STAGES = ("stt", "agent", "tts", "storage")
OUTCOMES = ("ok", "fail")


class StageCounters:
    """
    Per-pipeline outcome counts for each stage, plus completed replies.
    Owned by one AgentPipeline; two gateway apps never share counts.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stages: Dict[str, Dict[str, int]] = {s: {o: 0 for o in OUTCOMES} for s in STAGES}
        self._replies = 0

    def record(self, stage: str, outcome: str) -> None:
        if stage not in self._stages or outcome not in OUTCOMES:
            raise ValueError(f"unknown counter {stage}.{outcome}")
        with self._lock:
            self._stages[stage][outcome] += 1

    def reply_completed(self) -> None:
        with self._lock:
            self._replies += 1

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "stages": {s: dict(counts) for s, counts in self._stages.items()},
                "replies": self._replies,
            }
