"""Data models produced by the build orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(slots=True)
class BuildResult:
    target: str
    status: str
    error: Optional[str] = None
    logs: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "succeeded"

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "target": self.target,
            "status": self.status,
            "logs": self.logs,
        }
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class BuildReport:
    results: List[BuildResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failed_targets(self) -> List[str]:
        return [result.target for result in self.results if not result.ok]

    def to_dict(self) -> Dict[str, object]:
        return {
            "ok": self.ok,
            "results": [result.to_dict() for result in self.results],
            "failed_targets": self.failed_targets,
        }


__all__ = ["BuildReport", "BuildResult"]
