"""Persistence and summaries for final assessment reports."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from knowledge_debugger.models import FinalReport


class ReportStore:
    """Store final reports in a JSON file (list of entries)."""

    def __init__(self, path: str | Path = "data/reports.json"):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> list[dict[str, Any]]:
        """Load stored entries from disk."""
        if not self.path.exists():
            return []
        try:
            data: Any = json.loads(self.path.read_text())
        except json.JSONDecodeError:
            return []
        return data if isinstance(data, list) else []

    def save(self, entries: list[dict[str, Any]]) -> None:
        """Write entries to disk."""
        self.path.write_text(json.dumps(entries, indent=2))

    def append(
        self, report: FinalReport, video_url: str, timestamp: str | None = None
    ) -> list[dict[str, Any]]:
        """Append a report and return all stored entries."""
        entries = self.load()
        entries.append(
            {
                "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
                "video_url": video_url,
                "report": report.model_dump(mode="json"),
            }
        )
        self.save(entries)
        return entries


def summarize_reports(entries: list[dict[str, Any]]) -> dict[str, Any]:
    """Summarize stored reports for UI rendering."""
    rows: list[dict[str, Any]] = []
    scores: list[float] = []
    for idx, entry in enumerate(entries, 1):
        report = entry.get("report", {}) if isinstance(entry.get("report"), dict) else {}
        ts = str(entry.get("timestamp", ""))[:19].replace("T", " ")
        score = report.get("overall_score")
        rows.append(
            {
                "#": idx,
                "Timestamp": ts,
                "Topic": report.get("title", ""),
                "Score": score,
                "Level": report.get("knowledge_level"),
                "Domains": report.get("domains_assessed"),
                "Minutes": report.get("total_time_minutes"),
            }
        )
        if isinstance(score, (int, float)):
            scores.append(float(score))

    stats = None
    if scores:
        stats = {
            "best": max(scores),
            "worst": min(scores),
            "avg": sum(scores) / len(scores),
            "trend": scores[-1] - scores[0],
        }

    best_entry = None
    valid = [
        e for e in entries
        if isinstance(e.get("report"), dict)
        and isinstance(e["report"].get("overall_score"), (int, float))
    ]
    if valid:
        best_entry = max(valid, key=lambda e: e["report"]["overall_score"])

    return {"rows": rows, "stats": stats, "best": best_entry}
