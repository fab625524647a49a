#!/usr/bin/env python3
"""Analyze stored assessment reports to track score trends."""

from knowledge_debugger.config import settings
from knowledge_debugger.services.report_store import ReportStore, summarize_reports


def analyze_reports():
    store = ReportStore(settings.REPORTS_PATH)
    entries = store.load()

    if not entries:
        print("No reports recorded yet. Finish an assessment first.")
        return

    summary = summarize_reports(entries)

    print(f"\n{'='*72}")
    print(f"ASSESSMENT HISTORY ({len(entries)} reports)")
    print(f"{'='*72}\n")

    print(f"{'#':<4} {'Timestamp':<20} {'Score':<8} {'Level':<14} {'Domains':<8} {'Min':<6}")
    print("-" * 72)

    for row in summary["rows"]:
        score = row["Score"]
        if not isinstance(score, (int, float)):
            score_str = "—"
        elif score >= 86:
            score_str = f"\033[92m{score:.1f}\033[0m"  # Green
        elif score > 40:
            score_str = f"\033[93m{score:.1f}\033[0m"  # Yellow
        else:
            score_str = f"\033[91m{score:.1f}\033[0m"  # Red
        print(
            f"{row['#']:<4} {row['Timestamp']:<20} {score_str:<17} "
            f"{str(row['Level']):<14} {str(row['Domains']):<8} {str(row['Minutes']):<6}"
        )

    print("-" * 72)

    stats = summary["stats"]
    if stats and len(summary["rows"]) >= 2:
        print(f"\nStatistics:")
        print(f"  Best score:  {stats['best']:.1f}")
        print(f"  Worst score: {stats['worst']:.1f}")
        print(f"  Average:     {stats['avg']:.1f}")
        print(f"  Trend:       {'↑' if stats['trend'] > 0 else '↓'} {abs(stats['trend']):.1f} (first → last)")

    best = summary["best"]
    if best:
        report = best["report"]
        print(f"\n🏆 Best Report (score={report['overall_score']:.1f}): {report.get('title', '')}")
        print(f"   Video: {best.get('video_url', '')}")

    print(f"\n{'='*72}\n")


if __name__ == "__main__":
    analyze_reports()
