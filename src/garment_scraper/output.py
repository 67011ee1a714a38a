"""Grouping and export of scrape results for presentation layers."""

import json
from pathlib import Path
from typing import Dict, List

from garment_scraper.models import ScrapeResult, group_by_color


def results_to_dict(results: Dict[str, ScrapeResult]) -> dict:
    """Convert results to a JSON-serializable dictionary keyed by product URL."""
    return {
        url: {
            "status": result.status,
            "error": result.error,
            "error_type": result.error_type,
            "skipped_variants": list(result.skipped_variants),
            "image_count": len(result.images),
            "colors": group_by_color(result.images),
            "started_at": result.started_at.isoformat(),
            "finished_at": result.finished_at.isoformat() if result.finished_at else None,
        }
        for url, result in results.items()
    }


def write_json(results: Dict[str, ScrapeResult], path: str) -> Path:
    """Write results to a JSON file, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(results_to_dict(results), f, indent=2)
    return output_path


def format_text(results: Dict[str, ScrapeResult]) -> str:
    """Human-readable summary of results."""
    lines: List[str] = []
    for url, result in results.items():
        lines.append("=" * 60)
        lines.append(url)
        lines.append("=" * 60)

        if not result.ok:
            lines.append(f"  ❌ {result.error_type}: {result.error}")
            continue

        groups = group_by_color(result.images)
        if not groups:
            lines.append("  No images found")
        for color, urls in groups.items():
            lines.append(f"  {color} ({len(urls)} images)")
            lines.extend(f"    • {image_url}" for image_url in urls)

        if result.skipped_variants:
            lines.append(f"  ⚠️  Skipped: {', '.join(result.skipped_variants)}")

    return "\n".join(lines)
