"""
JSON report of the pages stored for a project.
"""
import json
from pathlib import Path
from typing import Iterable

from site_harvest.crawler.models import ScrapedPage


def render_json(pages: Iterable[ScrapedPage], output_path: Path | str) -> Path:
    """
    Write ``{"pages": [...]}`` to *output_path* and return the path.

    Example:
    ```python
    from site_harvest.report.json_report import render_json
    report_path = render_json(store.list_pages("demo"), "reports/pages.json")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = {"pages": [page.to_dict() for page in pages]}

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
