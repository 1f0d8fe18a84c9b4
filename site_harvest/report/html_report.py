"""site_harvest.report.html_report: HTML listing of stored pages, rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_harvest.crawler.models import ScrapedPage

TEMPLATE_NAME = "pages.html.j2"
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def render_html(
    pages: Iterable[ScrapedPage],
    template_dir: Union[Path, str, None],
    output_path: Union[Path, str],
    *,
    project_id: str = "",
) -> Path:
    """Render the pages template and save it to *output_path*.

    Args:
        pages: stored pages, in display order.
        template_dir: directory holding ``pages.html.j2``; None selects the packaged one.
        output_path: path of the resulting HTML file.
        project_id: shown in the page heading.

    Returns:
        Path of the saved HTML file.
    """
    template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "project_id": project_id,
        "pages": list(pages),
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
