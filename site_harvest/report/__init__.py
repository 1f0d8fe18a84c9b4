"""site_harvest.report: JSON and HTML reports of stored pages, used by the CLI."""

from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import render_json

__all__ = ["render_json", "render_html"]
