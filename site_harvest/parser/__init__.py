"""site_harvest.parser: HTML parsing helpers."""
