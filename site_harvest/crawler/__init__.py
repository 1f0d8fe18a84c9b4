"""site_harvest.crawler: bounded same-host breadth-first crawling."""
