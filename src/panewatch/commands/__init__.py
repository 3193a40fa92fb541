"""panewatch commands."""
