# ABOUTME: notion2md-server package.
# ABOUTME: Serves Notion pages and database listings as Markdown over HTTP.

__version__ = "0.1.0"
