"""Command-line client for the Jira REST API."""

__version__ = "0.1.0"
