"""Short-lived credential management for CI agents calling the GitHub API."""

__version__ = "0.1.0"
