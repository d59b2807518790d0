"""Command-line interface for workqueue."""
