"""Command-line interface package for layerdoc."""
