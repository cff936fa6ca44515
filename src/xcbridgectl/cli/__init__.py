"""Command-line interface for xcbridgectl."""
