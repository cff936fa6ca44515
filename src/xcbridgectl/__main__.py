"""Allow running as `python -m xcbridgectl`."""

from xcbridgectl.cli.app import app

app()
