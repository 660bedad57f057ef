"""Command-line entry points: zm-events, zm-config and zm-monitors."""
