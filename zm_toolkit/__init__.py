"""
Client-side toolkit for the ZoneMinder HTTP API.

Resolves monitors and zones by id or name, searches recorded events over a
natural-language time window, stages event media, and reads or writes monitor
and zone parameters (converting zone thresholds between pixels and percent).
"""

__version__ = "0.3.0"
