"""Top-level package for the voice-controlled transit trip planner.

This package exposes the modules used to turn a spoken or typed German
travel request ("Von Frankfurt nach Wiesbaden") into candidate public
transport journeys fetched from a remote journey-planning API.
"""

__version__ = "0.1.0"
