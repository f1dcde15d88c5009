"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Transit APIs (db.transport.rest, DB Fahrplan Plus)
- Positioning (fixed coordinates, Nominatim)
- ASR models (Whisper)
- Caching systems (in-memory, null)
"""
