"""Services layer - Application orchestration.

This module contains the application services that orchestrate
the flow of data through adapters to fulfill use cases.

Available services:
- TripPlannerService: utterance to journeys
- LocationResolverService: place name or position to station
- VoiceSession: one speech recognition interaction
- RetryPolicy: bounded retries for remote calls
"""

from .location_resolver import LocationResolverService
from .retry import RetryPolicy
from .trip_planner import TripPlannerService
from .voice_session import VoiceSession, error_message

__all__ = [
    "TripPlannerService",
    "LocationResolverService",
    "VoiceSession",
    "RetryPolicy",
    "error_message",
]
