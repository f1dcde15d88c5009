"""Command line entry point.

Examples:
    voice-transit "Von Mainz nach Wiesbaden um 8 Uhr"
    voice-transit "nach Darmstadt" --wheelchair --departure "morgen 7:30"
    voice-transit --audio aufnahme.wav
    voice-transit "in 10 Minuten nach Hanau" --intent-only
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from . import __version__
from .config import AppConfig, get_config
from .container import Container
from .dates import parse_departure_de
from .domain.models import Journey, TripPlan, TripProfile, format_clock
from .monitoring import configure_logging
from .nlp.intent import parse_intent
from .ports.asr import ASRModelPort
from .services import RetryPolicy, TripPlannerService, VoiceSession, error_message


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voice-transit",
        description="Plan a public transport trip from a spoken or typed German request.",
    )
    parser.add_argument("text", nargs="?", help='Request, e.g. "Von Mainz nach Wiesbaden".')
    parser.add_argument("--audio", type=Path, help="Recorded request to transcribe instead of TEXT.")
    parser.add_argument("--wheelchair", action="store_true", help="Only step-free connections.")
    parser.add_argument("--departure", help='Departure if the request names none, e.g. "morgen 7:30".')
    parser.add_argument("--intent-only", action="store_true", help="Print the parsed intent and exit.")
    parser.add_argument("--backend", choices=["db_rest", "db_api"], help="Journey planner backend.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _with_backend(config: AppConfig, backend: Optional[str]) -> AppConfig:
    if not backend:
        return config
    transit = config.transit.model_copy(update={"backend": backend})
    return config.model_copy(update={"transit": transit})


def _transcribe(container: Container, audio_path: Path) -> tuple[Optional[str], Optional[str]]:
    """Run one voice session over a recording. Returns (text, error message)."""
    errors: List[str] = []
    session = VoiceSession(
        asr=container.resolve(ASRModelPort),
        on_error=errors.append,
        retry_policy=container.resolve(RetryPolicy),
        language=container.config.asr.language,
        beam_size=container.config.asr.beam_size,
    )
    with session:
        text = session.submit_audio(audio_path)
    if text is None:
        code = errors[-1] if errors else "no-speech"
        return None, error_message(code) or "Aufnahme abgebrochen."
    return text, None


def format_journey(index: int, journey: Journey) -> str:
    header = f"{index}. {format_clock(journey.departure)} - {format_clock(journey.arrival)}"
    if journey.duration_minutes is not None:
        header += f" ({journey.duration_minutes} min, {journey.transfers} Umstiege)"
    lines = [header]
    for leg in journey.legs:
        platform = f" Gleis {leg.departure_platform}" if leg.departure_platform else ""
        lines.append(
            f"   {format_clock(leg.departure)} {leg.line_name}: "
            f"{leg.origin_name}{platform} -> {leg.destination_name}"
        )
    return "\n".join(lines)


def format_plan(plan: TripPlan) -> str:
    origin = plan.origin.name
    if plan.origin_label:
        origin = f"{plan.origin_label} ({plan.origin.name})"
    lines = [f"Von: {origin}", f"Nach: {plan.destination.name}", ""]
    lines.extend(format_journey(i, journey) for i, journey in enumerate(plan.journeys, 1))
    lines.extend(["", plan.announcement()])
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)

    config = _with_backend(get_config(), args.backend)
    observability = config.observability
    if args.verbose:
        observability = observability.model_copy(update={"level": "DEBUG"})
    configure_logging(observability)

    if not args.text and not args.audio:
        parser.error("either TEXT or --audio is required")

    container = Container.create_default(config)

    text = args.text
    if args.audio:
        text, problem = _transcribe(container, args.audio)
        if problem:
            print(problem, file=sys.stderr)
            return 1
        print(f"Erkannt: {text}")

    now = datetime.now()
    if args.intent_only:
        intent = parse_intent(text, now=now)
        print(json.dumps(intent.as_dict(), ensure_ascii=False, default=lambda dt: dt.isoformat()))
        return 0

    departure = None
    if args.departure:
        departure = parse_departure_de(args.departure, now=now)
        if departure is None:
            print(f'Abfahrtszeit "{args.departure}" nicht verstanden.', file=sys.stderr)
            return 1

    profile = TripProfile.WHEELCHAIR if args.wheelchair else TripProfile.STANDARD
    planner: TripPlannerService = container.resolve(TripPlannerService)
    plan, problem = planner.plan_safe(text, profile=profile, now=now, departure=departure)
    if plan is None:
        print(problem, file=sys.stderr)
        return 1

    print(format_plan(plan))
    return 0


if __name__ == "__main__":
    sys.exit(main())
