#!/usr/bin/env python3
"""
Look up the weather for a city or a lat/lon and print the planting/pesticide advice.

Usage:
    python scripts/run_advisory.py --city Nairobi
    python scripts/run_advisory.py --lat -1.29 --lon 36.82

Needs OPENWEATHER_API_KEY in the environment or .env.
"""
import argparse
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
    stream=sys.stdout,
)

from app.schemas.advisory import AdvisoryResult
from app.schemas.weather import WeatherObservation
from app.services.advisory_rules import RuleConfigError
from app.services.observation import IncompleteObservation
from app.services.weather import (
    LocationNotFound,
    WeatherServiceError,
    get_advisory_for_city,
    get_advisory_for_coords,
)


def render(observation: WeatherObservation, advice: AdvisoryResult) -> str:
    lines = [
        f"Location:    {observation.location_name or '(unnamed)'}",
        f"Temperature: {observation.temperature_celsius:g}°C",
        f"Humidity:    {observation.humidity_percent}%",
        f"Condition:   {observation.condition_description}",
        "",
    ]
    if advice.is_empty:
        lines.append("No advisory applicable.")
    if advice.planting:
        lines.append(f"Planting advice:   {advice.planting}")
    if advice.pesticide:
        lines.append(f"Pesticide control: {advice.pesticide}")
    return "\n".join(lines)


async def main(args: argparse.Namespace) -> int:
    try:
        if args.city:
            observation, advice = await get_advisory_for_city(args.city)
        else:
            observation, advice = await get_advisory_for_coords(args.lat, args.lon)
    except LocationNotFound:
        print("City not found or weather data unavailable", file=sys.stderr)
        return 1
    except IncompleteObservation as exc:
        print(f"Weather data unavailable ({exc})", file=sys.stderr)
        return 1
    except WeatherServiceError as exc:
        print(f"Weather lookup failed: {exc}", file=sys.stderr)
        return 1
    except RuleConfigError as exc:
        print(f"Advisory rules unavailable: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2

    print(render(observation, advice))
    return 0


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--city", help="city name, e.g. 'Nairobi' or 'Pune,IN'")
    parser.add_argument("--lat", type=float)
    parser.add_argument("--lon", type=float)
    args = parser.parse_args(argv)

    if not args.city and (args.lat is None or args.lon is None):
        parser.error("give --city or both --lat and --lon")
    return args


if __name__ == "__main__":
    sys.exit(asyncio.run(main(parse_args())))
