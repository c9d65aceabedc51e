#!/usr/bin/env python3
"""Script to verify Distance Matrix API connectivity."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from shipping_distance.config import settings
from shipping_distance.errors import ShippingError
from shipping_distance.models.domain import Coordinate
from shipping_distance.services.distance.client import DistanceMatrixClient, check_health
from shipping_distance.services.distance.models import DistanceQuery


def main():
    print("=" * 60)
    print("Distance Matrix API Connection Test")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    if not settings.distance_api_key:
        print("   [ERROR] Distance API key is not configured")
        print("   Please set SDM_DISTANCE_API_KEY in your .env file")
        return 1
    print(f"   [OK] Distance API URL: {settings.distance_api_url}")
    print(f"   [OK] Language: {settings.language}")
    print()

    print("2. Testing health check...")
    if not check_health():
        print("   [ERROR] Distance API did not return a usable route")
        return 1
    print("   [OK] Distance API is reachable and the key is accepted")
    print()

    print("3. Testing metric and imperial lookups...")
    client = DistanceMatrixClient()
    origin = Coordinate(settings.default_origin_lat, settings.default_origin_lng)
    destination = Coordinate(settings.probe_destination_lat, settings.probe_destination_lng)
    for unit in ("metric", "imperial"):
        try:
            result = client.fetch(DistanceQuery(origin=origin, destination=destination, distance_unit=unit))
        except ShippingError as exc:
            print(f"   [ERROR] {unit} lookup failed: {exc.message}")
            return 1
        print(f"   [OK] {unit}: {result.distance} ({result.distance_text}), {result.duration_text}")
    print()

    print("=" * 60)
    print("[SUCCESS] Distance Matrix API is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
