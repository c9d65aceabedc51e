#!/usr/bin/env python3
"""Helper script to check and create the .env file for the distance API configuration."""

from pathlib import Path
import os
import sys


def mask(value: str) -> str:
    if len(value) > 12:
        return value[:6] + "..." + value[-4:]
    return "*" * len(value)


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Shipping Distance Matrix Environment Checker")
    print("=" * 60)
    print()

    if env_file.exists():
        print(f"✅ Found .env file at: {env_file}")
        print()
        print("Current contents:")
        print("-" * 60)
        with open(env_file, "r", encoding="utf-8") as f:
            for line in f.read().split("\n"):
                if "SDM_DISTANCE_API_KEY" in line and "=" in line:
                    name, value = line.split("=", 1)
                    print(f"{name}={mask(value.strip())}")
                else:
                    print(line)
        print("-" * 60)
        print()
    else:
        print(f"❌ .env file NOT found at: {env_file}")
        print()
        print("Creating template .env file...")
        print()

        template = """# Distance Matrix API (Required for live rate calculation)
SDM_DISTANCE_API_KEY=your-api-key-here
# SDM_DISTANCE_API_URL=https://maps.googleapis.com/maps/api/distancematrix/json

# API Configuration
SDM_API_PREFIX=/api
# SDM_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
# SDM_FRONTEND_ALLOWED_ORIGINS=http://localhost:5173,http://127.0.0.1:5173

# Behaviour
SDM_DEBUG_MODE=false
SDM_PRO_ENABLED=false
SDM_CACHE_TTL_SECONDS=3600
SDM_REQUEST_TIMEOUT_SECONDS=15
"""

        with open(env_file, "w", encoding="utf-8") as f:
            f.write(template)

        print(f"✅ Created .env file at: {env_file}")
        print()
        print("⚠️  Please edit .env and add your Distance Matrix API key!")
        print()
        return

    print("Checking environment variables...")
    print()

    api_key = os.getenv("SDM_DISTANCE_API_KEY")
    if api_key:
        print(f"✅ SDM_DISTANCE_API_KEY (from environment): {mask(api_key)}")
    else:
        print("❌ SDM_DISTANCE_API_KEY not found in environment")
    print()

    print("Testing config loading...")
    print()

    try:
        sys.path.insert(0, str(project_root / "src"))
        from shipping_distance.config import settings

        print(f"   Distance API URL: {settings.distance_api_url}")
        print(f"   Timeouts: {settings.connect_timeout_seconds}s connect / {settings.request_timeout_seconds}s total")
        print(f"   Cache TTL: {settings.cache_ttl_seconds}s, debug mode: {settings.debug_mode}")
        print(f"   Pro features: {'enabled' if settings.pro_enabled else 'disabled'}")
        print()

        if settings.distance_api_key:
            print(f"✅ Config loaded DISTANCE_API_KEY: {mask(settings.distance_api_key)}")
            print("=" * 60)
            print("✅ SUCCESS: Distance API is configured!")
            print("=" * 60)
        else:
            print("=" * 60)
            print("❌ ERROR: Distance API key is NOT configured")
            print("=" * 60)
            print()
            print("Troubleshooting:")
            print("1. Make sure .env file exists in project root")
            print("2. Make sure variables start with SDM_ prefix")
            print("3. Make sure there are no spaces around = sign")
            print("4. Restart backend after editing .env")
            print()
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print()
        print("Make sure you're running this from the project root directory")


if __name__ == "__main__":
    main()
