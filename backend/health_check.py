#!/usr/bin/env python3
"""
Health check script to verify the PitchMixer API is running and responsive.
Can be used by monitoring tools or startup scripts.
"""
import os
import sys
import requests
import time

API_BASE = os.getenv("PITCHMIXER_URL", "http://localhost:8000")


def check_backend(max_retries=3, retry_delay=1):
    """Poll /api/health until it answers 200 or retries run out."""
    url = f"{API_BASE}/api/health"

    for attempt in range(max_retries):
        try:
            response = requests.get(url, timeout=2)
            if response.status_code == 200 and response.json().get("service") == "pitchmixer":
                print("✅ PitchMixer is healthy")
                return True
            print(f"⚠ Unexpected health response ({response.status_code})")
        except requests.exceptions.RequestException as e:
            if attempt == max_retries - 1:
                print(f"❌ PitchMixer health check failed: {e}")
                return False
        time.sleep(retry_delay)

    return False


if __name__ == "__main__":
    success = check_backend()
    sys.exit(0 if success else 1)
