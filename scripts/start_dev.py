#!/usr/bin/env python3
"""
Development startup script.

Starts the mock backend and the checkout service in development mode.
"""

import os
import sys
import subprocess
import time
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

BACKEND_PORT = 8080
CHECKOUT_PORT = 8000


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import pydantic_settings
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e .")
        return False


def start_services():
    """Start both services in development mode."""
    processes = []
    env = {
        **os.environ,
        "PAYLINK_API_BASE_URL": os.getenv("PAYLINK_API_BASE_URL", f"http://localhost:{BACKEND_PORT}"),
        "PAYLINK_DEBUG": os.getenv("PAYLINK_DEBUG", "true"),
    }

    try:
        print(f"\n🏦 Starting Mock Backend on http://localhost:{BACKEND_PORT} ...")
        backend_process = subprocess.Popen(
            [
                sys.executable, "-m", "uvicorn",
                "paylink.mock_backend.main:app",
                "--reload",
                "--host", "0.0.0.0",
                "--port", str(BACKEND_PORT),
            ],
            cwd=PROJECT_ROOT,
            env=env,
        )
        processes.append(backend_process)

        # Wait a bit for the backend to start
        time.sleep(2)

        print(f"💳 Starting Checkout Service on http://localhost:{CHECKOUT_PORT} ...")
        checkout_process = subprocess.Popen(
            [
                sys.executable, "-m", "uvicorn",
                "paylink.checkout.main:app",
                "--reload",
                "--host", "0.0.0.0",
                "--port", str(CHECKOUT_PORT),
            ],
            cwd=PROJECT_ROOT,
            env=env,
        )
        processes.append(checkout_process)

        print("\n" + "=" * 60)
        print("Services started successfully!")
        print("=" * 60)
        print(f"\n📍 Checkout API: http://localhost:{CHECKOUT_PORT}/docs")
        print(f"📍 Backend API:  http://localhost:{BACKEND_PORT}/docs")
        print("\nTest cards ending in 0001/0002/0003/0004 simulate PSP errors, 9999 an SDK failure.")
        print("\nPress Ctrl+C to stop all services")
        print("=" * 60)

        for p in processes:
            p.wait()

    except KeyboardInterrupt:
        print("\n\nShutting down services...")
        for p in processes:
            p.terminate()
        for p in processes:
            p.wait()
        print("All services stopped.")


def main():
    print("=" * 60)
    print("Paylink Checkout - Development Server")
    print("=" * 60)

    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    print("\n✓ All checks passed!")

    start_services()


if __name__ == "__main__":
    main()
