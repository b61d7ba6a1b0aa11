#!/usr/bin/env python3
"""
Development startup script.

Starts the mock commerce backend and the checkout service in development mode.
"""

import shutil
import subprocess
import sys
import time
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent


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


def check_env():
    """Check if .env file exists, creating it from the example when missing."""
    env_file = PROJECT_ROOT / ".env"
    env_example = PROJECT_ROOT / ".env.example"

    if env_file.exists():
        print("✓ Configuration file found")
        return True
    elif env_example.exists():
        print("! Configuration file not found, copying from example...")
        shutil.copy(env_example, env_file)
        print("✓ Created .env from example")
        return True
    else:
        print("✗ No configuration file found")
        return False


def start_services():
    """Start both services in development mode."""
    processes = []

    try:
        print("\n🏪 Starting Mock Commerce on http://localhost:8001 ...")
        backend_process = subprocess.Popen(
            [
                sys.executable, "-m", "uvicorn",
                "mock_commerce.main:app",
                "--reload",
                "--host", "0.0.0.0",
                "--port", "8001",
            ],
            cwd=PROJECT_ROOT,
        )
        processes.append(backend_process)

        # Wait a bit for the backend to start
        time.sleep(2)

        print("🛒 Starting Checkout Service on http://localhost:8000 ...")
        checkout_process = subprocess.Popen(
            [
                sys.executable, "-m", "uvicorn",
                "checkout_service.main:app",
                "--reload",
                "--host", "0.0.0.0",
                "--port", "8000",
            ],
            cwd=PROJECT_ROOT,
        )
        processes.append(checkout_process)

        print("\n" + "=" * 60)
        print("Services started successfully!")
        print("=" * 60)
        print("\n📍 Checkout API:      http://localhost:8000/docs")
        print("📍 Mock Commerce API: http://localhost:8001/docs")
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
    print("Veloura Checkout - Development Server")
    print("=" * 60)

    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    if not check_env():
        sys.exit(1)

    print("\n✓ All checks passed!")

    start_services()


if __name__ == "__main__":
    main()
