import argparse
import asyncio
import logging
import sys
from importlib.metadata import version
from pathlib import Path

from eye_tracking.acquisition import SimulatedFaceTracker
from eye_tracking.configs import TrackerSettings
from eye_tracking.core import EyeTracking
from eye_tracking.errors import EyeTrackingError


async def record(tracker: SimulatedFaceTracker, eye_tracking: EyeTracking, duration_s: float):
    eye_tracking.start_session()
    try:
        await tracker.run(duration_s)
    finally:
        eye_tracking.end_session()


def main():
    """
    Records one session from the simulated face tracker and prints it as JSON.
    """
    parser = argparse.ArgumentParser(description="Record a simulated eye tracking session")
    parser.add_argument("--duration", type=float, default=3.0, help="Recording length in seconds.")
    parser.add_argument("--parquet", type=Path, default=None, help="Also export the session to this directory.")
    args = parser.parse_args()

    # 1. Load Configuration
    try:
        settings = TrackerSettings()
    except Exception as e:
        print(f"Configuration Error: {e}")
        sys.exit(1)

    # 2. Setup Logging
    logging.basicConfig(
        level=settings.logging.level,
        format=settings.logging.format,
        stream=sys.stderr
    )
    logger = logging.getLogger("main")
    logger.info(f"Starting eye tracking recorder v{version('eye-tracking')}")

    # 3. Wire components
    sim = settings.simulation
    tracker = SimulatedFaceTracker(frequency=sim.frequency, radius=sim.radius, speed=sim.speed)
    if not settings.signals:
        settings.signals = ["eyeBlinkLeft", "eyeBlinkRight"]
    eye_tracking = EyeTracking.from_settings(settings, tracker)

    # 4. Record
    try:
        asyncio.run(record(tracker, eye_tracking, args.duration))
        session = eye_tracking.sessions[-1]
        print(eye_tracking.export(session.id))

        if args.parquet:
            eye_tracking.export_parquet(session.id, args.parquet)
    except EyeTrackingError:
        logger.exception("Recording failed")
        sys.exit(1)
    finally:
        eye_tracking.shutdown()

if __name__ == "__main__":
    main()
