#!/usr/bin/env python3
"""
Call Alerting Controller - Demo Runner

Simulates an incoming call and/or a call-waiting call against the configured
device, driving real GPIO/pygame outputs where available and stubs elsewhere.

Usage:
    # Ring for 5 seconds with config.yaml settings
    python -m ringer.main --scenario ring --seconds 5

    # Incoming call followed by a second call while the first is active
    python -m ringer.main --scenario both --contact tel:+15551234
"""

import argparse
import logging
import signal
import sys
import threading
import uuid
from typing import Optional

from ringer.alerts import Call, Ringer
from ringer.config import Config, ConfigSettingsStore, load_config
from ringer.environment import create_environment
from ringer.hardware import (
    PygameRingtonePlayer,
    PygameTonePlayerFactory,
    create_torch,
    create_vibrator,
    init_mixer,
)
from ringer.telemetry import CallEventLog

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


class RingerDemo:
    """
    Wires a Ringer to configured hardware and runs one scenario.

    Scenarios:
    - ring: start_ringing, wait, stop_ringing
    - call-waiting: start_call_waiting, wait, stop_call_waiting
    - both: ring for half the time, then a second call arrives as call-waiting
    """

    def __init__(self, config: Config):
        self._config = config
        self._stop_requested = threading.Event()

        self._ringer: Optional[Ringer] = None
        self._events: Optional[CallEventLog] = None
        self._vibrator = None
        self._torch = None
        self._ringtone_player = None

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    @property
    def events(self) -> Optional[CallEventLog]:
        return self._events

    def setup(self) -> bool:
        """Create hardware adapters, environment and the controller."""
        logger.info("Setting up call alerting controller...")
        config = self._config

        self._events = CallEventLog(
            config.system.event_log_file,
            flush_interval=config.system.event_flush_interval_s,
        )
        self._events.start()

        self._vibrator = create_vibrator(
            enabled=config.gpio.enabled,
            pin=config.gpio.vibrator_pin,
            pwm_frequency_hz=config.gpio.pwm_frequency_hz,
        )
        self._torch = create_torch(enabled=config.gpio.enabled, pin=config.gpio.torch_pin)

        pygame_module = init_mixer(config.audio.enabled, config.audio.sample_rate)
        self._ringtone_player = PygameRingtonePlayer(pygame_module)
        tone_factory = PygameTonePlayerFactory(pygame_module, config.audio.sample_rate)

        audio_env, notification_filter, resolver, dialer = create_environment(config.device)

        self._ringer = Ringer(
            tone_player_factory=tone_factory,
            settings=ConfigSettingsStore(config.ringer),
            ringtone_player=self._ringtone_player,
            ringtone_resolver=resolver,
            vibrator=self._vibrator,
            dialer=dialer,
            notification_filter=notification_filter,
            audio_environment=audio_env,
            torch=self._torch,
            event_log=self._events,
            torch_blink_interval_ms=config.ringer.torch_blink_interval_ms,
        )
        return True

    def run(
        self,
        scenario: str,
        seconds: float,
        contact_uri: Optional[str] = None,
        self_managed: bool = False,
        hfp: bool = False,
    ) -> None:
        """Run one scenario, always leaving every channel stopped."""
        call = Call(
            call_id=uuid.uuid4().hex[:8],
            contact_uri=contact_uri,
            is_self_managed=self_managed,
        )

        try:
            if scenario in ("ring", "both"):
                wait_s = seconds / 2 if scenario == "both" else seconds
                focus = self._ringer.start_ringing(call, hfp_device_attached=hfp)
                logger.info(f"Incoming call {call.call_id}: acquire audio focus={focus}")
                self._stop_requested.wait(wait_s)

            if scenario in ("call-waiting", "both") and not self._stop_requested.is_set():
                waiting = Call(call_id=uuid.uuid4().hex[:8], contact_uri=contact_uri)
                self._ringer.start_call_waiting(waiting)
                logger.info(f"Call waiting {waiting.call_id}")
                self._stop_requested.wait(seconds / 2 if scenario == "both" else seconds)
        finally:
            self._ringer.stop_ringing()
            self._ringer.stop_call_waiting()

    def cleanup(self) -> None:
        """Clean up all resources."""
        logger.info("Cleaning up...")

        if self._ringtone_player is not None:
            self._ringtone_player.stop()

        if self._vibrator is not None:
            self._vibrator.cleanup()

        if self._torch is not None:
            self._torch.cleanup()

        if self._events is not None:
            self._events.stop()

        logger.info("Cleanup complete")

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self._stop_requested.set()


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Call Alerting Controller demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ringer.main --scenario ring --seconds 5
  python -m ringer.main --scenario call-waiting
  python -m ringer.main --scenario both --contact tel:+15551234 --hfp
        """,
    )

    call_group = parser.add_argument_group("Call")
    call_group.add_argument(
        "--scenario",
        choices=["ring", "call-waiting", "both"],
        default="ring",
        help="What to simulate (default: ring)",
    )
    call_group.add_argument(
        "--seconds",
        type=float,
        default=5.0,
        help="How long to alert before stopping (default: 5)",
    )
    call_group.add_argument(
        "--contact",
        type=str,
        default=None,
        help="Contact URI of the caller",
    )
    call_group.add_argument(
        "--self-managed",
        action="store_true",
        help="Simulate a self-managed call",
    )
    call_group.add_argument(
        "--hfp",
        action="store_true",
        help="Simulate an attached hands-free device",
    )

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml",
    )
    config_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config)",
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.getLogger().setLevel(getattr(logging, args.log_level or config.system.log_level))

    app = RingerDemo(config)

    try:
        if not app.setup():
            logger.critical("Setup failed - aborting")
            return 1

        app.run(
            scenario=args.scenario,
            seconds=args.seconds,
            contact_uri=args.contact,
            self_managed=args.self_managed,
            hfp=args.hfp,
        )

        for record in app.events.recent:
            print(record.to_json())
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1
    finally:
        app.cleanup()


if __name__ == "__main__":
    sys.exit(main())
