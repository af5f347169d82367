"""
GPIO torch LED.

Hardware Connection:
- GPIO 27 -> high-brightness LED through a MOSFET or driver

The LED is exposed as a single torch with id "gpio<pin>".
"""

import logging
from typing import List, Optional, Tuple

from ..alerts.collaborators import TorchHardware

logger = logging.getLogger(__name__)


class GPIOTorch(TorchHardware):
    """
    Torch LED on a GPIO output pin.

    Usage:
        torch = GPIOTorch(pin=27)
        if torch.initialize():
            torch.set_torch(torch.torch_id, True)
            # ...
            torch.cleanup()
    """

    def __init__(self, pin: int = 27, enabled: bool = True):
        """
        Args:
            pin: BCM pin number for the torch LED
            enabled: If False, the torch reports no flash
        """
        self.pin = pin
        self.enabled = enabled
        self._gpio = None
        self._initialized = False

    @property
    def torch_id(self) -> str:
        return f"gpio{self.pin}"

    def initialize(self) -> bool:
        """
        Initialize the torch pin.

        Returns:
            True if initialization successful, False otherwise
        """
        if not self.enabled:
            logger.info("GPIO torch disabled")
            return False

        try:
            import RPi.GPIO as GPIO
            self._gpio = GPIO

            GPIO.setmode(GPIO.BCM)
            GPIO.setwarnings(False)
            GPIO.setup(self.pin, GPIO.OUT, initial=GPIO.LOW)

            self._initialized = True
            logger.info(f"GPIO torch initialized on pin {self.pin}")
            return True

        except (ImportError, RuntimeError):
            logger.warning("RPi.GPIO not available - torch disabled")
            return False
        except Exception as e:
            logger.error(f"GPIO torch initialization failed: {e}")
            return False

    def has_flash(self) -> bool:
        return self._initialized and self._gpio is not None

    def list_available_torches(self) -> List[str]:
        return [self.torch_id] if self.has_flash() else []

    def set_torch(self, torch_id: str, on: bool) -> None:
        """Switch the torch. Raises if the id is unknown or GPIO fails."""
        if torch_id != self.torch_id:
            raise ValueError(f"Unknown torch: {torch_id}")
        if not self.has_flash():
            raise RuntimeError("GPIO torch not initialized")
        self._gpio.output(self.pin, self._gpio.HIGH if on else self._gpio.LOW)

    def cleanup(self) -> None:
        """Turn the torch off and release the pin."""
        if self._gpio is not None and self._initialized:
            try:
                self._gpio.output(self.pin, self._gpio.LOW)
                self._gpio.cleanup(self.pin)
            except Exception as e:
                logger.warning(f"GPIO torch cleanup warning: {e}")

        self._initialized = False
        logger.info("GPIO torch cleaned up")


class StubTorch(TorchHardware):
    """
    Stub torch for testing without hardware.

    Records every toggle. Can simulate a device without flash or a torch
    that fails after a number of toggles.
    """

    def __init__(self, has_flash: bool = True, fail_after: Optional[int] = None):
        self._has_flash = has_flash
        self._fail_after = fail_after
        self.toggles: List[Tuple[str, bool]] = []
        self.is_on = False

    def initialize(self) -> bool:
        logger.info("Stub torch initialized")
        return True

    def has_flash(self) -> bool:
        return self._has_flash

    def list_available_torches(self) -> List[str]:
        return ["stub0"] if self._has_flash else []

    def set_torch(self, torch_id: str, on: bool) -> None:
        if self._fail_after is not None and len(self.toggles) >= self._fail_after:
            raise RuntimeError("Simulated torch failure")
        self.toggles.append((torch_id, on))
        self.is_on = on
        logger.debug(f"Stub: torch {'ON' if on else 'OFF'}")

    def cleanup(self) -> None:
        self.is_on = False


def create_torch(enabled: bool = True, pin: int = 27) -> TorchHardware:
    """
    Factory function to create the torch.

    Returns:
        Initialized GPIOTorch when RPi.GPIO works, StubTorch otherwise
    """
    if not enabled:
        logger.info("GPIO torch disabled, using stub")
        return StubTorch()

    torch = GPIOTorch(pin=pin, enabled=enabled)
    if torch.initialize():
        return torch

    logger.warning("Falling back to stub torch")
    return StubTorch()
