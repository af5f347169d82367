"""
Config-backed collaborator implementations.

Stand-ins for the platform services (audio manager, notification filter,
ringtone lookup, dialer) driven by the `device` section of config.yaml.
Used by the demo runner and by integration tests.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from .alerts.collaborators import (
    AudioEnvironment,
    DialerDelegate,
    NotificationFilter,
    RingtoneResolver,
)
from .alerts.patterns import VibrationPattern
from .alerts.types import Call, RingerMode, RingtoneInfo
from .config import DeviceConfig

logger = logging.getLogger(__name__)


class StaticAudioEnvironment(AudioEnvironment):
    """Fixed ring volume and ringer mode (mutable for tests and demos)."""

    def __init__(self, ring_volume: int = 5, ringer_mode: RingerMode = RingerMode.NORMAL):
        self.volume = ring_volume
        self.mode = ringer_mode

    def ring_stream_volume(self) -> int:
        return self.volume

    def ringer_mode(self) -> RingerMode:
        return self.mode


class ContactAllowlistFilter(NotificationFilter):
    """
    Lets a call ring when its contact is on the allowlist.

    An allowlist of None lets every call ring, including unknown numbers.
    """

    def __init__(self, allowed_contacts: Optional[Iterable[str]] = None):
        self._allowed = set(allowed_contacts) if allowed_contacts is not None else None

    def matches_filter(self, contact_uri: Optional[str]) -> bool:
        if self._allowed is None:
            return True
        return contact_uri is not None and contact_uri in self._allowed


class FileRingtoneResolver(RingtoneResolver):
    """Per-contact ringtone files with a default fallback."""

    def __init__(
        self,
        default_ringtone: Optional[str] = None,
        contact_ringtones: Optional[Dict[str, str]] = None,
        embedded_vibrations: Optional[Dict[str, VibrationPattern]] = None,
        require_exists: bool = False,
    ):
        """
        Args:
            default_ringtone: Path used when the contact has no ringtone
            contact_ringtones: contact_uri -> ringtone path
            embedded_vibrations: ringtone path -> haptics shipped with it
            require_exists: Treat ringtones missing on disk as absent
        """
        self._default = default_ringtone
        self._contacts = dict(contact_ringtones or {})
        self._vibrations = dict(embedded_vibrations or {})
        self._require_exists = require_exists

    def resolve(self, call: Call) -> RingtoneInfo:
        uri = self._contacts.get(call.contact_uri, self._default) if call.contact_uri else self._default
        if uri is None:
            return RingtoneInfo(present=False)

        if self._require_exists and not Path(uri).exists():
            logger.warning(f"Ringtone not found: {uri}")
            return RingtoneInfo(present=False)

        return RingtoneInfo(
            present=True,
            uri=uri,
            embedded_vibration=self._vibrations.get(uri),
        )


class StaticDialer(DialerDelegate):
    """Dialer with a fixed answer to "do you ring yourself"."""

    def __init__(self, supports_ringing: bool = False):
        self.supports_ringing = supports_ringing

    def supports_own_ringing(self) -> bool:
        return self.supports_ringing


def create_environment(device: DeviceConfig, require_ringtone_files: bool = False):
    """
    Build the audio environment, notification filter, ringtone resolver and
    dialer from device configuration.

    Returns:
        (audio_environment, notification_filter, ringtone_resolver, dialer)
    """
    return (
        StaticAudioEnvironment(device.ring_volume, device.ringer_mode),
        ContactAllowlistFilter(device.allowed_contacts),
        FileRingtoneResolver(
            default_ringtone=device.default_ringtone,
            contact_ringtones=device.contact_ringtones,
            require_exists=require_ringtone_files,
        ),
        StaticDialer(device.dialer_supports_ringing),
    )
