"""
Player sub-services.

Each class wraps one UPnP service on a Sonos player and only formats
parameters; calls go through the ActionInvoker handed in at construction.

  - ``AlarmClock``         – alarms and time zone
  - ``DeviceProperties``   – status LED, zone name/info
  - ``GroupManagement``    – add/remove group members
  - ``MusicServices``      – available streaming services
  - ``QPlay``              – QPlay authentication
  - ``SystemProperties``   – stored system strings
  - ``ZoneGroupTopology``  – group topology
"""

from .alarm_clock import AlarmClock
from .base import Service
from .device_properties import DeviceProperties
from .group_management import GroupManagement
from .music_services import MusicServices
from .qplay import QPlay
from .system_properties import SystemProperties
from .zone_group_topology import ZoneGroupTopology

__all__ = [
    "Service",
    "AlarmClock",
    "DeviceProperties",
    "GroupManagement",
    "MusicServices",
    "QPlay",
    "SystemProperties",
    "ZoneGroupTopology",
]
