"""Constant variables"""

import os
import sys


def _get_base_paths() -> tuple[str, str]:
    """Get base paths for config and logs based on OS and user privileges.

    Returns:
        tuple: (config_dir, logs_dir)
    """
    is_windows = sys.platform == 'win32'
    is_root = os.geteuid() == 0 if hasattr(os, 'geteuid') else False

    if is_windows:
        appdata = os.getenv('APPDATA', os.path.expanduser('~\\AppData\\Roaming'))
        config_dir = os.path.join(appdata, 'lanscanner')
        logs_dir = os.path.join(config_dir, 'logs')
    elif is_root:
        config_dir = '/etc/lanscanner'
        logs_dir = '/var/log/lanscanner'
    else:
        config_dir = os.path.expanduser('~/.config/lanscanner')
        logs_dir = os.path.join(config_dir, 'logs')

    return config_dir, logs_dir


_CONFIG_DIR, _LOGS_DIR = _get_base_paths()

# ##########
# User Configurable Options
# ##########

API_PORT: int = int(os.getenv("API_PORT", "8080"))
"""This is the port FastAPI runs on"""
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
"""This is the host FastAPI binds to"""
LOGS_DIR: str = os.getenv("LOGS_DIR", _LOGS_DIR)
"""This is the directory logs are stored in"""
CONSOLE_LOG_LEVEL: str = os.getenv("CONSOLE_LOG_LEVEL", "INFO")
"""Log level for stdout
   Valid values are "DEBUG", "INFO", "WARNING", "ERROR"."""
LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "False").lower() == "true"
"""Determines rather logs are written to files"""
LOG_ENTRIES_TO_RETAIN: int = int(os.getenv("LOG_ENTRIES_TO_RETAIN", "2"))
"""Number of previous runs to retain logs for"""
MDNS_RESOLVE_TIMEOUT_MS: int = int(os.getenv("MDNS_RESOLVE_TIMEOUT_MS", "3000"))
"""How long to wait for an advertised service to resolve, in milliseconds"""

# ##########
# Internal Options
# ##########

BLUESOUND_SERVICE_TYPE: str = "_musc._tcp.local."
"""Bluesound/BluOS players"""
VOLUMIO_SERVICE_TYPE: str = "_http._tcp.local."
"""Generic web services, Volumio players advertise here"""
SPOTIFY_CONNECT_SERVICE_TYPE: str = "_spotify-connect._tcp.local."
"""Spotify Connect endpoints"""
QOBUZ_CONNECT_SERVICE_TYPE: str = "_qobuz-connect._tcp.local."
"""Qobuz Connect endpoints"""
SERVICES_TO_BROWSE: tuple[str, ...] = (
    BLUESOUND_SERVICE_TYPE,
    VOLUMIO_SERVICE_TYPE,
    SPOTIFY_CONNECT_SERVICE_TYPE,
    QOBUZ_CONNECT_SERVICE_TYPE,
)
"""Service types browsed during every scan, in browse order"""
VOLUMIO_NAME_KEYWORD: str = "volumio"
"""Matched case-insensitively against _http._tcp full names"""
SCAN_DURATION_SECS: int = 30
"""Number of countdown ticks before a scan stops itself"""
SCAN_TICK_INTERVAL: float = 1.0
"""Seconds between countdown ticks"""

EVENT_NEW_DEVICE: str = "new-device"
"""Emitted with the full device snapshot after every admitted resolution"""
EVENT_SCAN_TICK: str = "scan-tick"
"""Emitted once per countdown tick with the seconds left"""
EVENT_SCAN_STOPPED: str = "scan-stopped"
"""Emitted once the discovery daemon has shut down"""
