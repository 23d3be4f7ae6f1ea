"""Process utilities"""
import os

import setproctitle

from lanscanner.lanscanner_logger.lanscanner_logger import get_logger

logger = get_logger(__name__)


def set_process_name(shortname: str = "", fullname: str = "") -> None:
    """Sets the process name so it can be viewed under top.
       Short name is limited to 15 chars."""
    shortname = shortname[:15]
    logger.debug("Setting process name for pid %s to: short: %s long %s",
                 os.getpid(), shortname, fullname)
    if len(fullname) > 2:
        setproctitle.setproctitle(f"LAN Scanner ({os.getpid()}): {fullname}")
    if len(shortname) > 0:
        try:
            with open('/proc/self/comm', 'w', encoding="ascii") as f:
                f.write(shortname)
        except OSError:
            pass
