"""Storage sensors: usage of mounted block-device filesystems.

Slow to collect on machines with many or sleeping drives, so the poller
only calls this on its slow refresh interval.
"""

import logging
import os
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

_GIB = 1024 ** 3


def mount_name(mount_point: str) -> str:
    """'/' -> 'root', '/mnt/data' -> 'mnt_data'."""
    name = mount_point.strip("/").replace("/", "_").replace("-", "_")
    return name.lower() or "root"


def block_mounts(mounts_file: str = "/proc/mounts") -> List[str]:
    """Mount points of filesystems backed by a /dev block device."""
    mounts = []
    with open(mounts_file) as f:
        for line in f:
            parts = line.split()
            if len(parts) < 2 or not parts[0].startswith("/dev/"):
                continue
            # /proc/mounts escapes spaces as \040
            mount_point = parts[1].replace("\\040", " ")
            if mount_point not in mounts:
                mounts.append(mount_point)
    return mounts


def storage_sensors(
    mounts_file: str = "/proc/mounts", mounts: Optional[Iterable[str]] = None
) -> Dict[str, str]:
    """Usage, used and total GiB for each mount point."""
    if mounts is None:
        mounts = block_mounts(mounts_file)

    data = {}
    for mount_point in mounts:
        try:
            st = os.statvfs(mount_point)
        except OSError as exc:
            logger.debug("Skipping mount %s: %s", mount_point, exc)
            continue
        total = st.f_blocks * st.f_frsize
        if not total:
            continue
        used = total - st.f_bavail * st.f_frsize
        name = mount_name(mount_point)
        data[f"storage_{name}_usage"] = f"{used / total * 100.0:.1f}"
        data[f"storage_{name}_used"] = f"{used / _GIB:.1f}"
        data[f"storage_{name}_total"] = f"{total / _GIB:.1f}"
    return data
