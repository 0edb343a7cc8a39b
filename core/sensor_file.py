"""Atomic sensor value file writer.

Another process (the panel's file source, or anything else) may read the
sensor file at any time, so it is never written in place. Values go to a
uniquely named temp file on the same filesystem, which is then renamed
over the destination.
"""

import logging
import os
import tempfile
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Readable by everyone
SENSOR_FILE_MODE = 0o664


def write_sensor_file(out_file: str, values: Mapping[str, str], temp_dir: Optional[str] = None):
    """Write one `label: value` line per entry to out_file atomically.

    temp_dir must be on the same filesystem as out_file. It defaults to
    the destination's directory.
    """
    if os.path.isdir(out_file):
        raise IsADirectoryError(f"Output cannot be a directory: {out_file}")

    if temp_dir:
        os.makedirs(temp_dir, exist_ok=True)
    else:
        temp_dir = os.path.dirname(os.path.abspath(out_file))

    logger.debug("Creating a new named temp file in %s", temp_dir)
    with tempfile.NamedTemporaryFile(
        "w", dir=temp_dir, prefix=".sensors-", suffix=".tmp", delete=False, encoding="utf-8"
    ) as tmp:
        try:
            os.chmod(tmp.name, SENSOR_FILE_MODE)
            for label, value in values.items():
                tmp.write(f"{label}: {value}\n")
            tmp.flush()
        except BaseException:
            tmp.close()
            os.unlink(tmp.name)
            raise

    logger.debug("Renaming temp file to %s", out_file)
    try:
        os.replace(tmp.name, out_file)
    except OSError:
        os.unlink(tmp.name)
        raise
