"""
Naming helpers shared by the engine and the exporters.
"""

import re
import time
from datetime import datetime
from typing import Optional


def format_label(label: str) -> str:
    """
    Turn a flow label into a compact title-cased name.

    ``"user login"`` becomes ``"UserLogin"``; only the first character of each
    space-separated word is upper-cased, the rest is lower-cased.
    """
    return "".join(word[:1].upper() + word[1:] for word in label.lower().split(" "))


def hyphenate_string(value: str) -> str:
    """
    Make a string safe for use in file names and element ids.

    Slashes, whitespace, colons and dots become hyphens, the first comma is
    dropped, hyphen runs collapse and a trailing hyphen is removed.
    """
    value = re.sub(r"(/|\s|:|\.)", "-", value)
    value = value.replace(",", "", 1)
    value = re.sub(r"-{2,}", "-", value)
    return re.sub(r"-$", "", value)


def get_file_name(
    label: Optional[str] = None,
    extension: str = "json",
    now: Optional[datetime] = None,
) -> str:
    """
    Build the display/export id of a sample batch.

    JSON names carry the epoch milliseconds as well as the local date and time
    so that ids from consecutive repetitions differ.

    Args:
        label: Flow label, may be empty
        extension: File extension to append
        now: Timestamp to use instead of the current time

    Returns:
        Name such as ``"Login-1700000000000-11-14-2023-10-13-20-AM.json"``
    """
    now = now or datetime.now()
    epoch_ms = f"-{int(now.timestamp() * 1000)}" if extension == "json" else ""
    local_time = now.strftime("%m/%d/%Y, %I:%M:%S %p")
    name = f"{format_label(label) if label else ''}{epoch_ms}-{local_time}"
    return f"{hyphenate_string(name)}.{extension}"


def run_timestamp() -> str:
    """Timestamp used for per-run output directories."""
    return time.strftime("%Y%m%d_%H%M%S")
