# -*- coding: utf-8 -*-

from typing import List, NamedTuple

DEFAULT_SCRIPT = """\
# Welcome to the date/time sandbox!
# `clock` is the only thing in scope besides the basic builtins.

# Basic usage
now = clock.now()
print("Current time:", now.format("%Y-%m-%d %H:%M:%S"))

# Time zone conversion
tokyo = clock.utc().tz("Asia/Tokyo")
print("Tokyo time:", tokyo.format("%Y-%m-%d %H:%M:%S %Z"))

# Date manipulation
tomorrow = now.add(1, "day")
print("Tomorrow:", tomorrow.format("%A, %B %d %Y"))

# Return the final result to display
return {
    "current": now.format("%c"),
    "tokyo": tokyo.format("%c"),
    "tomorrow": tomorrow.format("%c"),
}
"""


class Example(NamedTuple):
    title: str
    code: str


EXAMPLES: List[Example] = [
    Example(
        "Basic Usage",
        """\
now = clock.now()
print("ISO:", now.iso())
print("Unix:", now.unix())
return now.format("%A, %B %d, %Y %I:%M %p")
""",
    ),
    Example(
        "Timezone Conversion",
        """\
utc = clock.utc()
zones = ["America/New_York", "Europe/London", "Asia/Tokyo"]
return [
    {"timezone": z, "time": utc.tz(z).format("%Y-%m-%d %H:%M:%S %Z")}
    for z in zones
]
""",
    ),
    Example(
        "Date Math",
        """\
base = clock.parse("2024-01-01")
return {
    "original": base.format("%Y-%m-%d"),
    "plus30Days": base.add(30, "days").format("%Y-%m-%d"),
    "startOfMonth": base.start_of("month").format("%Y-%m-%d"),
}
""",
    ),
]
