# ABOUTME: Static lookup tables for WMO weather codes and the Beaufort wind scale.
# ABOUTME: Tables are built once at import and exposed through total lookup functions.

from types import MappingProxyType

DEFAULT_CONDITION = "多云"
DEFAULT_ICON = "cloud"

CONDITIONS = frozenset(
    {
        "晴朗",
        "多云",
        "阴天",
        "雾",
        "小雨",
        "中雨",
        "大雨",
        "雨夹雪",
        "小雪",
        "中雪",
        "大雪",
        "阵雨",
        "暴雨",
        "阵雪",
        "雷雨",
        "雷雨伴冰雹",
    }
)

ICONS = frozenset({"sun", "cloud", "rain", "drizzle"})

_CONDITION_BY_CODE = MappingProxyType(
    {
        0: "晴朗",
        1: "晴朗",
        2: "多云",
        3: "阴天",
        45: "雾",
        48: "雾",
        51: "小雨",
        53: "小雨",
        55: "小雨",
        56: "雨夹雪",
        57: "雨夹雪",
        61: "小雨",
        63: "中雨",
        65: "大雨",
        66: "雨夹雪",
        67: "雨夹雪",
        71: "小雪",
        73: "中雪",
        75: "大雪",
        77: "小雪",
        80: "阵雨",
        81: "阵雨",
        82: "暴雨",
        85: "阵雪",
        86: "阵雪",
        95: "雷雨",
        96: "雷雨伴冰雹",
        99: "雷雨伴冰雹",
    }
)

_RAIN_CODES = (51, 53, 55, 56, 57, 61, 63, 65, 66, 67, 80, 81, 82, 95, 96, 99)

_ICON_BY_CODE = MappingProxyType(
    {
        0: "sun",
        1: "sun",
        **{code: "cloud" for code in (2, 3, 45, 48, 71, 73, 75, 77, 85, 86)},
        **{code: "rain" for code in _RAIN_CODES},
    }
)

# Upper bounds (exclusive, m/s) for Beaufort levels 0..11; anything above is 12.
BEAUFORT_THRESHOLDS = (0.3, 1.6, 3.4, 5.5, 8.0, 10.8, 13.9, 17.2, 20.8, 24.5, 28.5, 32.7)


def code_to_condition(code: int | None) -> str:
    """Map a WMO weather code to its Chinese condition label, defaulting to 多云."""
    return _CONDITION_BY_CODE.get(code, DEFAULT_CONDITION)


def code_to_icon(code: int | None) -> str:
    """Map a WMO weather code to an icon key, defaulting to cloud."""
    return _ICON_BY_CODE.get(code, DEFAULT_ICON)


def beaufort(speed_ms: float) -> int:
    """Convert a wind speed in meters per second to a Beaufort level (0-12)."""
    for level, upper in enumerate(BEAUFORT_THRESHOLDS):
        if speed_ms < upper:
            return level
    return len(BEAUFORT_THRESHOLDS)
