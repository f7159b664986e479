"""Named filter presets translated into Lavalink v4 ``filters`` objects."""

from __future__ import annotations

import copy
from typing import Any, Final

BASS_BANDS: Final[tuple[int, ...]] = (0, 1, 2, 3)
MIN_GAIN: Final[float] = -0.25
MAX_GAIN: Final[float] = 1.0

# name -> (min value, max value)
FILTER_RANGES: Final[dict[str, tuple[float, float]]] = {
    "bass": (-5.0, 20.0),
    "speed": (0.25, 3.0),
    "pitch": (0.25, 3.0),
    "nightcore": (0.5, 2.0),
    "rotation": (0.0, 5.0),
    "tremolo": (0.0, 1.0),
    "karaoke": (0.0, 1.0),
}

FILTER_NAMES: Final[tuple[str, ...]] = tuple(FILTER_RANGES)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def validate_filter_value(name: str, value: float) -> bool:
    bounds = FILTER_RANGES.get(name)
    if bounds is None:
        return False
    return bounds[0] <= value <= bounds[1]


def apply_filter(filters: dict[str, Any], name: str, value: float) -> dict[str, Any]:
    """Return a copy of ``filters`` with the named preset applied at ``value``.

    Presets that share a Lavalink filter (``speed`` and ``pitch`` both live
    under ``timescale``) are merged rather than overwritten.
    """
    if name not in FILTER_RANGES:
        raise ValueError(f"Unknown filter: {name}")

    result = copy.deepcopy(filters)

    match name:
        case "bass":
            gain = _clamp(value / 20, MIN_GAIN, MAX_GAIN)
            bands = {band["band"]: band for band in result.get("equalizer", [])}
            for band in BASS_BANDS:
                bands[band] = {"band": band, "gain": gain}
            result["equalizer"] = [bands[b] for b in sorted(bands)]
        case "speed":
            result.setdefault("timescale", {})["speed"] = value
        case "pitch":
            result.setdefault("timescale", {})["pitch"] = value
        case "nightcore":
            result["timescale"] = {"speed": value, "pitch": value, "rate": 1.0}
        case "rotation":
            result["rotation"] = {"rotationHz": value}
        case "tremolo":
            result["tremolo"] = {"frequency": 2.0, "depth": value}
        case "karaoke":
            result["karaoke"] = {
                "level": value,
                "monoLevel": value,
                "filterBand": 220.0,
                "filterWidth": 100.0,
            }

    return result


def describe_filters(filters: dict[str, Any]) -> str:
    if not filters:
        return "none"
    return ", ".join(sorted(filters))
