"""Comparison parameter presets and value parsers."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Mapping, Optional, Tuple

RGB8 = Tuple[int, int, int]

DIFF_MODES = ("highlight", "error")


@dataclass(frozen=True)
class PixelAllowance:
    """Number of mismatched pixels tolerated before the verdict flips.

    ``value`` is a pixel count when ``is_ratio`` is false, otherwise a fraction
    of the image area in ``[0, 1]``.
    """

    value: float = 0
    is_ratio: bool = False

    def resolve(self, width: int, height: int) -> int:
        if self.is_ratio:
            return int(self.value * width * height)
        return int(self.value)

    def __str__(self) -> str:
        if self.is_ratio:
            return f"{self.value * 100:g}%"
        return str(int(self.value))


@dataclass(frozen=True)
class DiffStyle:
    """How the difference image is rendered."""

    mode: str = "highlight"
    highlight: RGB8 = (255, 0, 0)
    dim: float = 0.3

    def __post_init__(self) -> None:
        if self.mode not in DIFF_MODES:
            raise ValueError(f"Unknown diff mode '{self.mode}'. Available: {', '.join(DIFF_MODES)}")
        if not 0.0 <= self.dim <= 1.0:
            raise ValueError("dim must be between 0 and 1")
        if len(self.highlight) != 3 or any(not 0 <= channel <= 255 for channel in self.highlight):
            raise ValueError("highlight channels must be between 0 and 255")

    def with_overrides(
        self,
        *,
        mode: Optional[str] = None,
        highlight: Optional[RGB8] = None,
        dim: Optional[float] = None,
    ) -> "DiffStyle":
        return DiffStyle(
            mode=mode or self.mode,
            highlight=highlight or self.highlight,
            dim=self.dim if dim is None else dim,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "mode": self.mode,
            "highlight": list(self.highlight),
            "dim": self.dim,
        }


@dataclass(frozen=True)
class CompareParams:
    """Parameters driving the per-pixel classification and the verdict."""

    threshold: float = 0.0
    allowance: PixelAllowance = PixelAllowance()

    def to_dict(self) -> Dict[str, object]:
        return {
            "threshold": self.threshold,
            "allowance": str(self.allowance),
        }

    def copy(self, **overrides: object) -> "CompareParams":
        return replace(self, **overrides)


@dataclass(frozen=True)
class Preset:
    """Bundle of comparison parameters, diff styling and metadata."""

    name: str
    description: str
    params: CompareParams
    style: DiffStyle = DiffStyle()

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "params": self.params.to_dict(),
            "style": self.style.to_dict(),
        }


PRESETS: Mapping[str, Preset] = {
    "exact": Preset(
        name="exact",
        description="Every channel of every pixel must be identical.",
        params=CompareParams(threshold=0.0),
    ),
    "tolerant": Preset(
        name="tolerant",
        description="Absorbs small rounding differences between encoders.",
        params=CompareParams(threshold=0.02),
    ),
    "loose": Preset(
        name="loose",
        description="Tolerates noisy renders and a few stray pixels.",
        params=CompareParams(
            threshold=0.05,
            allowance=PixelAllowance(0.001, is_ratio=True),
        ),
    ),
}

DEFAULT_PRESET = os.getenv("IMGCMP_PRESET", "exact")


def get_preset(name: str) -> Preset:
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
    return PRESETS[key]


def iter_presets() -> Iterable[Preset]:
    return PRESETS.values()


def parse_threshold(value: str) -> float:
    try:
        threshold = float(value)
    except ValueError as exc:
        raise ValueError(f"Threshold '{value}' is not a number") from exc
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"Threshold {threshold} must be between 0 and 1")
    return threshold


def parse_allowance(value: str) -> PixelAllowance:
    """Parse ``"12"`` (pixels) or ``"0.5%"`` (share of the image area)."""

    value = value.strip()
    if value.endswith("%"):
        try:
            percent = float(value[:-1])
        except ValueError as exc:
            raise ValueError(f"Allowance '{value}' is not a valid percentage") from exc
        if not 0.0 <= percent <= 100.0:
            raise ValueError(f"Allowance '{value}' must be between 0% and 100%")
        return PixelAllowance(percent / 100.0, is_ratio=True)
    try:
        count = int(value)
    except ValueError as exc:
        raise ValueError(f"Allowance '{value}' must be a pixel count or a percentage") from exc
    if count < 0:
        raise ValueError(f"Allowance '{value}' cannot be negative")
    return PixelAllowance(count)


def parse_color(value: Optional[str]) -> Optional[RGB8]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith("#"):
        hex_value = value[1:]
        if len(hex_value) != 6:
            raise ValueError("Hex colors must be #RRGGBB")
        try:
            return tuple(int(hex_value[i : i + 2], 16) for i in range(0, 6, 2))  # type: ignore[return-value]
        except ValueError as exc:
            raise ValueError(f"Invalid hex color '{value}'") from exc
    parts = value.replace(";", ",").split(",")
    if len(parts) != 3:
        raise ValueError("RGB colors must provide three comma separated numbers")
    try:
        rgb = tuple(int(p.strip()) for p in parts)
    except ValueError as exc:
        raise ValueError(f"Invalid RGB color '{value}'") from exc
    if any(channel < 0 or channel > 255 for channel in rgb):
        raise ValueError("RGB channels must be between 0 and 255")
    return rgb  # type: ignore[return-value]
