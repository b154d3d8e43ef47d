# -*- coding: utf-8 -*-
"""
Tincture: Dynamic color for themed interfaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_scheme.py - Tonal palettes and the Scheme snapshot that
dynamic colors are resolved against.

A Scheme is built once per theming request and compared by identity:
two schemes with equal fields are still different keys for every cache
that sees them.
"""

from __future__ import annotations

import functools
import warnings
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final, Mapping, Tuple

from tincture_colorengine import HctColor, sanitize_degrees

__all__ = [
    "ROLES",
    "TonalPalette",
    "Scheme",
    "UnknownRoleError",
]

# Roles every scheme factory in this module fills in.
ROLES: Final[Tuple[str, ...]] = (
    "primary",
    "secondary",
    "tertiary",
    "neutral",
    "neutral_variant",
)


class UnknownRoleError(KeyError):
    """Raised when a Scheme has no palette for the requested role."""


# ---------------------------------------------------------------------------
# TonalPalette
# ---------------------------------------------------------------------------
@functools.lru_cache(maxsize=512)
def _palette_color(hue: float, chroma: float, tone: float) -> HctColor:
    return HctColor.from_hct(hue, chroma, tone)


@dataclass(frozen=True, slots=True)
class TonalPalette:
    """All tones of a single hue at one intended chroma."""
    hue:    float
    chroma: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "hue", sanitize_degrees(float(self.hue)))
        object.__setattr__(self, "chroma", max(0.0, float(self.chroma)))

    @classmethod
    def from_color(cls, color: HctColor) -> TonalPalette:
        return cls(color.hue, color.chroma)

    @classmethod
    def from_argb(cls, argb: int) -> TonalPalette:
        return cls.from_color(HctColor.from_argb(argb))

    def tone(self, tone: float) -> HctColor:
        """The palette color at ``tone``; chroma is capped to what fits."""
        return _palette_color(self.hue, self.chroma, float(tone))

    def argb(self, tone: float) -> int:
        return self.tone(tone).to_argb()


# ---------------------------------------------------------------------------
# Scheme
# ---------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class Scheme:
    """
    Immutable theming snapshot.

    Attributes
    ----------
    source_color : HctColor
        The color the scheme was derived from.
    is_dark : bool
        Dark theme when True.
    contrast_level : float
        -1.0 (reduced) .. 0.0 (standard) .. 1.0 (maximum). Values outside
        that range are clamped with a RuntimeWarning.
    palettes : Mapping[str, TonalPalette]
        Role name to palette, exposed read-only.
    """
    source_color:   HctColor
    is_dark:        bool
    contrast_level: float = 0.0
    palettes:       Mapping[str, TonalPalette] = field(default_factory=dict)

    def __post_init__(self) -> None:
        level = float(self.contrast_level)
        if not -1.0 <= level <= 1.0:
            warnings.warn(
                f"Scheme(contrast_level={level}) is outside [-1, 1]; "
                "clamping.",
                RuntimeWarning,
                stacklevel=3,
            )
            level = min(1.0, max(-1.0, level))
        object.__setattr__(self, "contrast_level", level)
        object.__setattr__(self, "palettes", MappingProxyType(dict(self.palettes)))

    # -- factories ----------------------------------------------------------
    @classmethod
    def monochrome(
        cls,
        source_color: HctColor,
        is_dark: bool,
        contrast_level: float = 0.0,
    ) -> Scheme:
        """Every role is the source hue at chroma 0."""
        gray = TonalPalette(source_color.hue, 0.0)
        return cls(
            source_color=source_color,
            is_dark=is_dark,
            contrast_level=contrast_level,
            palettes={role: gray for role in ROLES},
        )

    # -- palette access -----------------------------------------------------
    def palette(self, role: str) -> TonalPalette:
        try:
            return self.palettes[role]
        except KeyError:
            raise UnknownRoleError(
                f"Scheme has no '{role}' palette "
                f"(available: {', '.join(sorted(self.palettes)) or 'none'})"
            ) from None

    @property
    def primary_palette(self) -> TonalPalette:
        return self.palette("primary")

    @property
    def secondary_palette(self) -> TonalPalette:
        return self.palette("secondary")

    @property
    def tertiary_palette(self) -> TonalPalette:
        return self.palette("tertiary")

    @property
    def neutral_palette(self) -> TonalPalette:
        return self.palette("neutral")

    @property
    def neutral_variant_palette(self) -> TonalPalette:
        return self.palette("neutral_variant")
