# -*- coding: utf-8 -*-
"""
Tincture: Dynamic color for themed interfaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_dynamiccolor.py - Scheme-parametric colors and the tone
resolver that adjusts them for contrast.

A ColorSpec is a bundle of pure functions of a Scheme: hue, chroma and
tone, plus optional opacity, background and tone-delta constraint. The
resolver turns it into a concrete tone:

  1.  Contrast level moves the standard tone toward the min- or
      max-contrast tone.
  2.  Against a background, the realised contrast ratio is clamped into a
      window derived from the standard and extreme ratios, and the tone is
      re-solved to reach it.
  3.  On a root surface, tones in the T50-T59 band drop to T49 so that a
      light foreground can still reach 4.5:1.
  4.  A tone-delta constraint keeps the tone a fixed distance from
      another ColorSpec.

Backgrounds are resolved in the same mode as the color being resolved
(standard, min-contrast, max-contrast), so a background can itself move
toward its own contrast extreme before the foreground targets it.

Colors without backgrounds do not react to contrast beyond the
interpolation in step 1.
"""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Final, List, Optional, Set, Tuple

from tincture_colorengine import (
    HctColor,
    RATIO_30,
    RATIO_45,
    RATIO_70,
    RATIO_MAX,
    RATIO_MIN,
    clamp_tone,
    darker_unsafe,
    lighter_unsafe,
    ratio_of_tones,
)
from tincture_scheme import Scheme, TonalPalette

__all__ = [
    "ConfigurationError",
    "TonePolarity",
    "ToneDeltaConstraint",
    "ColorCache",
    "ColorSpec",
    "set_default_cache_size",
    "resolve_color",
    "resolve_tone",
    "calculate_dynamic_tone",
    "contrasting_tone",
    "ensure_tone_delta",
    "enable_light_foreground",
    "tone_prefers_light_foreground",
    "tone_allows_light_foreground",
    "tone_min_contrast_default",
    "tone_max_contrast_default",
]

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------
SchemeFn = Callable[[Scheme], float]
BackgroundFn = Callable[[Scheme], Optional["ColorSpec"]]
ConstraintFn = Callable[[Scheme], Optional["ToneDeltaConstraint"]]
ToneOfFn = Callable[["ColorSpec"], float]

# T49 is the lightest tone that always lets white reach 4.5:1.
_LIGHT_FOREGROUND_TONE: Final[float] = 49.0

_DEFAULT_CACHE_SIZE: int = 5

def set_default_cache_size(max_entries: int) -> None:
    """
    Sets the per-ColorSpec cache bound for ColorSpecs created afterwards.

    Args:
        max_entries: Number of schemes remembered before the cache is
            cleared in bulk. Must be >= 1.
    """
    global _DEFAULT_CACHE_SIZE
    if max_entries < 1:
        raise ValueError(f"max_entries must be >= 1, got {max_entries}")
    _DEFAULT_CACHE_SIZE = int(max_entries)


class ConfigurationError(ValueError):
    """A ColorSpec graph that cannot be resolved, e.g. a background cycle."""


# ---------------------------------------------------------------------------
# 1.  Tone-delta constraint
# ---------------------------------------------------------------------------
class TonePolarity(enum.Enum):
    """Which side of the keep-away color a constrained tone should land on."""
    DARKER = "darker"
    LIGHTER = "lighter"
    NO_PREFERENCE = "no_preference"


@dataclass(frozen=True, slots=True)
class ToneDeltaConstraint:
    """
    Requires a color's tone to differ from ``keep_away`` by ``delta``.

    Attributes
    ----------
    delta : float
        Minimum tone difference, >= 0.
    keep_away : ColorSpec
        The color to distance from.
    keep_away_polarity : TonePolarity
        DARKER places the result at ``keep_away + delta``, LIGHTER at
        ``keep_away - delta``; NO_PREFERENCE moves the smallest amount in
        the direction the standard tones suggest.
    """
    delta:              float
    keep_away:          ColorSpec
    keep_away_polarity: TonePolarity

    def __post_init__(self) -> None:
        if self.delta < 0.0:
            raise ValueError(f"ToneDeltaConstraint delta must be >= 0, got {self.delta}")


# ---------------------------------------------------------------------------
# 2.  Color cache
# ---------------------------------------------------------------------------
class ColorCache:
    """
    Bounded memo of resolved colors keyed by Scheme identity.

    Schemes with equal fields are still distinct keys. When a new scheme
    arrives while the cache is full, every entry is dropped first.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        if max_entries is None:
            max_entries = _DEFAULT_CACHE_SIZE
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self._max_entries = int(max_entries)
        self._entries: Dict[int, Tuple[Scheme, HctColor]] = {}
        self._lock = threading.RLock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get(self, scheme: Scheme) -> Optional[HctColor]:
        with self._lock:
            entry = self._entries.get(id(scheme))
            if entry is None or entry[0] is not scheme:
                return None
            return entry[1]

    def put(self, scheme: Scheme, color: HctColor) -> None:
        with self._lock:
            key = id(scheme)
            if key not in self._entries and len(self._entries) >= self._max_entries:
                self._entries.clear()
            self._entries[key] = (scheme, color)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, scheme: object) -> bool:
        with self._lock:
            entry = self._entries.get(id(scheme))
            return entry is not None and entry[0] is scheme


# ---------------------------------------------------------------------------
# 3.  ColorSpec
# ---------------------------------------------------------------------------
class ColorSpec:
    """
    A color role defined as functions of a Scheme.

    Prefer :meth:`from_palette` / :meth:`from_argb`; they wire the default
    min/max-contrast algorithms. The raw constructor is for design systems
    with their own opinions on accessibility.

    Parameters
    ----------
    hue, chroma, tone : Scheme -> float
        Standard hue, chroma and tone of the color.
    opacity : Scheme -> float, optional
        0..1, packed as the alpha byte by :meth:`get_argb`.
    background : Scheme -> ColorSpec | None, optional
        The color this one is drawn on. Enables contrast adjustment.
    tone_min_contrast, tone_max_contrast : Scheme -> float, optional
        Tone at contrast level -1 / +1. Default to ``tone``.
    tone_delta_constraint : Scheme -> ToneDeltaConstraint | None, optional
        Minimum tone distance from another ColorSpec.
    name : str
        Label used in error messages and ``repr``.
    """

    def __init__(
        self,
        hue: SchemeFn,
        chroma: SchemeFn,
        tone: SchemeFn,
        opacity: Optional[SchemeFn] = None,
        background: Optional[BackgroundFn] = None,
        tone_min_contrast: Optional[SchemeFn] = None,
        tone_max_contrast: Optional[SchemeFn] = None,
        tone_delta_constraint: Optional[ConstraintFn] = None,
        name: str = "",
    ) -> None:
        self.hue = hue
        self.chroma = chroma
        self.tone = tone
        self.opacity = opacity
        self.background = background
        self.tone_min_contrast = tone_min_contrast if tone_min_contrast is not None else tone
        self.tone_max_contrast = tone_max_contrast if tone_max_contrast is not None else tone
        self.tone_delta_constraint = tone_delta_constraint
        self.name = name
        self._cache = ColorCache()

    def __repr__(self) -> str:
        return f"ColorSpec({self.name or hex(id(self))})"

    # -- factories ----------------------------------------------------------
    @classmethod
    def from_palette(
        cls,
        palette: Callable[[Scheme], TonalPalette],
        tone: SchemeFn,
        background: Optional[BackgroundFn] = None,
        tone_delta_constraint: Optional[ConstraintFn] = None,
        name: str = "",
    ) -> ColorSpec:
        """
        A color whose hue and chroma come from a palette of the scheme.

        Chroma is the palette's *intended* chroma, so a color whose tone
        moves for contrast recovers colorfulness its standard tone could
        not hold.
        """
        return cls(
            hue=lambda s: palette(s).hue,
            chroma=lambda s: palette(s).chroma,
            tone=tone,
            background=background,
            tone_min_contrast=lambda s: tone_min_contrast_default(
                tone, background, s, tone_delta_constraint),
            tone_max_contrast=lambda s: tone_max_contrast_default(
                tone, background, s, tone_delta_constraint),
            tone_delta_constraint=tone_delta_constraint,
            name=name,
        )

    @classmethod
    def from_argb(
        cls,
        argb: int,
        tone: Optional[SchemeFn] = None,
        background: Optional[BackgroundFn] = None,
        tone_delta_constraint: Optional[ConstraintFn] = None,
        name: str = "",
    ) -> ColorSpec:
        """A color built from a packed color; tone defaults to its own."""
        palette = TonalPalette.from_argb(argb)
        if tone is None:
            fixed_tone = HctColor.from_argb(argb).tone
            tone = lambda s: fixed_tone
        return cls.from_palette(lambda s: palette, tone, background,
                                tone_delta_constraint, name)

    # -- resolution ---------------------------------------------------------
    def get_tone(self, scheme: Scheme) -> float:
        return resolve_tone(self, scheme)

    def get_hct(self, scheme: Scheme) -> HctColor:
        cached = self._cache.get(scheme)
        if cached is not None:
            return cached
        # Tone is solved first; hue and chroma come from the spec, so the
        # palette's intended chroma is reapplied at the adjusted tone.
        answer = HctColor.from_hct(self.hue(scheme), self.chroma(scheme),
                                   self.get_tone(scheme))
        self._cache.put(scheme, answer)
        return answer

    def get_argb(self, scheme: Scheme) -> int:
        argb = self.get_hct(scheme).to_argb()
        if self.opacity is None:
            return argb
        alpha = min(255, max(0, int(round(self.opacity(scheme) * 255.0))))
        return (argb & 0x00FFFFFF) | (alpha << 24)


# ---------------------------------------------------------------------------
# 4.  Graph checks
# ---------------------------------------------------------------------------
def _background_of(spec: ColorSpec, scheme: Scheme) -> Optional[ColorSpec]:
    if spec.background is None:
        return None
    return spec.background(scheme)


def _references(spec: ColorSpec, scheme: Scheme) -> List[ColorSpec]:
    refs = []
    bg = _background_of(spec, scheme)
    if bg is not None:
        refs.append(bg)
    if spec.tone_delta_constraint is not None:
        constraint = spec.tone_delta_constraint(scheme)
        if constraint is not None:
            refs.append(constraint.keep_away)
    return refs


def _check_acyclic(root: ColorSpec, scheme: Scheme) -> None:
    """Raises ConfigurationError if background/keep-away links loop."""
    done: Set[int] = set()
    on_path: Set[int] = set()
    trail: List[ColorSpec] = []

    def visit(spec: ColorSpec) -> None:
        key = id(spec)
        if key in done:
            return
        if key in on_path:
            start = next(i for i, s in enumerate(trail) if s is spec)
            loop = " -> ".join(repr(s) for s in trail[start:] + [spec])
            raise ConfigurationError(f"ColorSpec reference cycle: {loop}")
        on_path.add(key)
        trail.append(spec)
        for ref in _references(spec, scheme):
            visit(ref)
        trail.pop()
        on_path.discard(key)
        done.add(key)

    visit(root)


# ---------------------------------------------------------------------------
# 5.  Tone resolution
# ---------------------------------------------------------------------------
def _clamp(lo: float, hi: float, value: float) -> float:
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def resolve_tone(spec: ColorSpec, scheme: Scheme) -> float:
    """
    Tone in [0, 100] of ``spec`` under ``scheme``.

    The standard tone is interpolated toward the min- or max-contrast tone
    by ``|contrast_level|``. Without a background that is the answer.

    With a background, the contrast ratio against the resolved background
    is kept inside a window:

    * reducing contrast: [ratio at min contrast, standard ratio], the lower
      bound relaxing to 1.0 when the background is a root surface;
    * standard or increasing: between the standard and max-contrast
      ratios, relaxing to [1.0, 21.0] for a root surface.

    Raises:
        ConfigurationError: The background or keep-away references of
            ``spec`` form a cycle.
    """
    _check_acyclic(spec, scheme)

    standard = spec.tone(scheme)
    answer = standard
    level = scheme.contrast_level
    decreasing = level < 0.0
    if level != 0.0:
        end = spec.tone_min_contrast(scheme) if decreasing else spec.tone_max_contrast(scheme)
        answer = standard + (end - standard) * abs(level)

    bg = _background_of(spec, scheme)
    if bg is None:
        return clamp_tone(answer)

    bg_has_bg = _background_of(bg, scheme) is not None
    standard_ratio = ratio_of_tones(standard, bg.tone(scheme))
    if decreasing:
        if bg_has_bg:
            min_ratio = ratio_of_tones(spec.tone_min_contrast(scheme),
                                       bg.tone_min_contrast(scheme))
        else:
            min_ratio = RATIO_MIN
        max_ratio = standard_ratio
    elif bg_has_bg:
        max_contrast_ratio = ratio_of_tones(spec.tone_max_contrast(scheme),
                                            bg.tone_max_contrast(scheme))
        min_ratio = min(max_contrast_ratio, standard_ratio)
        max_ratio = max(max_contrast_ratio, standard_ratio)
    else:
        min_ratio = RATIO_MIN
        max_ratio = RATIO_MAX

    return calculate_dynamic_tone(
        scheme,
        spec.tone,
        lambda c: c.get_tone(scheme),
        lambda _std_ratio, _bg_tone: answer,
        spec.background,
        spec.tone_delta_constraint,
        lambda _std_ratio: min_ratio,
        lambda _std_ratio: max_ratio,
    )


def resolve_color(spec: ColorSpec, scheme: Scheme) -> int:
    """Packed 0xAARRGGBB color of ``spec`` under ``scheme``."""
    return spec.get_argb(scheme)


def calculate_dynamic_tone(
    scheme: Scheme,
    tone_standard: SchemeFn,
    tone_to_judge: ToneOfFn,
    desired_tone: Callable[[float, float], float],
    background: Optional[BackgroundFn],
    tone_delta_constraint: Optional[ConstraintFn],
    min_ratio: Optional[Callable[[float], float]] = None,
    max_ratio: Optional[Callable[[float], float]] = None,
) -> float:
    """
    Shared solver behind the standard, min- and max-contrast tones.

    Args:
        scheme: The scheme being resolved.
        tone_standard: Standard tone of the color.
        tone_to_judge: Resolves another ColorSpec (background, keep-away)
            in the mode being computed.
        desired_tone: ``(standard_ratio, background_tone) -> tone`` the
            caller would like before the ratio window is applied.
        background: Background function of the color, if any.
        tone_delta_constraint: Constraint function of the color, if any.
        min_ratio, max_ratio: ``standard_ratio -> ratio`` bounds of the
            window. Default to 1.0 and 21.0.

    Returns:
        Tone in [0, 100]. The standard tone unchanged when there is no
        background.
    """
    tone_std = tone_standard(scheme)
    bg = background(scheme) if background is not None else None
    if bg is None:
        return clamp_tone(tone_std)

    std_ratio = ratio_of_tones(tone_std, bg.tone(scheme))
    bg_tone = tone_to_judge(bg)
    my_desired_tone = desired_tone(std_ratio, bg_tone)
    current_ratio = ratio_of_tones(bg_tone, my_desired_tone)
    min_realized = min_ratio(std_ratio) if min_ratio is not None else RATIO_MIN
    max_realized = max_ratio(std_ratio) if max_ratio is not None else RATIO_MAX
    desired_ratio = _clamp(min_realized, max_realized, current_ratio)
    if desired_ratio == current_ratio:
        answer = my_desired_tone
    else:
        answer = contrasting_tone(bg_tone, desired_ratio)

    if _background_of(bg, scheme) is None:
        answer = enable_light_foreground(answer)

    constraint = tone_delta_constraint(scheme) if tone_delta_constraint is not None else None
    answer = ensure_tone_delta(answer, tone_std, scheme, constraint, tone_to_judge)
    return clamp_tone(answer)


def ensure_tone_delta(
    tone: float,
    tone_standard: float,
    scheme: Scheme,
    constraint: Optional[ToneDeltaConstraint],
    tone_of: ToneOfFn,
) -> float:
    """
    Moves ``tone`` until it is ``constraint.delta`` away from the
    keep-away color, resolved through ``tone_of``.

    DARKER yields ``keep_away + delta`` and LIGHTER ``keep_away - delta``,
    both clamped. Rendered themes depend on these exact results.
    """
    if constraint is None:
        return tone

    required_delta = constraint.delta
    keep_away_tone = tone_of(constraint.keep_away)
    delta = abs(tone - keep_away_tone)
    if delta >= required_delta:
        return tone

    polarity = constraint.keep_away_polarity
    if polarity is TonePolarity.DARKER:
        return clamp_tone(keep_away_tone + required_delta)
    if polarity is TonePolarity.LIGHTER:
        return clamp_tone(keep_away_tone - required_delta)

    keep_away_tone_standard = constraint.keep_away.tone(scheme)
    prefer_lighten = tone_standard > keep_away_tone_standard
    alter_amount = abs(delta - required_delta)
    if prefer_lighten:
        lighten = tone + alter_amount <= 100.0
    else:
        lighten = tone < alter_amount
    return tone + alter_amount if lighten else tone - alter_amount


def contrasting_tone(bg_tone: float, ratio: float) -> float:
    """
    Foreground tone reaching ``ratio`` against ``bg_tone``, or as close
    to it as [0, 100] allows.
    """
    lighter_tone = lighter_unsafe(bg_tone, ratio)
    darker_tone = darker_unsafe(bg_tone, ratio)
    lighter_ratio = ratio_of_tones(lighter_tone, bg_tone)
    darker_ratio = ratio_of_tones(darker_tone, bg_tone)

    if tone_prefers_light_foreground(bg_tone):
        # When the requested ratio is near the ceiling neither side may
        # reach it; stay light unless dark is clearly better.
        negligible_difference = (
            abs(lighter_ratio - darker_ratio) < 0.1
            and lighter_ratio < ratio
            and darker_ratio < ratio
        )
        if lighter_ratio >= ratio or lighter_ratio >= darker_ratio or negligible_difference:
            return lighter_tone
        return darker_tone

    if darker_ratio >= ratio or darker_ratio >= lighter_ratio:
        return darker_tone
    return lighter_tone


def enable_light_foreground(tone: float) -> float:
    """Drops T50-T59 to T49 so white can reach 4.5:1 on it."""
    if tone_prefers_light_foreground(tone) and not tone_allows_light_foreground(tone):
        return _LIGHT_FOREGROUND_TONE
    return tone


def tone_prefers_light_foreground(tone: float) -> bool:
    # T60 is excluded: a T60 surface keeps its tone.
    return round(tone) < 60


def tone_allows_light_foreground(tone: float) -> bool:
    return round(tone) <= 49


# ---------------------------------------------------------------------------
# 6.  Default contrast extremes
# ---------------------------------------------------------------------------
def _background_has_background(background: Optional[BackgroundFn], scheme: Scheme) -> bool:
    if background is None:
        return False
    bg = background(scheme)
    return bg is not None and _background_of(bg, scheme) is not None


def tone_min_contrast_default(
    tone: SchemeFn,
    background: Optional[BackgroundFn],
    scheme: Scheme,
    tone_delta_constraint: Optional[ConstraintFn],
) -> float:
    """
    Tone at minimum contrast.

    Standard ratio >= 7.0 relaxes to 4.5, >= 3.0 relaxes to 3.0. Below
    that the standard ratio is kept, re-solved against the background's
    own minimum-contrast tone when that background sits on another.
    """
    def desired(std_ratio: float, bg_tone: float) -> float:
        if std_ratio >= RATIO_70:
            return contrasting_tone(bg_tone, RATIO_45)
        if std_ratio >= RATIO_30:
            return contrasting_tone(bg_tone, RATIO_30)
        if _background_has_background(background, scheme):
            return contrasting_tone(bg_tone, std_ratio)
        return tone(scheme)

    return calculate_dynamic_tone(
        scheme,
        tone,
        lambda c: c.tone_min_contrast(scheme),
        desired,
        background,
        tone_delta_constraint,
        None,
        lambda std_ratio: std_ratio,
    )


def tone_max_contrast_default(
    tone: SchemeFn,
    background: Optional[BackgroundFn],
    scheme: Scheme,
    tone_delta_constraint: Optional[ConstraintFn],
) -> float:
    """
    Tone at maximum contrast.

    Reaches 7.0 when the background sits on another surface (buttons,
    chips). Directly on a root surface the standard ratio is kept if it
    already exceeds 7.0, so text does not lose contrast it had.
    """
    def desired(std_ratio: float, bg_tone: float) -> float:
        if _background_has_background(background, scheme):
            return contrasting_tone(bg_tone, RATIO_70)
        return contrasting_tone(bg_tone, max(RATIO_70, std_ratio))

    return calculate_dynamic_tone(
        scheme,
        tone,
        lambda c: c.tone_max_contrast(scheme),
        desired,
        background,
        tone_delta_constraint,
    )
