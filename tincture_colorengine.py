# -*- coding: utf-8 -*-
"""
Tincture: Dynamic color for themed interfaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Space Service
===================
Hue / chroma / tone colors and the contrast arithmetic built on them.

The perceptual model is CIE LCh(ab) under D65:
    * tone   == CIE L* (0 black .. 100 white)
    * chroma == sqrt(a*^2 + b*^2)
    * hue    == atan2(b*, a*) in degrees, sanitized to [0, 360)

Colors are always renderable. Requesting a chroma that does not fit in
sRGB at the requested tone and hue yields the most colorful in-gamut
color with the *same* tone and hue (chroma reduction by bisection). Tone
is therefore exact, which is what the contrast arithmetic relies on.

Batch conversions operate on (N, 3) arrays and compile to machine code
with Numba, scalar contrast helpers are plain Python.

References:
    - CIE 15:2004 "Colorimetry"
    - IEC 61966-2-1:1999 (sRGB Standard)
    - W3C WCAG 2.1, Success Criterion 1.4.3 (contrast ratio)
"""

import functools
import math
from dataclasses import dataclass
from typing import Any, Callable, Final, List, Sequence, Tuple, TypeAlias

import numpy as np
import numpy.typing as npt
from numba import njit

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",

    # --- Constants ---
    "REF_WHITE_D65",
    "LAB_EPSILON",
    "LAB_KAPPA",
    "DEG2RAD",
    "RAD2DEG",
    "RATIO_MIN",
    "RATIO_30",
    "RATIO_45",
    "RATIO_70",
    "RATIO_MAX",

    # --- Configuration ---
    "set_strict_ieee",

    # --- Matrices ---
    "M_XYZ_TO_SRGB_T",
    "M_SRGB_TO_XYZ_T",

    # --- Decorators ---
    "handle_shapes",

    # --- Functions ---
    "sanitize_degrees",
    "clamp_tone",
    "y_from_lstar",
    "lstar_from_y",
    "ratio_of_ys",
    "ratio_of_tones",
    "lighter",
    "darker",
    "lighter_unsafe",
    "darker_unsafe",
    "argb_from_rgb",
    "rgb_from_argb",

    # --- Classes ---
    "ColorSpaceEngine",
    "HctColor",
]

# --- Type Aliases ---
ArrayFloat: TypeAlias = npt.NDArray[np.floating]

# --- Constants & Pre-Transposed Matrices ---

# D65 reference white (Y=1.0)
REF_WHITE_D65: Final[ArrayFloat] = np.array([0.95047, 1.00000, 1.08883], dtype=np.float64)

# sRGB Matrices (IEC 61966-2-1), pre-transposed for row-vector products.
_M_XYZ_TO_SRGB_BASE = np.array([
    [ 3.2404542, -1.5371385, -0.4985314],
    [-0.9692660,  1.8760108,  0.0415560],
    [ 0.0556434, -0.2040259,  1.0572252]
], dtype=np.float64)
M_XYZ_TO_SRGB_T: Final[ArrayFloat] = _M_XYZ_TO_SRGB_BASE.T.copy()

_M_SRGB_TO_XYZ_BASE = np.array([
    [ 0.4124564,  0.3575761,  0.1804375],
    [ 0.2126729,  0.7151522,  0.0721750],
    [ 0.0193339,  0.1191920,  0.9503041]
], dtype=np.float64)
M_SRGB_TO_XYZ_T: Final[ArrayFloat] = _M_SRGB_TO_XYZ_BASE.T.copy()

# --- Exact Rational Math Constants ---
# delta = 6/29 is the threshold where the Lab function switches from cubic to linear.
_LAB_DELTA: Final[float] = 6.0 / 29.0
LAB_EPSILON: Final[float] = _LAB_DELTA * _LAB_DELTA * _LAB_DELTA  # 216/24389
LAB_KAPPA: Final[float]   = (116.0 * 29.0 * 29.0) / (3.0 * 6.0 * 6.0) # 24389/27

DEG2RAD: Final[float]     = math.pi / 180.0
RAD2DEG: Final[float]     = 180.0 / math.pi

# --- Contrast ratios (WCAG 2.1) ---
RATIO_MIN: Final[float] = 1.0
RATIO_30: Final[float]  = 3.0
RATIO_45: Final[float]  = 4.5
RATIO_70: Final[float]  = 7.0
RATIO_MAX: Final[float] = 21.0

# Tolerance on the ratio actually reached by lighter()/darker().
_CONTRAST_RATIO_EPSILON: Final[float] = 0.04
# lighter()/darker() overshoot by this many tones so that rounding to a
# packed color still reaches the requested ratio.
_LUMINANCE_GAMUT_MAP_TOLERANCE: Final[float] = 0.4

# Linear-RGB slack accepted as "in gamut" by the chroma search.
_GAMUT_TOLERANCE: Final[float] = 1e-4
_GAMUT_BISECTION_STEPS: Final[int] = 40


# --- Runtime Configuration ---
# When True, the gamut-mapping kernel is the fastmath=False variant that
# keeps strict IEEE 754 semantics. Tones are unaffected either way; only
# the last bits of a reduced chroma can differ.
#
# Toggle at runtime via:
#     import tincture_colorengine as ce
#     ce.set_strict_ieee(True)
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between the fast (default) and strict IEEE 754 gamut kernels.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)


# =============================================================================
# 1. ROBUST DECORATORS
# =============================================================================

def handle_shapes(func: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
    """
    Decorator to normalize inputs to (N, 3) and safeguard shape.

    Returns (3,) for a (3,) input and (N, 3) for an (N, 3) input.
    """
    @functools.wraps(func)
    def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> ArrayFloat:
        arr = np.asarray(arr, dtype=np.float64)
        arr_in = np.ascontiguousarray(np.atleast_2d(arr))

        if arr_in.shape[-1] != 3:
            raise ValueError(f"Expected last dimension size 3, got {arr_in.shape[-1]}")

        res = func(arr_in, *args, **kwargs)

        if arr.ndim == 1:
            return res[0]
        return res
    return wrapper


# =============================================================================
# 2. LOW-LEVEL MATH KERNELS (Numba Optimized)
# =============================================================================

@njit(cache=True)
def _gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB OETF (Gamma Correction).

    Standard: IEC 61966-2-1
    """
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()

    for i in range(linear.size):
        v = linear_flat[i]
        if v <= 0.0031308:
            out_flat[i] = 12.92 * v
        else:
            out_flat[i] = 1.055 * (v ** (1.0/2.4)) - 0.055
    return out

@njit(cache=True)
def _inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB EOTF (Inverse Gamma).

    Standard: IEC 61966-2-1
    """
    out = np.empty_like(srgb)
    srgb_flat = srgb.ravel()
    out_flat = out.ravel()

    for i in range(srgb.size):
        v = srgb_flat[i]
        if v <= 0.04045:
            out_flat[i] = v / 12.92
        else:
            out_flat[i] = ((v + 0.055) / 1.055) ** 2.4
    return out

@njit(cache=True)
def _lab_f(t: ArrayFloat) -> ArrayFloat:
    """
    Non-linear transfer function f(t) for CIELAB.

    Cube root with a linear segment near zero.
    """
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()

    for i in range(t.size):
        v = t_flat[i]
        if v > LAB_EPSILON:
            out_flat[i] = v ** (1.0/3.0)
        else:
            out_flat[i] = (LAB_KAPPA * v + 16.0) / 116.0
    return out

@njit(cache=True)
def _lab_f_inv(t: ArrayFloat) -> ArrayFloat:
    """
    Inverse non-linear transfer function for CIELAB.

    Uses multiplication form (116*t - 16)/k to minimize division error
    near the delta threshold.
    """
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()

    for i in range(t.size):
        v = t_flat[i]
        if v > _LAB_DELTA:
            out_flat[i] = v ** 3.0
        else:
            out_flat[i] = (116.0 * v - 16.0) / LAB_KAPPA
    return out

@njit(cache=True)
def _lab_to_lch_kernel(lab: ArrayFloat) -> ArrayFloat:
    """Lab -> LCh, (N, 3) in and out. Hue in degrees [0, 360)."""
    n = lab.shape[0]
    lch = np.empty_like(lab)

    for i in range(n):
        L, a, b = lab[i, 0], lab[i, 1], lab[i, 2]
        C = np.hypot(a, b)
        h_deg = np.arctan2(b, a) * RAD2DEG
        if h_deg < 0: h_deg += 360.0
        if h_deg >= 360.0: h_deg -= 360.0
        lch[i, 0], lch[i, 1], lch[i, 2] = L, C, h_deg
    return lch

@njit(cache=True)
def _lch_to_lab_kernel(lch: ArrayFloat) -> ArrayFloat:
    """LCh -> Lab, (N, 3) in and out."""
    n = lch.shape[0]
    lab = np.empty_like(lch)

    for i in range(n):
        L, C, h_deg = lch[i, 0], lch[i, 1], lch[i, 2]
        h_rad = h_deg * DEG2RAD
        lab[i, 0] = L
        lab[i, 1] = C * np.cos(h_rad)
        lab[i, 2] = C * np.sin(h_rad)
    return lab

@njit(cache=True)
def _lch_in_gamut(L: float, C: float, h_deg: float, tol: float) -> bool:
    """True when LCh(L, C, h) renders inside sRGB with ``tol`` linear slack."""
    h_rad = h_deg * DEG2RAD
    fy = (L + 16.0) / 116.0
    fx = fy + (C * np.cos(h_rad)) / 500.0
    fz = fy - (C * np.sin(h_rad)) / 200.0

    if fx > _LAB_DELTA:
        X = fx * fx * fx
    else:
        X = (116.0 * fx - 16.0) / LAB_KAPPA
    if L > LAB_KAPPA * LAB_EPSILON:
        Y = fy * fy * fy
    else:
        Y = L / LAB_KAPPA
    if fz > _LAB_DELTA:
        Z = fz * fz * fz
    else:
        Z = (116.0 * fz - 16.0) / LAB_KAPPA
    X *= 0.95047
    Z *= 1.08883

    r =  3.2404542 * X - 1.5371385 * Y - 0.4985314 * Z
    g = -0.9692660 * X + 1.8760108 * Y + 0.0415560 * Z
    b =  0.0556434 * X - 0.2040259 * Y + 1.0572252 * Z

    lo = -tol
    hi = 1.0 + tol
    if r < lo or r > hi:
        return False
    if g < lo or g > hi:
        return False
    return lo <= b and b <= hi

def _gamut_map_impl(lch: ArrayFloat, tol: float, steps: int) -> ArrayFloat:
    """
    Largest in-gamut chroma for each (L, C, h) row, never above C.

    Rows already inside sRGB keep their chroma bit-for-bit. Tones at the
    ends of the axis only admit the achromatic color.
    """
    n = lch.shape[0]
    out = np.empty(n, dtype=np.float64)

    for i in range(n):
        L, C, h = lch[i, 0], lch[i, 1], lch[i, 2]
        if C <= 0.0 or L <= 0.0 or L >= 100.0:
            out[i] = 0.0
            continue
        if _lch_in_gamut(L, C, h, tol):
            out[i] = C
            continue
        lo = 0.0
        hi = C
        for _ in range(steps):
            mid = 0.5 * (lo + hi)
            if _lch_in_gamut(L, mid, h, tol):
                lo = mid
            else:
                hi = mid
        out[i] = lo
    return out

_gamut_map_fast = njit(cache=True, fastmath=True)(_gamut_map_impl)
_gamut_map_strict = njit(_gamut_map_impl)

def _gamut_map(lch: ArrayFloat) -> ArrayFloat:
    """Dispatch the chroma search to the fast or strict kernel."""
    if _STRICT_IEEE:
        return _gamut_map_strict(lch, _GAMUT_TOLERANCE, _GAMUT_BISECTION_STEPS)
    return _gamut_map_fast(lch, _GAMUT_TOLERANCE, _GAMUT_BISECTION_STEPS)


# =============================================================================
# 3. BATCH CONVERSIONS
# =============================================================================

class ColorSpaceEngine:
    """
    Vectorised conversions between sRGB, XYZ, CIELAB and LCh.

    sRGB values are nonlinear in [0, 1], XYZ is D65 with Y=1 for white,
    LCh columns are ordered (L, C, h).
    """

    @staticmethod
    @handle_shapes
    def srgb_to_xyz(rgb_array: ArrayFloat) -> ArrayFloat:
        return np.dot(_inverse_gamma_srgb(rgb_array), M_SRGB_TO_XYZ_T)

    @staticmethod
    @handle_shapes
    def xyz_to_srgb(xyz_array: ArrayFloat, clip: bool = True) -> ArrayFloat:
        linear = np.dot(xyz_array, M_XYZ_TO_SRGB_T)
        if clip:
            linear = np.clip(linear, 0.0, 1.0)
        return _gamma_srgb(np.ascontiguousarray(linear))

    @staticmethod
    @handle_shapes
    def xyz_to_lab(xyz_array: ArrayFloat) -> ArrayFloat:
        f = _lab_f(np.ascontiguousarray(xyz_array / REF_WHITE_D65))
        out = np.empty_like(f)
        out[:, 0] = 116.0 * f[:, 1] - 16.0
        out[:, 1] = 500.0 * (f[:, 0] - f[:, 1])
        out[:, 2] = 200.0 * (f[:, 1] - f[:, 2])
        return out

    @staticmethod
    @handle_shapes
    def lab_to_xyz(lab_array: ArrayFloat) -> ArrayFloat:
        f = np.empty_like(lab_array)
        f[:, 1] = (lab_array[:, 0] + 16.0) / 116.0
        f[:, 0] = f[:, 1] + lab_array[:, 1] / 500.0
        f[:, 2] = f[:, 1] - lab_array[:, 2] / 200.0
        return _lab_f_inv(f) * REF_WHITE_D65

    @staticmethod
    @handle_shapes
    def lab_to_lch(lab_array: ArrayFloat) -> ArrayFloat:
        return _lab_to_lch_kernel(lab_array)

    @staticmethod
    @handle_shapes
    def lch_to_lab(lch_array: ArrayFloat) -> ArrayFloat:
        return _lch_to_lab_kernel(lch_array)

    @staticmethod
    @handle_shapes
    def gamut_map_lch(lch_array: ArrayFloat) -> ArrayFloat:
        """
        Reduces chroma until every row renders inside sRGB.

        L and h pass through unchanged, so the tone of every color is kept.
        """
        out = lch_array.copy()
        out[:, 2] = np.mod(out[:, 2], 360.0)
        out[:, 0] = np.clip(out[:, 0], 0.0, 100.0)
        out[:, 1] = _gamut_map(np.ascontiguousarray(out))
        return out

    @staticmethod
    @handle_shapes
    def lch_to_srgb(lch_array: ArrayFloat) -> ArrayFloat:
        xyz = ColorSpaceEngine.lab_to_xyz(ColorSpaceEngine.lch_to_lab(lch_array))
        return ColorSpaceEngine.xyz_to_srgb(xyz, clip=True)

    @staticmethod
    @handle_shapes
    def srgb_to_lch(rgb_array: ArrayFloat) -> ArrayFloat:
        lab = ColorSpaceEngine.xyz_to_lab(ColorSpaceEngine.srgb_to_xyz(rgb_array))
        return ColorSpaceEngine.lab_to_lch(lab)


# =============================================================================
# 4. SCALAR HELPERS
# =============================================================================

def sanitize_degrees(degrees: float) -> float:
    """Wraps an angle into [0, 360)."""
    degrees = math.fmod(degrees, 360.0)
    if degrees < 0.0:
        degrees += 360.0
    return degrees

def clamp_tone(tone: float) -> float:
    return min(100.0, max(0.0, tone))

def argb_from_rgb(red: int, green: int, blue: int, alpha: int = 255) -> int:
    return ((alpha & 0xFF) << 24) | ((red & 0xFF) << 16) | ((green & 0xFF) << 8) | (blue & 0xFF)

def rgb_from_argb(argb: int) -> Tuple[int, int, int]:
    return (argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF

def _lab_f_scalar(t: float) -> float:
    if t > LAB_EPSILON:
        return t ** (1.0 / 3.0)
    return (LAB_KAPPA * t + 16.0) / 116.0

def _lab_f_inv_scalar(ft: float) -> float:
    ft3 = ft * ft * ft
    if ft3 > LAB_EPSILON:
        return ft3
    return (116.0 * ft - 16.0) / LAB_KAPPA

def y_from_lstar(lstar: float) -> float:
    """Relative luminance Y on a 0-100 scale for an L* tone."""
    return 100.0 * _lab_f_inv_scalar((lstar + 16.0) / 116.0)

def lstar_from_y(y: float) -> float:
    """L* tone for a relative luminance Y on a 0-100 scale."""
    return _lab_f_scalar(y / 100.0) * 116.0 - 16.0


# =============================================================================
# 5. CONTRAST
# =============================================================================

def ratio_of_ys(y1: float, y2: float) -> float:
    """Contrast ratio of two luminances on the 0-100 scale, in [1, 21]."""
    lighter_y = max(y1, y2)
    darker_y = min(y1, y2)
    return (lighter_y + 5.0) / (darker_y + 5.0)

def ratio_of_tones(tone_a: float, tone_b: float) -> float:
    """Contrast ratio of two tones. Out-of-range tones are clamped first."""
    tone_a = clamp_tone(tone_a)
    tone_b = clamp_tone(tone_b)
    return ratio_of_ys(y_from_lstar(tone_a), y_from_lstar(tone_b))

def lighter(tone: float, ratio: float) -> float:
    """
    Tone >= ``tone`` that reaches ``ratio`` against it.

    Returns -1.0 when the ratio cannot be reached inside [0, 100].
    """
    if tone < 0.0 or tone > 100.0:
        return -1.0

    dark_y = y_from_lstar(tone)
    light_y = ratio * (dark_y + 5.0) - 5.0
    real_contrast = ratio_of_ys(light_y, dark_y)
    delta = abs(real_contrast - ratio)
    if real_contrast < ratio and delta > _CONTRAST_RATIO_EPSILON:
        return -1.0

    value = lstar_from_y(light_y) + _LUMINANCE_GAMUT_MAP_TOLERANCE
    if value < 0.0 or value > 100.0:
        return -1.0
    return value

def darker(tone: float, ratio: float) -> float:
    """
    Tone <= ``tone`` that reaches ``ratio`` against it.

    Returns -1.0 when the ratio cannot be reached inside [0, 100].
    """
    if tone < 0.0 or tone > 100.0:
        return -1.0

    light_y = y_from_lstar(tone)
    dark_y = ((light_y + 5.0) / ratio) - 5.0
    real_contrast = ratio_of_ys(light_y, dark_y)
    delta = abs(real_contrast - ratio)
    if real_contrast < ratio and delta > _CONTRAST_RATIO_EPSILON:
        return -1.0

    value = lstar_from_y(dark_y) - _LUMINANCE_GAMUT_MAP_TOLERANCE
    if value < 0.0 or value > 100.0:
        return -1.0
    return value

def lighter_unsafe(tone: float, ratio: float) -> float:
    """lighter(), saturating at 100 when the ratio is out of reach."""
    safe = lighter(tone, ratio)
    return 100.0 if safe < 0.0 else safe

def darker_unsafe(tone: float, ratio: float) -> float:
    """darker(), saturating at 0 when the ratio is out of reach."""
    safe = darker(tone, ratio)
    return 0.0 if safe < 0.0 else safe


# =============================================================================
# 6. HCT COLOR
# =============================================================================

@dataclass(frozen=True, slots=True)
class HctColor:
    """
    A renderable color in hue / chroma / tone coordinates.

    Build through :meth:`from_hct` (which gamut-maps) or
    :meth:`from_argb`; the raw constructor trusts its arguments.
    """
    hue: float
    chroma: float
    tone: float

    @classmethod
    def from_hct(cls, hue: float, chroma: float, tone: float) -> "HctColor":
        """Closest renderable color, keeping tone and hue, capping chroma."""
        return cls.batch([hue], chroma, tone)[0]

    @classmethod
    def batch(cls, hues: Sequence[float], chroma: float, tone: float) -> List["HctColor"]:
        """One gamut-mapping pass for many hues at a shared chroma and tone."""
        hue_arr = np.asarray(hues, dtype=np.float64)
        lch = np.empty((hue_arr.shape[0], 3), dtype=np.float64)
        lch[:, 0] = tone
        lch[:, 1] = max(0.0, chroma)
        lch[:, 2] = hue_arr
        mapped = ColorSpaceEngine.gamut_map_lch(lch)
        return [cls(float(h), float(c), float(t)) for t, c, h in mapped]

    @classmethod
    def from_argb(cls, argb: int) -> "HctColor":
        rgb = np.array(rgb_from_argb(argb), dtype=np.float64) / 255.0
        L, C, h = ColorSpaceEngine.srgb_to_lch(rgb)
        if C < 1e-4:
            C = 0.0
        return cls(float(h), float(C), float(L))

    def to_lab(self) -> Tuple[float, float, float]:
        """Rectangular perceptual coordinates (L*, a*, b*)."""
        h_rad = self.hue * DEG2RAD
        return self.tone, self.chroma * math.cos(h_rad), self.chroma * math.sin(h_rad)

    def to_argb(self, alpha: int = 255) -> int:
        """Packed 0xAARRGGBB integer."""
        rgb = ColorSpaceEngine.lch_to_srgb(np.array([self.tone, self.chroma, self.hue]))
        r, g, b = (int(round(v * 255.0)) for v in rgb)
        return argb_from_rgb(r, g, b, alpha)
