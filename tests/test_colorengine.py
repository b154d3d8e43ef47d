# -*- coding: utf-8 -*-
import numpy as np
import pytest

import tincture_colorengine as ce
from tincture_colorengine import (
    ColorSpaceEngine,
    HctColor,
    darker,
    darker_unsafe,
    lighter,
    lighter_unsafe,
    lstar_from_y,
    ratio_of_tones,
    y_from_lstar,
)


def test_ratio_of_tones_extremes():
    assert ratio_of_tones(0.0, 100.0) == pytest.approx(21.0)
    assert ratio_of_tones(100.0, 0.0) == pytest.approx(21.0)
    assert ratio_of_tones(50.0, 50.0) == 1.0


def test_ratio_of_tones_clamps_out_of_range_tones():
    assert ratio_of_tones(-10.0, 120.0) == pytest.approx(21.0)


@pytest.mark.parametrize("tone", [0.0, 5.0, 8.0, 25.0, 50.0, 75.0, 100.0])
def test_lstar_y_inverse(tone):
    assert lstar_from_y(y_from_lstar(tone)) == pytest.approx(tone, abs=1e-9)


def test_lighter_reaches_ratio():
    tone = lighter(20.0, 4.5)
    assert 20.0 < tone <= 100.0
    assert ratio_of_tones(tone, 20.0) >= 4.5


def test_darker_reaches_ratio():
    tone = darker(90.0, 4.5)
    assert 0.0 <= tone < 90.0
    assert ratio_of_tones(tone, 90.0) >= 4.5


def test_unreachable_ratio_saturates():
    assert lighter(50.0, 4.5) == -1.0
    assert lighter_unsafe(50.0, 4.5) == 100.0
    assert darker(50.0, 21.0) == -1.0
    assert darker_unsafe(50.0, 21.0) == 0.0


def test_from_hct_keeps_in_gamut_color():
    color = HctColor.from_hct(0.0, 40.0, 40.0)
    assert color.hue == 0.0
    assert color.chroma == 40.0
    assert color.tone == 40.0


def test_from_hct_caps_chroma_keeps_tone():
    color = HctColor.from_hct(120.0, 200.0, 50.0)
    assert color.tone == 50.0
    assert color.hue == pytest.approx(120.0)
    assert 0.0 < color.chroma < 200.0
    # The capped color is still renderable at the same tone.
    rgb = ColorSpaceEngine.lch_to_srgb(np.array([color.tone, color.chroma, color.hue]))
    assert np.all(rgb >= 0.0) and np.all(rgb <= 1.0)


def test_from_hct_sanitizes_inputs():
    color = HctColor.from_hct(-30.0, 20.0, 140.0)
    assert color.hue == pytest.approx(330.0)
    assert color.tone == 100.0
    assert color.chroma == 0.0


@pytest.mark.parametrize("tone", [0.0, 100.0])
def test_tone_extremes_are_achromatic(tone):
    assert HctColor.from_hct(10.0, 50.0, tone).chroma == 0.0


@pytest.mark.parametrize("argb", [0xFF4285F4, 0xFFFFFFFF, 0xFF000000, 0xFFB3261E, 0xFF7D5260])
def test_argb_round_trip(argb):
    assert HctColor.from_argb(argb).to_argb() == argb


def test_from_argb_gray_is_achromatic():
    assert HctColor.from_argb(0xFF808080).chroma == 0.0


def test_to_lab_matches_polar_coordinates():
    L, a, b = HctColor(90.0, 30.0, 55.0).to_lab()
    assert L == 55.0
    assert a == pytest.approx(0.0, abs=1e-12)
    assert b == pytest.approx(30.0)


def test_batch_conversions_preserve_shape():
    rgb = np.random.default_rng(7).random((4, 3))
    lch = ColorSpaceEngine.srgb_to_lch(rgb)
    assert lch.shape == (4, 3)
    back = ColorSpaceEngine.lch_to_srgb(lch)
    np.testing.assert_allclose(back, rgb, atol=1e-6)


def test_handle_shapes_rejects_wrong_width():
    with pytest.raises(ValueError):
        ColorSpaceEngine.lab_to_lch(np.zeros(2))


def test_strict_ieee_mode_gives_same_tones():
    fast = HctColor.batch(range(0, 360, 30), 120.0, 60.0)
    ce.set_strict_ieee(True)
    try:
        strict = HctColor.batch(range(0, 360, 30), 120.0, 60.0)
    finally:
        ce.set_strict_ieee(False)
    for a, b in zip(fast, strict):
        assert a.tone == b.tone == 60.0
        assert a.chroma == pytest.approx(b.chroma, abs=1e-6)


def test_lch_lab_round_trip():
    lch = np.array([[50.0, 30.0, 0.0], [70.0, 20.0, 135.0], [30.0, 40.0, 359.0]])
    lab = ColorSpaceEngine.lch_to_lab(lch)
    np.testing.assert_allclose(lab[1, 1:], [-20.0 / np.sqrt(2.0), 20.0 / np.sqrt(2.0)])
    np.testing.assert_allclose(ColorSpaceEngine.lab_to_lch(lab), lch, atol=1e-9)
    # Negative angles wrap into [0, 360).
    assert ColorSpaceEngine.lab_to_lch(np.array([50.0, 10.0, -10.0]))[2] == pytest.approx(315.0)
