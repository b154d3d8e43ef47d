# -*- coding: utf-8 -*-
"""
Shared fixtures: a small role catalog wired the way a design system
would wire it, and light/dark schemes to resolve it against.
"""

import pytest

from tincture_colorengine import HctColor
from tincture_dynamiccolor import ColorSpec, ToneDeltaConstraint, TonePolarity
from tincture_scheme import Scheme, TonalPalette


def make_scheme(is_dark=False, contrast_level=0.0):
    source = HctColor.from_hct(260.0, 48.0, 40.0)
    palettes = {
        "primary":         TonalPalette(260.0, 48.0),
        "secondary":       TonalPalette(260.0, 16.0),
        "tertiary":        TonalPalette(320.0, 24.0),
        "neutral":         TonalPalette(260.0, 4.0),
        "neutral_variant": TonalPalette(260.0, 8.0),
    }
    return Scheme(source, is_dark, contrast_level, palettes)


class Roles:
    """A handful of roles with surface -> container -> text chains."""

    def __init__(self):
        self.surface = ColorSpec.from_palette(
            lambda s: s.neutral_palette,
            lambda s: 6.0 if s.is_dark else 98.0,
            name="surface")
        self.on_surface = ColorSpec.from_palette(
            lambda s: s.neutral_palette,
            lambda s: 90.0 if s.is_dark else 10.0,
            background=lambda s: self.surface,
            name="on_surface")
        self.primary_container = ColorSpec.from_palette(
            lambda s: s.primary_palette,
            lambda s: 30.0 if s.is_dark else 90.0,
            background=lambda s: self.surface,
            name="primary_container")
        self.on_primary_container = ColorSpec.from_palette(
            lambda s: s.primary_palette,
            lambda s: 90.0 if s.is_dark else 10.0,
            background=lambda s: self.primary_container,
            name="on_primary_container")
        self.primary = ColorSpec.from_palette(
            lambda s: s.primary_palette,
            lambda s: 80.0 if s.is_dark else 40.0,
            background=lambda s: self.surface,
            tone_delta_constraint=lambda s: ToneDeltaConstraint(
                10.0,
                self.primary_container,
                TonePolarity.DARKER if s.is_dark else TonePolarity.LIGHTER),
            name="primary")
        self.on_primary = ColorSpec.from_palette(
            lambda s: s.primary_palette,
            lambda s: 20.0 if s.is_dark else 100.0,
            background=lambda s: self.primary,
            name="on_primary")

    def all(self):
        return [self.surface, self.on_surface, self.primary_container,
                self.on_primary_container, self.primary, self.on_primary]


@pytest.fixture
def roles():
    return Roles()


@pytest.fixture
def light_scheme():
    return make_scheme(is_dark=False)


@pytest.fixture
def dark_scheme():
    return make_scheme(is_dark=True)


@pytest.fixture
def scheme_factory():
    return make_scheme
