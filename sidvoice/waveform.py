# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Waveform selection from the oscillator, noise and combined tables."""

from .constants import (
    ChipModel,
    WAVE_TRI, WAVE_SAW, WAVE_PULSE, WAVE_NOISE, WAVE_MASK,
    COMBINED_CASES,
)
from .noise import NoiseGenerator
from .oscillator import Oscillator, triangle, sawtooth
from .wavetables import CombinedWaveforms

SINGLE_WAVEFORMS = (WAVE_TRI, WAVE_SAW, WAVE_PULSE, WAVE_NOISE)


def is_single(selector: int) -> bool:
    return selector in SINGLE_WAVEFORMS


def is_combined(selector: int) -> bool:
    return selector in COMBINED_CASES


def noise_combined(selector: int) -> bool:
    """Noise selected together with pulse, sawtooth or triangle."""
    return bool(selector & WAVE_NOISE) and bool(selector & ~WAVE_NOISE & 0x0F)


class WaveformSelector:
    """Latches the selected 12-bit waveform once per cycle.

    Reads the oscillator and noise latches before they are clocked, so
    relative to the oscillator commit the 6581 tri/saw arrives one cycle
    later, the 8580 tri/saw two, the pulse two and the noise three cycles
    later (noise also shifts two cycles after bit 19).

    regular:  single-waveform output (0 for any other selector)
    combined: combined-table output (0 for any other selector)
    """

    def __init__(self, tables: dict):
        self.tables = tables
        self.reset()

    def reset(self):
        self.selector = 0
        self.regular = 0
        self.combined = 0
        self.sample_8580 = 0

    @property
    def waveform(self) -> int:
        """Digital 12-bit waveform chosen by the current selector."""
        return self.regular if is_single(self.selector) else self.combined

    def clock(self, selector: int, model: ChipModel,
              osc: Oscillator, noise: NoiseGenerator):
        # The 8580 latches the tri/saw sample one cycle later
        if model == ChipModel.MOS8580:
            sample = self.sample_8580
        else:
            sample = osc.sample
        self.sample_8580 = osc.sample

        self.selector = selector
        self.regular = select_regular(selector, sample, osc.pulse, noise.output)
        if is_combined(selector):
            wavetable: CombinedWaveforms = self.tables[model]
            self.combined = wavetable.lookup(selector, sample, osc.pulse)
        else:
            self.combined = 0


def select_regular(selector: int, sample: int, pulse: bool, noise: int) -> int:
    if selector == WAVE_TRI:
        return triangle(sample)
    if selector == WAVE_SAW:
        return sawtooth(sample)
    if selector == WAVE_PULSE:
        return WAVE_MASK if pulse else 0
    if selector == WAVE_NOISE:
        return (noise << 4) & WAVE_MASK
    return 0
