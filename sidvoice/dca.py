# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Digitally controlled amplifier: waveform x envelope, two pipeline stages.

Stage 1 latches the model and selector and runs the regular waveform and
the envelope through the DAC tables (6581 only). Stage 2 picks the final
waveform, removes the waveform zero level and multiplies by the envelope:

    output = VOICE_DC + (waveform - 0x800 + WAVE_OFFSET) * envelope
"""

from .constants import (
    ChipModel,
    USES_DAC, WAVE_OFFSET, VOICE_DC, OUTPUT_BITS, ENV_MASK, WAVE_MASK,
)
from .dac import DacTables
from .waveform import WaveformSelector, is_single


def sign_extend(value: int, bits: int) -> int:
    sign = 1 << (bits - 1)
    value &= (1 << bits) - 1
    return (value ^ sign) - sign


class Dca:
    """Voice mixer.

    sample:   signed 24-bit voice output
    readback: top 8 bits of the digital (pre-DAC) waveform
    """

    def __init__(self, dac: DacTables, model: ChipModel = ChipModel.MOS6581):
        self.dac = dac
        self.power_up_model = ChipModel(model)
        self.reset()

    def reset(self):
        # Stage 1
        self.model = self.power_up_model
        self.selector = 0
        self.wave = 0
        self.wave_dac = 0
        self.combined = 0
        self.env = 0
        # Stage 2
        self.sample = 0
        self.readback = 0

    def clock(self, model: ChipModel, selector: WaveformSelector, envelope: int):
        # Stage 2 consumes what stage 1 latched on the previous cycle
        if is_single(self.selector):
            wave, wave_dac = self.wave, self.wave_dac
        else:
            wave, wave_dac = self.combined, self.combined
        level = sign_extend(wave_dac ^ 0x800, 12) + WAVE_OFFSET[self.model]
        self.sample = sign_extend(VOICE_DC[self.model] + level * self.env, OUTPUT_BITS)
        self.readback = (wave >> 4) & 0xFF

        # Stage 1
        envelope &= ENV_MASK
        uses_dac = USES_DAC[model]
        self.model = model
        self.selector = selector.selector
        self.wave = selector.regular & WAVE_MASK
        self.wave_dac = int(self.dac.wave[self.wave]) if uses_dac else self.wave
        self.combined = selector.combined & WAVE_MASK
        self.env = int(self.dac.env[envelope]) if uses_dac else envelope
