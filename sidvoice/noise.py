# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""23-bit noise LFSR.

The register shifts two cycles after accumulator bit 19 rises: one cycle
because bit 19 is read from the previously committed accumulator, one
more before the shift completes. While reset or test is held nothing is
shifted and an age counter runs; when it expires the register has filled
with ones.

States:
    running   -- shifting on bit 19 edges
    held      -- reset/test asserted, age counter running
    filled    -- age threshold reached, register held at all ones
"""

import logging

from .constants import (
    ChipModel,
    NOISE_MASK, NOISE_INIT, NOISE_CLOCK_BIT, NOISE_FEEDBACK,
    NOISE_TAPS, NOISE_TAP_MASK, NOISE_FILL_THRESHOLD, AGE_MASK,
)

log = logging.getLogger(__name__)

_FB_HI, _FB_LO = NOISE_FEEDBACK


class NoiseGenerator:

    def __init__(self):
        self.reset()

    def reset(self):
        self.register = NOISE_INIT
        self.age = 0
        self.b19_prev = False
        self.rise_prev = False
        self.held_prev = False
        self.filled = False
        self.output = noise_output(self.register)

    @property
    def state(self) -> str:
        if self.filled:
            return "filled"
        return "held" if self.held_prev else "running"

    def clock(self, acc_prev: int, held: bool, model: ChipModel,
              combined: bool = False):
        """Advance one cycle.

        acc_prev: accumulator value committed on the previous cycle
        held:     reset or test asserted this cycle
        combined: noise is selected together with another waveform
        """
        b19 = bool((acc_prev >> NOISE_CLOCK_BIT) & 1)
        rise = b19 and not self.b19_prev

        if self.rise_prev and not held:
            self.age = 0
            self._shift()
        elif held:
            threshold = NOISE_FILL_THRESHOLD[model]
            if self.age < threshold:
                self.age = (self.age + 1) & AGE_MASK
                if self.age == threshold:
                    log.debug(f"Noise register filled after {threshold} held cycles")
            if self.age >= threshold:
                self.register = NOISE_MASK
                self.filled = True
        else:
            self.age = 0

        # Combined waveforms pull the tapped bits low; approximated as a clear
        if combined:
            self.register &= ~NOISE_TAP_MASK & NOISE_MASK

        self.b19_prev = b19
        self.rise_prev = rise
        self.held_prev = held
        self.output = noise_output(self.register)

    def _shift(self):
        reg = self.register
        bit0 = (int(self.held_prev) | (reg >> _FB_HI)) ^ (reg >> _FB_LO)
        self.register = ((reg << 1) & NOISE_MASK) | (bit0 & 1)
        self.filled = False


def noise_output(register: int) -> int:
    """8-bit noise sample from the tap bits, MSB first."""
    out = 0
    for bit in NOISE_TAPS:
        out = (out << 1) | ((register >> bit) & 1)
    return out
