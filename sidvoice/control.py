# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Per-cycle voice control fields and their register encoding."""

import dataclasses

from .constants import (
    CTRL_GATE, CTRL_SYNC, CTRL_RING, CTRL_TEST,
    FREQ_MASK, PW_MASK,
    WAVE_TRI, WAVE_SAW, WAVE_PULSE, WAVE_NOISE, WAVEFORM_NAMES,
)


@dataclasses.dataclass(frozen=True)
class ControlFields:
    """Voice control fields, immutable for the duration of a cycle.

    waveform: 4-bit selector, OR of WAVE_TRI / WAVE_SAW / WAVE_PULSE / WAVE_NOISE
    freq:     16-bit frequency added to the accumulator every cycle
    pw:       12-bit pulse width compared against accumulator bits [23:12]

    Out-of-range values are masked to their register width.
    """
    test: bool = False
    sync: bool = False
    ring_mod: bool = False
    waveform: int = 0
    freq: int = 0
    pw: int = 0

    def __post_init__(self):
        object.__setattr__(self, "test", bool(self.test))
        object.__setattr__(self, "sync", bool(self.sync))
        object.__setattr__(self, "ring_mod", bool(self.ring_mod))
        object.__setattr__(self, "waveform", int(self.waveform) & 0x0F)
        object.__setattr__(self, "freq", int(self.freq) & FREQ_MASK)
        object.__setattr__(self, "pw", int(self.pw) & PW_MASK)

    @property
    def triangle(self) -> bool:
        return bool(self.waveform & WAVE_TRI)

    @property
    def sawtooth(self) -> bool:
        return bool(self.waveform & WAVE_SAW)

    @property
    def pulse(self) -> bool:
        return bool(self.waveform & WAVE_PULSE)

    @property
    def noise(self) -> bool:
        return bool(self.waveform & WAVE_NOISE)

    def replace(self, **changes) -> "ControlFields":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_registers(cls, freq_lo: int, freq_hi: int,
                       pw_lo: int, pw_hi: int, ctrl: int) -> "ControlFields":
        """Decode the five voice register bytes (FREQ_LO .. CTRL).

        The gate bit (CTRL bit 0) belongs to the envelope generator and is
        ignored here.
        """
        return cls(
            test=bool(ctrl & CTRL_TEST),
            sync=bool(ctrl & CTRL_SYNC),
            ring_mod=bool(ctrl & CTRL_RING),
            waveform=(ctrl >> 4) & 0x0F,
            freq=((freq_hi & 0xFF) << 8) | (freq_lo & 0xFF),
            pw=((pw_hi & 0x0F) << 8) | (pw_lo & 0xFF),
        )

    def to_registers(self, gate: bool = False) -> tuple[int, int, int, int, int]:
        """Pack into (FREQ_LO, FREQ_HI, PW_LO, PW_HI, CTRL)."""
        ctrl = self.waveform << 4
        if gate:
            ctrl |= CTRL_GATE
        if self.sync:
            ctrl |= CTRL_SYNC
        if self.ring_mod:
            ctrl |= CTRL_RING
        if self.test:
            ctrl |= CTRL_TEST
        return (self.freq & 0xFF, (self.freq >> 8) & 0xFF,
                self.pw & 0xFF, (self.pw >> 8) & 0x0F, ctrl)


def waveform_name(waveform: int) -> str:
    """Human-readable name of a selector value, e.g. ``"Pulse+Sawtooth"``."""
    names = [WAVEFORM_NAMES[mask]
             for mask in (WAVE_NOISE, WAVE_PULSE, WAVE_SAW, WAVE_TRI)
             if waveform & mask]
    return "+".join(names) if names else "None"
