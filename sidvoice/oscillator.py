# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Phase-accumulating oscillator with hard sync and ring modulation."""

from typing import NamedTuple

from .constants import ACC_MASK, ACC_MSB, TRI_MASK, WAVE_MASK
from .control import ControlFields


class SyncSignal(NamedTuple):
    """Signal passed from an oscillator to the next one in the sync ring.

    msb:  accumulator MSB about to be latched, before any reset
    sync: the oscillator is itself resetting (or in test) this cycle
    """
    msb: bool = False
    sync: bool = False


NO_SYNC = SyncSignal()


class Oscillator:
    """24-bit accumulator plus the latches the waveforms are read from.

    After each clock():
        acc     -- accumulator value A[n]
        sample  -- 12-bit tri/saw sample taken from A[n]
        pulse   -- pulse comparison taken from A[n-1]
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.acc = 0
        self.msb_i_prev = False
        self.sample = 0
        self.pulse = False

    def next_acc(self, ctrl: ControlFields) -> int:
        return (self.acc + ctrl.freq) & ACC_MASK

    def sync_output(self, ctrl: ControlFields, msb_i: bool) -> SyncSignal:
        """Sync output for this cycle, given the source's pre-reset MSB.

        Depends only on the source's MSB, never on its sync flag, so a
        whole ring can be evaluated before any oscillator commits.
        """
        msb_up = not self.msb_i_prev and msb_i
        return SyncSignal(
            msb=bool(self.next_acc(ctrl) >> ACC_MSB),
            sync=ctrl.test or (ctrl.sync and msb_up),
        )

    def clock(self, ctrl: ControlFields, sync_i: SyncSignal = NO_SYNC):
        """Commit one cycle.

        A source that is itself syncing this cycle blocks our reset. With
        three oscillators syncing each other on the same cycle, nobody
        resets.
        """
        # Pulse is compared against the value before this cycle's update
        self.pulse = ctrl.test or (self.acc >> 12) >= ctrl.pw

        acc_next = self.next_acc(ctrl)
        msb_up = not self.msb_i_prev and sync_i.msb
        reset = ctrl.test or (ctrl.sync and msb_up and not sync_i.sync)

        self.acc = 0 if reset else acc_next
        self.msb_i_prev = bool(sync_i.msb)
        self.sample = tri_saw_sample(self.acc, ctrl, sync_i.msb)


def tri_saw_sample(acc: int, ctrl: ControlFields, msb_i: bool) -> int:
    """Top 12 accumulator bits, lower 11 inverted on the falling triangle half.

    Ring modulation XORs the inverted source MSB into the fold, so a ring
    modulated voice with its source MSB low runs a half-period out of
    phase. The fold is skipped while the sawtooth is selected, so combined
    saw waveforms see the raw accumulator.
    """
    msb = bool(acc >> ACC_MSB)
    invert = not ctrl.sawtooth and ((ctrl.ring_mod and not msb_i) != msb)
    sample = (acc >> 12) & WAVE_MASK
    return sample ^ TRI_MASK if invert else sample


def triangle(sample: int) -> int:
    return (sample & TRI_MASK) << 1


def sawtooth(sample: int) -> int:
    return sample & WAVE_MASK
