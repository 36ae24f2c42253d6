# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""One SID voice, clocked in two phases, and the three-voice sync ring."""

import enum
import logging
from typing import NamedTuple, Sequence

from .constants import ChipModel, MODEL_NAMES, ENV_MASK, ACC_MSB
from .control import ControlFields
from .dac import DacTables, dac_tables
from .dca import Dca
from .noise import NoiseGenerator
from .oscillator import Oscillator, SyncSignal, NO_SYNC
from .waveform import WaveformSelector, noise_combined
from .wavetables import combined_waveforms

log = logging.getLogger(__name__)


class Phase(enum.IntEnum):
    PHI1 = 1   # selector, noise and oscillator registers
    PHI2 = 2   # DAC and mixer pipeline


class VoiceOutput(NamedTuple):
    sync: SyncSignal   # for the next voice in the ring
    sample: int        # signed 24-bit
    readback: int      # 8-bit oscillator readback


class Voice:
    """Cycle model of a single voice.

    The DAC and combined-waveform tables are shared, read-only resources;
    everything else is owned by the instance. Without *wave_tables* the
    measured tables of the voice's model are loaded from the data
    directory, raising WaveTableError if they are not installed.

    Voice output lags the oscillator by PIPELINE_LATENCY cycles (plus
    SAW_TRI_DELAY for tri/saw on the 8580).

    Usage, one cycle::

        out = voice.clock(ctrl, sync_i, envelope)

    or, when interleaving phases with other voices::

        sync_o = voice.sync_output(ctrl, sync_i.msb)
        voice.tick(Phase.PHI1, ctrl=ctrl, sync_i=sync_i)
        voice.tick(Phase.PHI2, envelope=envelope)
    """

    def __init__(self, model: ChipModel = ChipModel.MOS6581,
                 wave_tables: dict = None, dac: DacTables = None):
        self.model = ChipModel(model)
        if wave_tables is None:
            wave_tables = {self.model: combined_waveforms(self.model)}
        self.wave_tables = wave_tables
        self.dac = dac if dac is not None else dac_tables(ChipModel.MOS6581)

        self.osc = Oscillator()
        self.noise = NoiseGenerator()
        self.selector = WaveformSelector(self.wave_tables)
        self.dca = Dca(self.dac, self.model)
        log.debug(f"New {MODEL_NAMES[self.model]} voice")

    def reset(self):
        """Return every register to its power-up value."""
        self.osc.reset()
        self.noise.reset()
        self.selector.reset()
        self.dca.reset()

    @property
    def sample(self) -> int:
        return self.dca.sample

    @property
    def readback(self) -> int:
        return self.dca.readback

    def sync_output(self, ctrl: ControlFields, msb_i: bool) -> SyncSignal:
        return self.osc.sync_output(ctrl, msb_i)

    def phase1(self, ctrl: ControlFields, sync_i: SyncSignal = NO_SYNC,
               reset: bool = False):
        # Everything here reads values latched on the previous cycle first
        self.selector.clock(ctrl.waveform, self.model, self.osc, self.noise)
        self.noise.clock(self.osc.acc, reset or ctrl.test, self.model,
                         combined=noise_combined(ctrl.waveform))
        self.osc.clock(ctrl, sync_i)

    def phase2(self, envelope: int = ENV_MASK):
        self.dca.clock(self.model, self.selector, envelope)

    def tick(self, phase: Phase, ctrl: ControlFields = None,
             sync_i: SyncSignal = NO_SYNC, envelope: int = ENV_MASK,
             reset: bool = False):
        if phase == Phase.PHI1:
            self.phase1(ctrl if ctrl is not None else ControlFields(), sync_i, reset)
        elif phase == Phase.PHI2:
            self.phase2(envelope)
        else:
            raise ValueError(f"unknown clock phase {phase!r}")

    def clock(self, ctrl: ControlFields, sync_i: SyncSignal = NO_SYNC,
              envelope: int = ENV_MASK, reset: bool = False) -> VoiceOutput:
        """Run one full cycle and return this cycle's outputs."""
        sync_o = self.sync_output(ctrl, sync_i.msb)
        self.phase1(ctrl, sync_i, reset)
        self.phase2(envelope)
        return VoiceOutput(sync_o, self.dca.sample, self.dca.readback)


class SyncRing:
    """Three voices, each hard-synced and ring-modulated by its predecessor.

    Voice 0 takes its sync from voice 2, voice 1 from voice 0 and voice 2
    from voice 1. All sync outputs are evaluated before any voice commits.
    """

    def __init__(self, model: ChipModel = ChipModel.MOS6581, voices: int = 3,
                 **kwargs):
        self.voices = [Voice(model, **kwargs) for _ in range(voices)]

    def __getitem__(self, index: int) -> Voice:
        return self.voices[index]

    def __len__(self) -> int:
        return len(self.voices)

    def clock(self, ctrls: Sequence[ControlFields],
              envelopes: Sequence[int] = None,
              reset: bool = False) -> list[VoiceOutput]:
        n = len(self.voices)
        if len(ctrls) != n:
            raise ValueError(f"expected {n} control records, got {len(ctrls)}")
        envelopes = envelopes if envelopes is not None else [ENV_MASK] * n

        # Pre-reset MSBs first, they depend on nothing but the own accumulator
        msbs = [v.osc.next_acc(c) >> ACC_MSB for v, c in zip(self.voices, ctrls)]
        syncs = [self.voices[i].sync_output(ctrls[i], bool(msbs[i - 1]))
                 for i in range(n)]

        for i, voice in enumerate(self.voices):
            voice.phase1(ctrls[i], syncs[i - 1], reset)
        for voice, env in zip(self.voices, envelopes):
            voice.phase2(env)

        return [VoiceOutput(syncs[i], v.sample, v.readback)
                for i, v in enumerate(self.voices)]
