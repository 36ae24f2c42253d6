# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Non-linear DAC tables from an R-2R resistor ladder model.

The 6581 ladder has 2R/R ~ 2.20 and lacks the terminating resistor at
bit 0, which makes its DACs non-monotonic at every power-of-two boundary.
The 8580 ladder is a properly terminated 2R/R = 2.00 ladder and is linear
to within rounding.

Each bit is evaluated independently (superposition): the ladder "tail"
below the bit is folded into a single resistance, the bit source is
transformed, and the resulting voltage is carried up to the output one
section at a time.
"""

import dataclasses
import functools
import logging
import math

import numpy as np

from .constants import (
    ChipModel, MODEL_NAMES,
    DAC_RATIO, DAC_TERMINATED, DAC_SCALE_BITS, DAC_MAX_BITS,
    WAVE_DAC_BITS, CUTOFF_DAC_BITS, ENV_DAC_BITS,
)

log = logging.getLogger(__name__)


class DacConfigError(ValueError):
    """Unsupported ladder configuration."""


@dataclasses.dataclass(frozen=True)
class DacConfig:
    bits: int
    ratio: float
    terminated: bool

    def validate(self):
        if not isinstance(self.bits, int) or not 1 <= self.bits <= DAC_MAX_BITS:
            raise DacConfigError(
                f"DAC width must be 1..{DAC_MAX_BITS} bits, got {self.bits!r}")
        if not math.isfinite(self.ratio) or not 1.0 < self.ratio <= 4.0:
            raise DacConfigError(
                f"2R/R ratio must be in (1, 4], got {self.ratio!r}")

    @classmethod
    def for_model(cls, model: ChipModel, bits: int) -> "DacConfig":
        model = ChipModel(model)
        return cls(bits, DAC_RATIO[model], DAC_TERMINATED[model])


def bit_voltages(config: DacConfig) -> list[float]:
    """Normalized output voltage contributed by each bit on its own."""
    R = 1.0
    R2 = config.ratio * R
    voltages = []

    for set_bit in range(config.bits):
        vn = 1.0
        # None stands in for an infinite (open) tail
        rn = R2 if config.terminated else None

        # Fold the tail below the bit: R + 2R || Rn
        for _ in range(set_bit):
            if rn is None:
                rn = R + R2
            else:
                rn = R + R2 * rn / (R2 + rn)

        # Source transformation at the contributing bit
        if rn is None:
            rn = R2
        else:
            rn = R2 * rn / (R2 + rn)
            vn = vn * rn / R2

        # Carry the voltage up to the output, one section at a time
        for _ in range(set_bit + 1, config.bits):
            rn += R
            i = vn / rn
            rn = R2 * rn / (R2 + rn)
            vn = rn * i

        voltages.append(vn)

    return voltages


def bit_contributions(config: DacConfig) -> list[int]:
    """Per-bit output code, in fixed point with DAC_SCALE_BITS fraction bits."""
    full_scale = ((1 << config.bits) - 1) * (1 << DAC_SCALE_BITS)
    return [int(full_scale * vn + 0.5) for vn in bit_voltages(config)]


def build_dac_table(config: DacConfig) -> np.ndarray:
    """Build the 2^bits entry lookup table for *config*.

    The result is cached per configuration and returned read-only, so a
    single table can be shared by any number of voices.
    """
    config.validate()
    return _build_dac_table(config)


@functools.lru_cache(maxsize=None)
def _build_dac_table(config: DacConfig) -> np.ndarray:
    codes = np.arange(1 << config.bits, dtype=np.int64)
    acc = np.zeros_like(codes)
    for bit, contribution in enumerate(bit_contributions(config)):
        acc += ((codes >> bit) & 1) * contribution

    table = ((acc + (1 << (DAC_SCALE_BITS - 1))) >> DAC_SCALE_BITS).astype(np.uint16)
    table.setflags(write=False)

    log.info(f"Built {config.bits}-bit DAC table "
             f"(2R/R={config.ratio:.2f}, terminated={config.terminated})")
    return table


@dataclasses.dataclass(frozen=True)
class DacTables:
    """The three ladders of one chip model.

    wave:   12-bit waveform DAC
    cutoff: 11-bit filter cutoff DAC (consumed by the external filter stage)
    env:    8-bit envelope DAC
    """
    model: ChipModel
    wave: np.ndarray
    cutoff: np.ndarray
    env: np.ndarray


@functools.lru_cache(maxsize=None)
def dac_tables(model: ChipModel = ChipModel.MOS6581) -> DacTables:
    model = ChipModel(model)
    log.debug(f"Preparing DAC tables for the {MODEL_NAMES[model]}")
    return DacTables(
        model=model,
        wave=build_dac_table(DacConfig.for_model(model, WAVE_DAC_BITS)),
        cutoff=build_dac_table(DacConfig.for_model(model, CUTOFF_DAC_BITS)),
        env=build_dac_table(DacConfig.for_model(model, ENV_DAC_BITS)),
    )
