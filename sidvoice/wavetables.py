# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Measured combined-waveform tables.

Combined waveforms cannot be derived from the regular ones, so each
(model, combination) pair is read from a data file:

    wave<model>_<case>.hex     e.g. wave6581_PS.hex

The file holds 4096 whitespace separated hex bytes, indexed by the 12-bit
tri/saw sample, giving the top 8 bits of the 12-bit output. Text after a
``#`` is a comment. Anything else is a fatal load error.

The measured data is not distributed with the package. It is looked up in
$SIDVOICE_WAVE_DIR, else in sidvoice/data/, and can be converted from
reSID's raw captures with import_resid_tables().
"""

import functools
import logging
import os

import numpy as np

from .constants import (
    ChipModel, MODEL_NAMES,
    COMBINED_CASES, RESID_CASE_NAMES,
    WAVE_DIR_ENV, WAVE_DATA_DIR, WAVE_TABLE_SIZE, WAVE_MASK, WAVE_PULSE,
)

log = logging.getLogger(__name__)


class WaveTableError(ValueError):
    """Missing or malformed combined-waveform reference data."""


def wave_data_dir() -> str:
    return os.environ.get(WAVE_DIR_ENV) or WAVE_DATA_DIR


def table_path(model: ChipModel, case: str, directory: str = None) -> str:
    directory = directory or wave_data_dir()
    return os.path.join(directory, f"wave{MODEL_NAMES[ChipModel(model)]}_{case}.hex")


def parse_table(text: str, source: str = "<string>") -> np.ndarray:
    """Parse one table; raises WaveTableError unless it is exactly 4096 bytes."""
    values = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        for token in line.split("#", 1)[0].split():
            try:
                value = int(token, 16)
            except ValueError:
                raise WaveTableError(
                    f"{source}:{lineno}: not a hex byte: {token!r}") from None
            if not 0 <= value <= 0xFF:
                raise WaveTableError(
                    f"{source}:{lineno}: value out of range: {token!r}")
            values.append(value)

    if len(values) != WAVE_TABLE_SIZE:
        raise WaveTableError(
            f"{source}: expected {WAVE_TABLE_SIZE} entries, found {len(values)}")

    table = np.array(values, dtype=np.uint8)
    table.setflags(write=False)
    return table


def load_table(path: str) -> np.ndarray:
    try:
        with open(path, "r") as f:
            text = f.read()
    except OSError as e:
        raise WaveTableError(f"cannot read combined waveform table {path}: {e}") from e
    return parse_table(text, source=os.path.basename(path))


def write_table(path: str, table, header: str = ""):
    """Write *table* in the .hex format, 16 bytes per row."""
    table = np.asarray(table)
    if table.shape != (WAVE_TABLE_SIZE,) or table.min() < 0 or table.max() > 0xFF:
        raise WaveTableError(
            f"{os.path.basename(path)}: need {WAVE_TABLE_SIZE} byte values")

    with open(path, "w") as f:
        for line in header.splitlines():
            f.write(f"# {line}\n")
        for row in range(0, WAVE_TABLE_SIZE, 16):
            f.write(" ".join(f"{int(v):02x}" for v in table[row:row + 16]) + "\n")


def import_resid_tables(src_dir: str, dst_dir: str, model: ChipModel) -> list[str]:
    """Convert reSID's raw captures (wave6581_PS_.dat, ...) to .hex tables.

    Each capture is 4096 raw bytes. Returns the paths written.
    """
    model = ChipModel(model)
    name = MODEL_NAMES[model]
    written = []
    for selector, case in COMBINED_CASES.items():
        src = os.path.join(src_dir, f"wave{name}_{RESID_CASE_NAMES[selector]}.dat")
        try:
            with open(src, "rb") as f:
                raw = np.frombuffer(f.read(), dtype=np.uint8)
        except OSError as e:
            raise WaveTableError(f"cannot read reSID capture {src}: {e}") from e
        if len(raw) != WAVE_TABLE_SIZE:
            raise WaveTableError(
                f"{os.path.basename(src)}: expected {WAVE_TABLE_SIZE} bytes, found {len(raw)}")

        dst = table_path(model, case, dst_dir)
        write_table(dst, raw, header=f"{os.path.basename(dst)}: measured {name} "
                                     f"{case} output, from {os.path.basename(src)}")
        log.info(f"Converted {os.path.basename(src)} -> {os.path.basename(dst)}")
        written.append(dst)
    return written


class CombinedWaveforms:
    """The combined-waveform tables of one chip model.

    Tables are immutable once loaded and may be shared between voices.
    """

    def __init__(self, model: ChipModel, tables: dict):
        self.model = ChipModel(model)
        missing = set(COMBINED_CASES) - set(tables)
        if missing:
            raise WaveTableError(
                f"{MODEL_NAMES[self.model]}: missing tables for selectors "
                f"{sorted(missing)}")
        self._tables = dict(tables)

    @classmethod
    def load(cls, model: ChipModel, directory: str = None) -> "CombinedWaveforms":
        model = ChipModel(model)
        tables = {}
        for selector, case in COMBINED_CASES.items():
            path = table_path(model, case, directory)
            tables[selector] = load_table(path)
            log.info(f"Loaded {os.path.basename(path)}")
        return cls(model, tables)

    def table(self, selector: int) -> np.ndarray:
        return self._tables[selector]

    def lookup(self, selector: int, sample: int, pulse: bool) -> int:
        """12-bit output for a combined selector.

        *sample* is the 12-bit tri/saw sample; combinations that include
        the pulse are zero while the pulse is low.
        """
        if selector & WAVE_PULSE and not pulse:
            return 0
        return int(self._tables[selector][sample & WAVE_MASK]) << 4


def combined_waveforms(model: ChipModel, directory: str = None) -> CombinedWaveforms:
    """Load (once per directory) and return the tables for *model*."""
    return _load_combined(ChipModel(model), os.path.abspath(directory or wave_data_dir()))


@functools.lru_cache(maxsize=None)
def _load_combined(model: ChipModel, directory: str) -> CombinedWaveforms:
    return CombinedWaveforms.load(model, directory)
