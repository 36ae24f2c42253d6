# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

import numpy as np
import pytest

from sidvoice import (
    ChipModel, DacConfig, DacConfigError,
    bit_voltages, build_dac_table, dac_tables,
)
from sidvoice.dac import _build_dac_table
from sidvoice_tb import plot_dac_tables


def is_monotonic(table) -> bool:
    return bool(np.all(np.diff(table.astype(np.int64)) >= 0))


@pytest.mark.parametrize("bits", [8, 11, 12])
def test_8580_ladder_is_monotonic(bits):
    table = build_dac_table(DacConfig.for_model(ChipModel.MOS8580, bits))
    assert len(table) == 1 << bits
    assert is_monotonic(table)


def test_8580_ladder_is_linear():
    table = build_dac_table(DacConfig.for_model(ChipModel.MOS8580, 12))
    codes = np.arange(4096)
    ideal = codes * 4095 / 4096
    assert np.max(np.abs(table - ideal)) <= 1.0


def test_terminated_ladder_bit_weights_are_binary():
    assert bit_voltages(DacConfig(4, 2.0, True)) == pytest.approx(
        [1 / 16, 1 / 8, 1 / 4, 1 / 2])


def test_6581_ladder_is_not_monotonic():
    table = build_dac_table(DacConfig.for_model(ChipModel.MOS6581, 12))
    assert not is_monotonic(table)

    # The lower bits together outweigh the next bit up
    assert table[0x0FF] > table[0x100]
    assert table[0x7FF] > table[0x800]


def drops_by_boundary_bit(table) -> dict:
    """Largest downward step at each power-of-two boundary, keyed by bit."""
    steps = np.diff(table.astype(np.int64))
    drops = {}
    for code in np.nonzero(steps < 0)[0] + 1:
        bit = (int(code) & -int(code)).bit_length() - 1
        drops[bit] = max(drops.get(bit, 0), int(-steps[code - 1]))
    return drops


def test_6581_ladder_drop_distribution():
    table = build_dac_table(DacConfig.for_model(ChipModel.MOS6581, 12))
    steps = np.diff(table.astype(np.int64))
    assert np.count_nonzero(steps < 0) == 345

    drops = drops_by_boundary_bit(table)
    # Bits 0..2 carry too little weight to outweigh their lower bits
    assert drops == {3: 1, 4: 2, 5: 3, 6: 5, 7: 10, 8: 18, 9: 35, 10: 66, 11: 129}

    # Relative to the bit weight the error is largest in the low bits
    relative = [drops[bit] / (1 << bit) for bit in sorted(drops)]
    assert all(b <= a for a, b in zip(relative, relative[1:]))
    assert max(relative) == relative[0] == relative[1]


def test_6581_envelope_ladder_is_not_monotonic():
    env = dac_tables(ChipModel.MOS6581).env
    assert env[0x7F] > env[0x80]
    assert env[0] == 0


def test_6581_full_scale():
    table = build_dac_table(DacConfig.for_model(ChipModel.MOS6581, 12))
    assert table[0] == 0
    assert table[0xFFF] == 0xFFF


def test_model_tables():
    tables = dac_tables(ChipModel.MOS6581)
    assert tables.model == ChipModel.MOS6581
    assert len(tables.wave) == 4096
    assert len(tables.cutoff) == 2048
    assert len(tables.env) == 256

    plot_dac_tables({
        "6581 12-bit": tables.wave,
        "8580 12-bit": dac_tables(ChipModel.MOS8580).wave,
    }, filename="dac_tables.png", title="Waveform DAC transfer")


def test_tables_are_read_only_and_shared():
    config = DacConfig(12, 2.20, False)
    table = build_dac_table(config)

    assert build_dac_table(DacConfig.for_model(ChipModel.MOS6581, 12)) is table
    assert not table.flags.writeable
    with pytest.raises(ValueError):
        table[0] = 1


def test_tables_are_deterministic():
    config = DacConfig(11, 2.20, False)
    first = build_dac_table(config).copy()
    _build_dac_table.cache_clear()
    assert np.array_equal(build_dac_table(config), first)


@pytest.mark.parametrize("config", [
    DacConfig(0, 2.20, False),
    DacConfig(17, 2.20, False),
    DacConfig(12.0, 2.20, False),
    DacConfig(12, 1.0, True),
    DacConfig(12, 4.5, True),
    DacConfig(12, float("nan"), False),
    DacConfig(12, float("inf"), False),
])
def test_unsupported_config_fails_fast(config):
    with pytest.raises(DacConfigError):
        build_dac_table(config)
