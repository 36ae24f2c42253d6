# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

import os

import numpy as np
import pytest

from sidvoice import (
    ChipModel, CombinedWaveforms, Voice, WaveTableError,
    COMBINED_CASES, MODEL_NAMES, RESID_CASE_NAMES, WAVE_DIR_ENV,
    WAVE_ST, WAVE_PS, WAVE_PST,
    combined_waveforms, import_resid_tables, load_table, parse_table,
    table_path, write_table,
)
from sidvoice_tb import MEASURED_WAVE_DIR, TB_WAVE_DIR, tb_pattern, write_test_tables


def measured_tables_installed(model) -> bool:
    return all(os.path.isfile(table_path(model, case, MEASURED_WAVE_DIR))
               for case in COMBINED_CASES.values())


@pytest.mark.parametrize("model", list(ChipModel))
def test_tables_load_from_configured_directory(model):
    waves = combined_waveforms(model)
    for selector in COMBINED_CASES:
        table = waves.table(selector)
        assert table.shape == (4096,)
        assert table.dtype == np.uint8
        assert not table.flags.writeable
        assert table[0x123] == tb_pattern(selector, 0x123)


def test_tables_are_loaded_once():
    assert combined_waveforms(ChipModel.MOS8580) is combined_waveforms(ChipModel.MOS8580)
    assert combined_waveforms(ChipModel.MOS8580) is combined_waveforms(ChipModel.MOS8580,
                                                                       TB_WAVE_DIR)


def test_voice_needs_measured_tables(tmp_path, monkeypatch):
    monkeypatch.setenv(WAVE_DIR_ENV, str(tmp_path))
    with pytest.raises(WaveTableError, match="cannot read"):
        Voice(ChipModel.MOS8580)

    # Nothing is synthesised in place of the missing data
    write_test_tables(tmp_path, ChipModel.MOS8580)
    os.remove(table_path(ChipModel.MOS8580, COMBINED_CASES[WAVE_PST], str(tmp_path)))
    with pytest.raises(WaveTableError, match="PST"):
        Voice(ChipModel.MOS8580)


@pytest.mark.parametrize("model", list(ChipModel))
def test_installed_tables_are_measured(model):
    if not measured_tables_installed(model):
        pytest.skip(f"measured {MODEL_NAMES[model]} tables not installed")

    waves = CombinedWaveforms.load(model, MEASURED_WAVE_DIR)
    index = np.arange(4096)
    saw = index >> 4
    tri = ((np.where(index & 0x800, index ^ 0x7FF, index) & 0x7FF) << 1) >> 4

    # Measured combinations are not the plain sawtooth or an AND of the parts
    assert not np.array_equal(waves.table(WAVE_PS), saw)
    assert not np.array_equal(waves.table(WAVE_ST), saw & tri)
    assert waves.table(WAVE_PS)[0] == 0


def test_load_from_directory(tmp_path):
    write_test_tables(tmp_path, ChipModel.MOS6581, lambda sel, i: (i + sel) & 0xFF)
    waves = CombinedWaveforms.load(ChipModel.MOS6581, str(tmp_path))

    assert waves.model == ChipModel.MOS6581
    assert waves.table(WAVE_ST)[5] == (5 + WAVE_ST) & 0xFF
    assert waves.table(WAVE_PS)[0xFFF] == (0xFFF + WAVE_PS) & 0xFF


def write_resid_captures(directory, model, size=4096):
    rng = np.random.default_rng(6581)
    captures = {}
    for selector in COMBINED_CASES:
        raw = rng.integers(0, 256, size, dtype=np.uint8)
        name = f"wave{MODEL_NAMES[model]}_{RESID_CASE_NAMES[selector]}.dat"
        (directory / name).write_bytes(raw.tobytes())
        captures[selector] = raw
    return captures


@pytest.mark.parametrize("model", list(ChipModel))
def test_import_resid_tables(tmp_path, model):
    src = tmp_path / "resid"
    dst = tmp_path / "tables"
    src.mkdir()
    dst.mkdir()
    captures = write_resid_captures(src, model)

    written = import_resid_tables(str(src), str(dst), model)
    assert len(written) == 4

    waves = CombinedWaveforms.load(model, str(dst))
    for selector, raw in captures.items():
        assert np.array_equal(waves.table(selector), raw)


def test_import_rejects_truncated_capture(tmp_path):
    write_resid_captures(tmp_path, ChipModel.MOS6581, size=4000)
    with pytest.raises(WaveTableError, match="4096"):
        import_resid_tables(str(tmp_path), str(tmp_path), ChipModel.MOS6581)


def test_import_missing_capture(tmp_path):
    with pytest.raises(WaveTableError, match="cannot read"):
        import_resid_tables(str(tmp_path), str(tmp_path), ChipModel.MOS8580)


def test_write_table_keeps_header_as_comment(tmp_path):
    path = str(tmp_path / "t.hex")
    table = (np.arange(4096) & 0xFF).astype(np.uint8)
    write_table(path, table, header="first line\nsecond line")
    with open(path) as f:
        assert f.readline() == "# first line\n"
    assert np.array_equal(load_table(path), table)

    with pytest.raises(WaveTableError):
        write_table(path, table[:100])


def test_comments_and_layout_are_free():
    text = "# header\n" + "\n".join(["ff  ff # trailing"] * 2048)
    assert np.all(parse_table(text) == 0xFF)


def test_lookup_is_gated_by_pulse():
    table = (np.arange(4096) & 0xFF).astype(np.uint8)
    waves = CombinedWaveforms(ChipModel.MOS8580, {sel: table for sel in COMBINED_CASES})

    assert waves.lookup(WAVE_ST, 0x123, pulse=False) == 0x23 << 4
    assert waves.lookup(WAVE_PST, 0x123, pulse=True) == 0x23 << 4
    assert waves.lookup(WAVE_PST, 0x123, pulse=False) == 0


def test_wrong_entry_count():
    with pytest.raises(WaveTableError, match="4096"):
        parse_table("00 " * 4095)


def test_bad_token():
    with pytest.raises(WaveTableError, match="not a hex byte"):
        parse_table("zz " + "00 " * 4095)


def test_value_out_of_range():
    with pytest.raises(WaveTableError, match="out of range"):
        parse_table("100 " + "00 " * 4095)


def test_missing_file(tmp_path):
    with pytest.raises(WaveTableError, match="cannot read"):
        CombinedWaveforms.load(ChipModel.MOS6581, str(tmp_path))


def test_missing_combination():
    table = np.zeros(4096, dtype=np.uint8)
    with pytest.raises(WaveTableError, match="missing"):
        CombinedWaveforms(ChipModel.MOS6581, {WAVE_ST: table})
