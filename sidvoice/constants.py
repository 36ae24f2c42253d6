# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Bit widths, register bits, waveform selectors and per-model parameters."""

import enum
import os

# =============================================================================
#  Chip models
# =============================================================================


class ChipModel(enum.IntEnum):
    MOS6581 = 0
    MOS8580 = 1


MODEL_NAMES = {
    ChipModel.MOS6581: "6581",
    ChipModel.MOS8580: "8580",
}

# =============================================================================
#  Clocking
# =============================================================================

PAL_CLOCK_HZ  = 985_248
NTSC_CLOCK_HZ = 1_022_730
AUDIO_RATE    = 48_000     # Default target rate for reconstructed audio
FILT_ORDER    = 4          # Reconstruction low-pass order
FILT_CUTOFF   = 20_000     # Reconstruction low-pass cutoff (Hz)

# =============================================================================
#  Oscillator
# =============================================================================

ACC_BITS  = 24
ACC_MASK  = (1 << ACC_BITS) - 1
ACC_MSB   = ACC_BITS - 1
FREQ_MASK = 0xFFFF
PW_MASK   = 0x0FFF
WAVE_MASK = 0x0FFF         # 12-bit waveform sample
TRI_MASK  = 0x07FF         # Lower 11 bits, inverted for the triangle fold

# =============================================================================
#  Noise LFSR
# =============================================================================

NOISE_BITS  = 23
NOISE_MASK  = (1 << NOISE_BITS) - 1
NOISE_INIT  = NOISE_MASK   # Power-up value
NOISE_CLOCK_BIT = 19       # Accumulator bit that clocks the LFSR
NOISE_FEEDBACK  = (22, 17)
AGE_MASK    = (1 << 24) - 1

# Output bit positions, most significant first
NOISE_TAPS = (20, 18, 14, 11, 9, 5, 2, 0)
NOISE_TAP_MASK = sum(1 << b for b in NOISE_TAPS)

NOISE_FILL_THRESHOLD = {
    ChipModel.MOS6581: 0x008000,   # 32768 cycles
    ChipModel.MOS8580: 0x950000,   # 9764864 cycles
}

# =============================================================================
#  Control register (CTRL) bits
# =============================================================================

CTRL_GATE  = 0x01
CTRL_SYNC  = 0x02
CTRL_RING  = 0x04
CTRL_TEST  = 0x08

# =============================================================================
#  Waveform selector (upper nibble of CTRL, shifted down)
# =============================================================================

WAVE_TRI   = 0x1
WAVE_SAW   = 0x2
WAVE_PULSE = 0x4
WAVE_NOISE = 0x8

WAVE_ST  = WAVE_SAW | WAVE_TRI
WAVE_PT  = WAVE_PULSE | WAVE_TRI
WAVE_PS  = WAVE_PULSE | WAVE_SAW
WAVE_PST = WAVE_PULSE | WAVE_SAW | WAVE_TRI

WAVEFORM_NAMES = {
    WAVE_TRI:   "Triangle",
    WAVE_SAW:   "Sawtooth",
    WAVE_PULSE: "Pulse",
    WAVE_NOISE: "Noise",
}

# File suffix of each measured combination table
COMBINED_CASES = {
    WAVE_ST:  "ST",
    WAVE_PT:  "PT",
    WAVE_PS:  "PS",
    WAVE_PST: "PST",
}

# =============================================================================
#  DAC ladder
# =============================================================================

DAC_RATIO = {
    ChipModel.MOS6581: 2.20,
    ChipModel.MOS8580: 2.00,
}

DAC_TERMINATED = {
    ChipModel.MOS6581: False,
    ChipModel.MOS8580: True,
}

DAC_SCALE_BITS = 8         # Fixed-point fraction of per-bit contributions
DAC_MAX_BITS   = 16

WAVE_DAC_BITS   = 12
CUTOFF_DAC_BITS = 11
ENV_DAC_BITS    = 8

# Only the 6581 ladder is non-linear enough to be modelled
USES_DAC = {
    ChipModel.MOS6581: True,
    ChipModel.MOS8580: False,
}

# =============================================================================
#  Mixer (DCA)
# =============================================================================

# Waveform zero level is 0x380 on the 6581 and mid-scale on the 8580
WAVE_OFFSET = {
    ChipModel.MOS6581: 0x800 - 0x380,
    ChipModel.MOS8580: 0x000,
}

VOICE_DC = {
    ChipModel.MOS6581: 0x800 * 0xFF,
    ChipModel.MOS8580: 0,
}

OUTPUT_BITS = 24
ENV_MASK    = 0xFF

# =============================================================================
#  Latency
# =============================================================================

PIPELINE_LATENCY = 2       # Oscillator commit -> voice output

SAW_TRI_DELAY = {
    ChipModel.MOS6581: 0,
    ChipModel.MOS8580: 1,
}

PULSE_DELAY = 1            # Relative to saw/tri on the 6581
NOISE_DELAY = 2

# =============================================================================
#  Reference data
# =============================================================================

# Measured combined-waveform tables are not shipped; they are looked up in
# the directory named by WAVE_DIR_ENV, else in the package data directory
WAVE_DIR_ENV    = "SIDVOICE_WAVE_DIR"
WAVE_DATA_DIR   = os.path.join(os.path.dirname(__file__), "data")
WAVE_TABLE_SIZE = 4096

# reSID capture file infix of each combination, e.g. wave6581_PS_.dat
RESID_CASE_NAMES = {
    WAVE_ST:  "__ST",
    WAVE_PT:  "P_T",
    WAVE_PS:  "PS_",
    WAVE_PST: "PST",
}
