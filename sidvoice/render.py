# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Cycle capture and audio-rate reconstruction of voice output."""

import logging
from typing import Callable, Union

import numpy as np
from scipy.io import wavfile
from scipy.signal import bessel, sosfilt

from .constants import (
    PAL_CLOCK_HZ, AUDIO_RATE, FILT_ORDER, FILT_CUTOFF, OUTPUT_BITS, ENV_MASK,
)
from .control import ControlFields
from .voice import Voice

log = logging.getLogger(__name__)

# A fixed ControlFields, or a function of the cycle index returning one
Schedule = Union[ControlFields, Callable[[int], ControlFields]]


def capture(voice: Voice, ctrl: Schedule, cycles: int,
            envelope: int = ENV_MASK,
            log_every: int = 0) -> tuple[np.ndarray, np.ndarray]:
    """Clock *voice* for *cycles* cycles.

    Returns (samples, readback): signed 24-bit voice samples as int32 and
    the readback bytes as uint8, one entry per cycle.
    """
    samples = np.empty(cycles, dtype=np.int32)
    readback = np.empty(cycles, dtype=np.uint8)
    schedule = ctrl if callable(ctrl) else (lambda _: ctrl)

    for i in range(cycles):
        out = voice.clock(schedule(i), envelope=envelope)
        samples[i] = out.sample
        readback[i] = out.readback

        if log_every and (i + 1) % log_every == 0:
            log.info(f"[capture] {i + 1}/{cycles} cycles")

    return samples, readback


def reconstruct(samples: np.ndarray, clock_hz: int = PAL_CLOCK_HZ,
                rate: int = AUDIO_RATE) -> tuple[np.ndarray, float]:
    """Low-pass and decimate cycle-rate samples to roughly *rate* Hz.

    The decimation factor is the nearest integer to clock_hz / rate, so
    the effective output rate is returned alongside the audio, which is
    normalised to +/-1.0 full-scale with the DC level removed.
    """
    decimation = max(1, int(round(clock_hz / rate)))
    cutoff = min(FILT_CUTOFF, 0.45 * clock_hz / decimation)

    sig = np.asarray(samples, dtype=np.float64) / float(1 << (OUTPUT_BITS - 1))
    sig = sig - np.mean(sig)

    sos = bessel(FILT_ORDER, cutoff, btype='low', fs=clock_hz, output='sos')
    filtered = sosfilt(sos, sig)
    audio = filtered[::decimation]

    peak = np.max(np.abs(audio)) if len(audio) else 0.0
    if peak > 0:
        audio = audio / peak

    return audio, clock_hz / decimation


def write_wav(path: str, audio: np.ndarray, rate: float):
    wavfile.write(path, int(round(rate)), np.asarray(audio, dtype=np.float32))
    log.info(f"Saved {path} ({len(audio):,} samples, {len(audio) / rate:.2f}s)")
