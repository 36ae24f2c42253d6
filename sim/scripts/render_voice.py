"""
Renders one voice to a cycle trace (CSV) and reconstructed audio (WAV).
"""

import argparse

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from sidvoice import (
    ChipModel, ControlFields, Voice, PAL_CLOCK_HZ, AUDIO_RATE,
    capture, combined_waveforms, reconstruct, write_wav, waveform_name,
)

CSV_FILE    = '../tmp/voice_trace.csv'
OUTPUT_WAV  = '../out/voice.wav'
OUTPUT_PNG  = '../out/voice.png'
DURATION    = 0.5             # Seconds of voice output
CSV_CYCLES  = 20_000          # Cycles written to the trace

def parse_args():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--model', choices=['6581', '8580'], default='6581')
    parser.add_argument('--waveform', type=lambda s: int(s, 0), default=0x2,
                        help='waveform select nibble: 1 tri, 2 saw, 4 pulse, 8 noise')
    parser.add_argument('--freq', type=lambda s: int(s, 0), default=0x1CD6,
                        help='16-bit frequency register (default ~440 Hz at PAL)')
    parser.add_argument('--pw', type=lambda s: int(s, 0), default=0x800)
    parser.add_argument('--envelope', type=lambda s: int(s, 0), default=0xFF)
    parser.add_argument('--duration', type=float, default=DURATION)
    parser.add_argument('--wave-dir', default=None,
                        help='measured combined-waveform tables (default: $SIDVOICE_WAVE_DIR)')
    return parser.parse_args()

def main():
    args = parse_args()
    model = ChipModel.MOS6581 if args.model == '6581' else ChipModel.MOS8580
    ctrl = ControlFields(waveform=args.waveform, freq=args.freq, pw=args.pw)
    cycles = int(args.duration * PAL_CLOCK_HZ)

    hz = args.freq * PAL_CLOCK_HZ / (1 << 24)
    print(f"{model.name}: {waveform_name(ctrl.waveform)} @ {hz:.1f} Hz, {cycles:,} cycles")

    voice = Voice(model, wave_tables={model: combined_waveforms(model, args.wave_dir)})
    samples, readback = capture(voice, ctrl, cycles, envelope=args.envelope,
                                log_every=cycles // 10)

    # Cycle trace
    n = min(CSV_CYCLES, cycles)
    df = pd.DataFrame({
        'cycle':    np.arange(1, n + 1),
        'time_sec': np.arange(n) / PAL_CLOCK_HZ,
        'sample':   samples[:n],
        'readback': readback[:n],
    })
    df.to_csv(CSV_FILE, index=False)
    print(f"Saved {CSV_FILE} ({n:,} cycles)")

    audio, rate = reconstruct(samples, PAL_CLOCK_HZ, AUDIO_RATE)
    print(f"Downsampled: {len(audio):,} samples at {rate/1e3:.1f} kHz")
    write_wav(OUTPUT_WAV, audio, rate)

    # plot
    t = np.arange(len(audio)) / rate

    fig, axes = plt.subplots(2, 1, figsize=(14, 8))
    axes[0].plot(t, audio, color='teal', linewidth=0.5)
    axes[0].set_title(f'{model.name} {waveform_name(ctrl.waveform)} (reconstructed)')
    axes[0].set_xlabel('Time [s]')
    axes[0].set_ylabel('Amplitude')
    axes[0].grid(linestyle='--', alpha=0.5)

    # Zoomed view (~20ms window at midpoint)
    mid = len(audio) // 2
    window = int(0.01 * rate)
    sl = slice(max(0, mid - window), min(len(audio), mid + window))
    axes[1].plot(t[sl], audio[sl], color='black', linewidth=2.0)
    axes[1].set_title('Zoomed View (20 ms)')
    axes[1].set_xlabel('Time [s]')
    axes[1].set_ylabel('Amplitude')
    axes[1].grid(linestyle='--', alpha=0.5)

    plt.tight_layout()
    plt.savefig(OUTPUT_PNG, dpi=400)

if __name__ == "__main__":
    main()
