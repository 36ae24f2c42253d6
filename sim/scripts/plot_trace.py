"""
Plots a voice cycle trace written by render_voice.py.
"""

import pandas as pd
import matplotlib.pyplot as plt

CSV_FILE   = '../tmp/voice_trace.csv'
OUTPUT_PNG = '../out/voice_trace.png'
VOICE_DC   = 0x800 * 0xFF    # 6581 output level for a zero waveform

def main():
    df = pd.read_csv(CSV_FILE)

    # sample = DC + waveform * envelope, back to waveform units
    df['scaled_voice'] = (df['sample'] - VOICE_DC) / 255

    fig, (ax_out, ax_rb) = plt.subplots(2, 1, figsize=(12, 6), sharex=True)
    ax_out.plot(df['time_sec'] * 1e3, df['scaled_voice'], linewidth=1, color='black')
    ax_out.set_title('Voice Output')
    ax_out.set_ylabel('Amplitude')
    ax_out.grid(linestyle='--', alpha=0.5)

    ax_rb.step(df['time_sec'] * 1e3, df['readback'], linewidth=1, color='blue', where='post')
    ax_rb.set_title('Oscillator Readback')
    ax_rb.set_xlabel('Time [ms]')
    ax_rb.set_ylabel('Byte')
    ax_rb.set_ylim(-8, 263)
    ax_rb.grid(linestyle='--', alpha=0.5)

    plt.tight_layout()
    plt.savefig(OUTPUT_PNG, dpi=400)
    print('Done...')

if __name__ == "__main__":
    main()
