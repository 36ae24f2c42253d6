"""
Plots the R-2R DAC transfer curves of both chip models.
"""

import numpy as np
import matplotlib.pyplot as plt

from sidvoice import ChipModel, dac_tables, DacConfig, build_dac_table

OUTPUT_PNG = '../out/dac_curves.png'
ZOOM_CODE  = 0x800           # 6581 wave DAC MSB step

def main():
    fig, axes = plt.subplots(2, 2, figsize=(14, 8))

    for ax, attr, bits in zip(axes[0], ('wave', 'env'), (12, 8)):
        for model in ChipModel:
            config = DacConfig.for_model(model, bits)
            table = build_dac_table(config)
            ax.plot(np.arange(len(table)), table, linewidth=1,
                    label=f'{model.name} (ratio {config.ratio:.2f})')
        ax.set_title(f'{attr} DAC ({bits} bit)')
        ax.set_xlabel('Input code')
        ax.set_ylabel('Output code')
        ax.legend(loc='upper left')
        ax.grid(linestyle='--', alpha=0.5)

    # Non-monotonic step of the unterminated 6581 ladder
    wave = dac_tables(ChipModel.MOS6581).wave
    codes = np.arange(ZOOM_CODE - 32, ZOOM_CODE + 32)
    axes[1][0].step(codes, wave[codes], color='black', where='post')
    axes[1][0].axvline(ZOOM_CODE, color='red', linestyle='--', alpha=0.5)
    axes[1][0].set_title(f'6581 wave DAC around 0x{ZOOM_CODE:03X}')
    axes[1][0].set_xlabel('Input code')
    axes[1][0].grid(linestyle='--', alpha=0.5)

    ideal = np.arange(len(wave)) * (len(wave) - 1) / len(wave)
    axes[1][1].plot(wave.astype(np.float64) - ideal, linewidth=0.5, color='teal')
    axes[1][1].set_title('6581 wave DAC deviation from ideal')
    axes[1][1].set_xlabel('Input code')
    axes[1][1].grid(linestyle='--', alpha=0.5)

    plt.tight_layout()
    plt.savefig(OUTPUT_PNG, dpi=400)
    print('Done...')

if __name__ == "__main__":
    main()
