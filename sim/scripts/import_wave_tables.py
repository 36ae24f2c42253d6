"""
Converts reSID's measured combined-waveform captures to sidvoice tables.
"""

import argparse
import logging

from sidvoice import ChipModel, import_resid_tables, wave_data_dir

def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('src', help='directory holding wave6581_PS_.dat etc.')
    parser.add_argument('--model', choices=['6581', '8580'], required=True)
    parser.add_argument('--dst', default=None,
                        help='output directory (default: $SIDVOICE_WAVE_DIR or sidvoice/data)')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(message)s')
    model = ChipModel.MOS6581 if args.model == '6581' else ChipModel.MOS8580
    written = import_resid_tables(args.src, args.dst or wave_data_dir(), model)
    print(f"Wrote {len(written)} tables")

if __name__ == "__main__":
    main()
