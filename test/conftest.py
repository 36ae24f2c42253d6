# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

import os

from sidvoice import ChipModel, WAVE_DIR_ENV
from sidvoice_tb import TB_WAVE_DIR, write_test_tables


def pytest_configure(config):
    for model in ChipModel:
        write_test_tables(TB_WAVE_DIR, model)
    os.environ[WAVE_DIR_ENV] = TB_WAVE_DIR
