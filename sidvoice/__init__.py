# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""Cycle-accurate model of a 6581/8580 SID voice."""

__version__ = "0.1.0"

from .constants import *        # noqa: F401,F403
from .control import *          # noqa: F401,F403
from .dac import *              # noqa: F401,F403
from .wavetables import *       # noqa: F401,F403
from .oscillator import *       # noqa: F401,F403
from .noise import *            # noqa: F401,F403
from .waveform import *         # noqa: F401,F403
from .dca import *              # noqa: F401,F403
from .voice import *            # noqa: F401,F403
from .render import *           # noqa: F401,F403
