# SPDX-FileCopyrightText: © 2024 Tiny Tapeout
# SPDX-License-Identifier: Apache-2.0

"""pytest helpers for the sidvoice cycle model."""

from .constants import *        # noqa: F401,F403
from .signals import *          # noqa: F401,F403
from .plotting import *         # noqa: F401,F403
from .tables import *           # noqa: F401,F403
