"""chatplay backend.

Session-based turn engine for human-vs-AI chat games: tic-tac-toe and the
Big Eater Competition, with AI turns generated by a language model.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
