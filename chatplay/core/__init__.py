# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for chatplay.

This package contains shared infrastructure used by the domains:
- config: Application configuration and settings
- intelligence: Language-model clients
"""
