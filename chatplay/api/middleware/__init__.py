# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components."""

from chatplay.api.middleware.log_context import REQUEST_ID_HEADER, LogContextMiddleware

__all__ = ["LogContextMiddleware", "REQUEST_ID_HEADER"]
