"""Madrasah Engine Backend.

Curriculum progress tracking, exam ranking and school calendar resolution
for multi-tenant madrasah operations.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "0.1.0"
