# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migrations package.

Alembic revisions for the engine tables live in ``versions``; ``runner``
applies them programmatically.
"""
