# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Server entry point.

Usage:
    madrasah-engine
    uvicorn src.api.app:create_app --factory
"""

import uvicorn

from src.core.config import get_settings


def run() -> None:
    """Serve the API with uvicorn on the configured address."""
    settings = get_settings()
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.log_level.lower(),
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
