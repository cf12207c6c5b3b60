#!/usr/bin/env python3
"""
Main entry point for the catalog sync service
"""

import uvicorn

from catalog_sync.core.config import settings
from catalog_sync.core.logging import LoggingConfig, setup_logging

if __name__ == "__main__":
    # Setup logging before starting uvicorn
    setup_logging(LoggingConfig.from_settings(settings.logging))

    uvicorn.run(
        "catalog_sync.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info" if not settings.DEBUG else "debug",
        log_config=None,  # Keep our logging configuration
    )
