#!/usr/bin/env python3
"""
Run script for the Callsight call analysis API
"""
import uvicorn

from callsight.config.settings import settings
from callsight.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
