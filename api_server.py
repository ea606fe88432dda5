"""
Run the Fund Compass JSON API.

    python api_server.py

Listens on ``API_HOST``:``API_PORT`` (default 0.0.0.0:8000).  Settings
for the tracker itself come from the environment, see
``fund_lib.core.config``.
"""

import os

import uvicorn

from fund_lib.services.api import app

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
    )
