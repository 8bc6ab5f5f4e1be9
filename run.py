"""
Server startup script.
Run from project root: python run.py

Host and port come from API_HOST / API_PORT (.env), defaulting to 0.0.0.0:8000.
"""
import logging

import uvicorn

import config

if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "app.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=False,
    )
