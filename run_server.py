#!/usr/bin/env python3
"""
Simple script to run the FastAPI server programmatically
"""
import os
import uvicorn

if __name__ == "__main__":
    dev_mode = os.getenv("ENV_MODE", "dev") == "dev"
    uvicorn.run(
        "crewledger.fastapi.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=dev_mode,
        log_level="info"
    )
