# Sonar server launcher
# Run this instead of: uvicorn sonar.main:app --reload
# Usage: python run.py

import sys
import asyncio

# Set Windows event loop policy before any other imports
if sys.platform == 'win32':
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "sonar.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_delay=0.5
    )
