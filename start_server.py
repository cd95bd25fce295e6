#!/usr/bin/env python3
import sys
import os

# Add the project root to Python path
backend_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, backend_dir)

import uvicorn

if __name__ == "__main__":
    uvicorn.run("lawdesk.main:app", host="0.0.0.0", port=8000, reload=True)
