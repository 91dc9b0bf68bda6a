#!/usr/bin/env python3
"""API server startup script."""

import sys
from pathlib import Path

# Add src to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

if __name__ == "__main__":
    import uvicorn

    from bookstore.config.settings import APP_ENV, PORT

    # Run the server using import string for reload to work
    uvicorn.run(
        "bookstore.main:app",
        host="0.0.0.0",
        port=PORT,
        reload=APP_ENV == "development",
        reload_dirs=[str(src_path)]
    )
