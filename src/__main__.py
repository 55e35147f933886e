import sys
from pathlib import Path

import uvicorn

SRC = Path(__file__).resolve().parent

if __name__ == "__main__":
    sys.path.insert(0, str(SRC))
    from config import settings

    uvicorn.run(
        "api.app:app",
        app_dir=str(SRC),
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
