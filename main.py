from __future__ import annotations

import uvicorn

from cashcrash.core.config import settings
from cashcrash.main import app


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
