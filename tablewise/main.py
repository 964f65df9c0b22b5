# Load environment variables FIRST, before any module imports that need them
from dotenv import load_dotenv
load_dotenv()

import logging
import os

from .app_factory import create_app

logger = logging.getLogger(__name__)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info("Starting Tablewise on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
