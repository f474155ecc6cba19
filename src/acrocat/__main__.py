"""acrocat entrypoint.

Run with:
  python -m acrocat
"""

import logging
import os

import uvicorn


def main() -> None:
    host = os.getenv("ACROCAT_HOST", "0.0.0.0")
    port = int(os.getenv("ACROCAT_PORT", "8080"))
    reload = os.getenv("ACROCAT_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    logging.basicConfig(
        level=os.getenv("ACROCAT_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("acrocat.app:app", host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
