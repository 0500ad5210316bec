"""python -m pushwave: resolve credentials, then serve with uvicorn on HOST:PORT."""
import logging
import sys

import uvicorn

from pushwave.core.config import Settings
from pushwave.core.errors import CredentialsError
from pushwave.main import create_app

log = logging.getLogger("pushwave.server")


def main() -> int:
    settings = Settings()
    try:
        app = create_app(settings)
    except CredentialsError:
        # Accepted configuration shapes are already logged by load_credentials
        return 1
    log.info("Running at http://localhost:%d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
