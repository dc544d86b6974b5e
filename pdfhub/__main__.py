"""
`python -m pdfhub`: serve the app on $PORT.
"""

import logging

import uvicorn

from pdfhub.main import app

logger = logging.getLogger(__name__)


def main() -> None:
    settings = app.state.settings
    logger.info("Server running on http://localhost:%d", settings.PORT)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
