import uvicorn

from constants import HOST, PORT, RELOAD, LOG_LEVEL, LOG_FILE
from logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def main():
    setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
    logger.info(f"Starting live session server on {HOST}:{PORT}")
    # app.py configures logging again on import with the same settings
    uvicorn.run("app:app", host=HOST, port=PORT, reload=RELOAD)


if __name__ == "__main__":
    main()
