import sys

from loguru import logger as loguru_logger

logger = loguru_logger


def setup_logger(service: str, log_path: str = "../logs/explorer.log", record_filter=None):
    global logger

    logger.remove()
    logger.add(
        log_path,
        rotation="500 MB",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
        level="DEBUG",
        filter=record_filter
    )

    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <blue>{message}</blue> | {extra}",
        level="DEBUG",
        filter=record_filter
    )

    logger = logger.bind(service=service)
    return logger
