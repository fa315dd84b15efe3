import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = 'playhub_bot'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are chatty at DEBUG
NOISY_LOGGERS = ('aiohttp.access', 'aiohttp.client', 'discord.gateway', 'discord.http')


def setup_logger(
    name: str = PACKAGE_LOGGER,
    debug: bool = False,
    log_dir: Optional[Union[str, Path]] = 'logs',
) -> logging.Logger:
    """
    Attach console and daily file handlers to ``name``.
    
    Called once for the package logger, every ``playhub_bot.*`` module
    logger propagates to it. Calling again for a configured logger is a no-op.
    
    Args:
        name: Logger to configure
        debug: Log at DEBUG instead of INFO on the console
        log_dir: Directory for ``playhub_bot_YYYYMMDD.log``; None disables the file
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)
    
    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            path / f'playhub_bot_{datetime.now():%Y%m%d}.log',
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug else logging.WARNING)
    
    return logger
