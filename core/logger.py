"""Logging configuration for DepDiff front ends."""

import sys

from loguru import logger


def setup_logger(verbose: bool = False) -> None:
    """Configure loguru's stderr sink.

    Report lines and diagnostics are printed directly, not logged, so the
    default level keeps stderr limited to warnings and above.

    Args:
        verbose: Log DEBUG+ (git commands, per-manifest progress) to stderr
    """
    logger.remove()

    if verbose:
        logger.add(
            sys.stderr,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level="DEBUG",
        )
    else:
        logger.add(sys.stderr, format="{level}: {message}", level="WARNING")
