"""
config/logging_config.py
BB84 simulator — Centralised logging configuration.

Usage in any module:
    from config.logging_config import configure_logging, get_logger
    configure_logging()          # call once at entry point
    log = get_logger("qkd.protocol")
    log.info("Starting key exchange...")
"""

import logging
import logging.config
import os

LOG_DIR: str = "logs"

# ---------------------------------------------------------------------------
# Named loggers used across the project
# "qkd.protocol"    — sender / receiver communicator steps
# "qkd.channel"     — channel writes and transcript
# "qkd.attacker"    — intercept-resend eavesdropper
# "qkd.experiment"  — experiment manager and CLI
# ---------------------------------------------------------------------------

_LOGGING_CONFIG: dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "brief": {
            "format": "[%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "brief",
            "level": "INFO",
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "level": "DEBUG",
            "filename": os.path.join(LOG_DIR, "bb84_session.log"),
            "maxBytes": 5_242_880,   # 5 MB before rotating
            "backupCount": 3,
            "mode": "a",
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "qkd.protocol": {
            "handlers": ["console", "file"],
            "level": "DEBUG",
            "propagate": False,
        },
        "qkd.channel": {
            "handlers": ["file"],
            "level": "DEBUG",
            "propagate": False,
        },
        "qkd.attacker": {
            "handlers": ["console", "file"],
            "level": "DEBUG",
            "propagate": False,
        },
        "qkd.experiment": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"],
    },
}


def configure_logging(verbose: bool = False) -> None:
    """
    Initialise logging from the built-in config dict.
    Call this exactly ONCE at the entry point (run_protocol.py).

    Args:
        verbose: Lower the console handler to DEBUG so every protocol
                 step is echoed to stdout.
    """
    os.makedirs(LOG_DIR, exist_ok=True)
    config = dict(_LOGGING_CONFIG)
    if verbose:
        handlers = dict(config["handlers"])
        handlers["console"] = dict(handlers["console"], level="DEBUG")
        config["handlers"] = handlers
    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    """
    Convenience wrapper — returns a named logger.
    Recommended names: 'qkd.protocol', 'qkd.channel',
    'qkd.attacker', 'qkd.experiment'
    """
    return logging.getLogger(name)
