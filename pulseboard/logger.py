import logging
import os
import sys
from typing import Optional

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_configured = False


def _configure_root():
    global _configured
    if _configured:
        return
    root = logging.getLogger('pulseboard')
    root.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root.addHandler(handler)
    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Module logger nested under the ``pulseboard`` root"""
    _configure_root()
    return logging.getLogger(name or 'pulseboard')
