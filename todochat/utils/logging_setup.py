"""
Logging configuration for the todochat package.

Modules log through logging.getLogger( __name__ ); this installs the one
handler they all propagate to.
"""

import logging
import sys
from typing import Optional

from todochat.config.configuration_manager import ConfigurationManager

ROOT_LOGGER_NAME = "todochat"
LOG_FORMAT       = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging( level: Optional[str] = None ) -> logging.Logger:
    """
    Configure the package logger.

    Requires:
        - level is a logging level name, or None to use config key "logging level"

    Ensures:
        - Exactly one stream handler on the "todochat" logger, however often this is called
        - Unknown level names fall back to INFO
    """
    if level is None:
        level = ConfigurationManager().get( "logging level", default="INFO" )

    numeric_level = logging.getLevelName( str( level ).upper() )
    if not isinstance( numeric_level, int ):
        numeric_level = logging.INFO

    logger = logging.getLogger( ROOT_LOGGER_NAME )
    logger.setLevel( numeric_level )

    if not any( getattr( handler, "_todochat_handler", False ) for handler in logger.handlers ):
        handler = logging.StreamHandler( sys.stderr )
        handler.setFormatter( logging.Formatter( LOG_FORMAT ) )
        handler._todochat_handler = True
        logger.addHandler( handler )

    return logger
