#!/usr/bin/env python3
"""
.env file loading

Parsing of the .env format is delegated to python-dotenv; this module only
locates the file and reports problems through logging.
"""

import os
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values, load_dotenv

from beancontext.observation.logger import get_logger

logger = get_logger(__name__)


def read_env_file(env_file_path: Union[str, Path]) -> Dict[str, str]:
    """
    Read a .env file without touching os.environ

    Args:
        env_file_path: Path of the .env file

    Returns:
        Dict[str, str]: Key/value pairs, empty when the file does not exist.
        Keys declared without a value are skipped.
    """
    path = Path(env_file_path)
    if not path.exists():
        logger.warning(".env file does not exist: %s", path)
        return {}

    try:
        values = dotenv_values(path)
    except (IOError, OSError) as e:
        logger.error("Failed to load .env file: %s", e)
        return {}

    logger.debug("Successfully loaded .env file: %s (%d keys)", path, len(values))
    return {key: val for key, val in values.items() if val is not None}


def load_env_file(
    env_file_path: Union[str, Path], check_env_var: Optional[str] = None
) -> bool:
    """
    Load .env file into os.environ

    Args:
        env_file_path: Path of the .env file
        check_env_var: Environment variable name to check, used to determine if environment has been loaded

    Returns:
        bool: Whether environment variables were successfully loaded
    """
    path = Path(env_file_path)
    if not path.exists():
        logger.warning(".env file does not exist: %s", path)
        return False

    try:
        load_dotenv(path)
        logger.debug("Successfully loaded .env file: %s", path)
    except (IOError, OSError) as e:
        logger.error("Failed to load .env file: %s", e)
        return False

    if check_env_var and not os.getenv(check_env_var):
        logger.error(
            "Please ensure that the %s environment variable is set", check_env_var
        )
        return False
    return True
