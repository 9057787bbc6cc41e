"""Utility modules for LingoPaste.

This package provides logging setup and string helpers shared by the clients and the view layer.
"""

from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["LoggerUtils", "StringUtils"]
