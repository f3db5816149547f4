"""
* This file is part of PYSEGVIZ
*
* Copyright (C) 2026-present the PYSEGVIZ authors
*
* PYSEGVIZ is free software: you can redistribute it and/or modify
* it under the terms of the GNU General Public License as published by
* the Free Software Foundation, either version 3 of the License, or
* (at your option) any later version.
*
* PYSEGVIZ is distributed in the hope that it will be useful,
* but WITHOUT ANY WARRANTY; without even the implied warranty of
* MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
* GNU General Public License for more details.
*
* You should have received a copy of the GNU General Public License
* along with PYSEGVIZ. If not, see <http://www.gnu.org/licenses/>.
"""

import os
import sys
import logging

from termcolor import colored


def _join(args):
    return " ".join(str(arg) for arg in args)


# Class to print colored text on the console
class Printer(object):
    @staticmethod
    def _print(color, *args, file=None, **kwargs):
        print(colored(_join(args), color), file=file or sys.stdout, **kwargs)

    @staticmethod
    def red(*args, **kwargs):
        Printer._print("red", *args, **kwargs)

    @staticmethod
    def green(*args, **kwargs):
        Printer._print("green", *args, **kwargs)

    @staticmethod
    def cyan(*args, **kwargs):
        Printer._print("cyan", *args, **kwargs)

    @staticmethod
    def orange(*args, **kwargs):
        # termcolor has no orange, yellow is the closest match
        Printer._print("yellow", *args, **kwargs)


# for logging to files
class Logging(object):
    """
    A class for logging to multiple files.
    Example:
    logger = Logging.setup_file_logger('pipeline_logger', 'logs/frame_pipeline.log')
    logger.info('frame 3 decoded')
    Logging.close_logger(logger)
    """

    time_log_formatter = logging.Formatter("%(levelname)s[%(asctime)s] %(message)s")

    @staticmethod
    def setup_file_logger(
        name, log_file, level=logging.INFO, mode="+w", formatter=time_log_formatter
    ):  # to file
        """To setup as many loggers as you want with a selected formatter"""
        log_folder = os.path.dirname(log_file)
        if log_folder and not os.path.exists(log_folder):
            os.makedirs(log_folder)
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            handler = logging.FileHandler(log_file, mode=mode)
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        return logger

    @staticmethod
    def close_logger(logger):
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
