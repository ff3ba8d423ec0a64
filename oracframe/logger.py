# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Logging set-up for applications using oracframe. Library modules only ever
call logging.getLogger(__name__); attaching handlers is left to whoever
drives the pipeline, via start_logger() or their own configuration.
"""

import logging
import configparser as cp

from . import config

__all__ = ['get_level', 'start_logger']


_LEVELS = {'debug' : logging.DEBUG,
           'info' : logging.INFO,
           'warning' : logging.WARNING,
           'error' : logging.ERROR,
           'critical' : logging.CRITICAL}


def get_level(lvl):
    """
    Convert a logging level name (as found in a configuration file) to the
    corresponding `logging` level number, defaulting to NOTSET.
    """
    return _LEVELS.get(str(lvl).lower(), logging.NOTSET)


def start_logger(logger_name='oracframe', cfgfile=None):
    """
    Attach handlers to a named logger and return it.

    Parameters
    ----------

    logger_name : str, optional
        Name of the logger to configure (default 'oracframe', which covers
        all the package's modules).

    cfgfile : str, optional
        Path to an INI file with a [LOGGER] section, containing any of
        start_log, log_path, log_level & log_verbose. When None, the values
        of config['logfile'] & config['log_level'] are used instead.

    Returns
    -------

    logging.Logger

    """
    logger = logging.getLogger(logger_name)

    if cfgfile is None:
        log_path = config['logfile']
        log_lvl = config['log_level']
        log_start = log_path is not None
        log_verbose = True
    else:
        config_obj = cp.ConfigParser()
        res = config_obj.read(cfgfile)
        if res == []:
            raise IOError('failed to read {0}'.format(cfgfile))
        log_cfg = config_obj['LOGGER']
        log_start = log_cfg.getboolean('start_log', False)
        log_path = log_cfg.get('log_path', 'oracframe.log')
        log_lvl = log_cfg.get('log_level', 'warning')
        log_verbose = log_cfg.getboolean('log_verbose', True)

    level = get_level(log_lvl)
    logger.setLevel(level)

    formatter = logging.Formatter('[%(name)s][%(levelname)s]:%(message)s')

    if log_start:
        f_handle = logging.FileHandler(log_path, mode='a')
        f_handle.setLevel(level)
        f_handle.setFormatter(formatter)
        logger.addHandler(f_handle)

    if log_verbose:
        # also print to terminal
        s_handle = logging.StreamHandler()
        s_handle.setLevel(level)
        s_handle.setFormatter(formatter)
        logger.addHandler(s_handle)

    return logger
