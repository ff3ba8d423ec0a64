# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
A package for reading, merging and propagating the FITS headers of pipeline
observation frames that span several files or container components.
"""

__version__ = '0.3.0'

config = {'instrument' : 'GENERIC',
          'header_component' : 'HEADER',
          'component_regex' : r'^(?P<file>.+?)\[(?P<comp>[^\]]+)\]$',
          'logfile' : None,
          'log_level' : 'warning',
          'pipeline_version' : __version__
         }

import re
config['component_regex'] = re.compile(config['component_regex'])

# Define a decorator that converts some package-API-standard arguments to
# use package run-time default values, unless specified explicitly:
from functools import wraps
import inspect

def frame_defaults(proc_fn):

    @wraps(proc_fn)  # transfer target function name & docstring to wrapper

    # Wrapper function to be substituted for the original:
    def wrap_defaults(*args, **kwargs):

        # Evaluate what arguments the function we're wrapping would receive
        # if we called it directly:
        callargs = inspect.signature(proc_fn).bind(*args, **kwargs)
        callargs.apply_defaults()

        # Convert any unspecified settings to the run-time defaults specified
        # in the package configuration dictionary:
        for param in ['instrument', 'header_component']:
            if param in callargs.arguments and \
               callargs.arguments[param] is None:
                callargs.arguments[param] = config[param]

        return proc_fn(*callargs.args, **callargs.kwargs)

    return wrap_defaults
