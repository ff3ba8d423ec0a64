"""
I/O routines used internally by oracframe. These have a public API for the
convenience of anyone who wants to use their container format abstraction
directly but users should nearly always work with the higher-level Frame
interface instead (which is also a bit less liable to change).
"""

from .io import *
