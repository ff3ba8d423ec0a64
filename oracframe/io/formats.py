# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

# Define supported container formats, mapped to the corresponding file
# extension names. For each <key> in the dictionary below, there should also
# exist a module oracframe.io._<key>.py, containing the back-end functions for
# that format, matching the generic function defs in io.py.

# Multi-component containers (the HDS/NDF layout of .HEADER, .I1, .I2 etc.)
# are represented as multi-extension FITS, with one named image extension
# per component.

# If more than one back end happens to support the same file format, the order
# of precedence is that written here:
formats = {'fits' : ('fit', 'fits', 'fts', 'fits.gz', 'fits.bz2')}
