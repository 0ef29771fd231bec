"""
tabdb - Line-protocol tabular data store

A small relational-style store: one statement per line, tables held in
tab-delimited flat files, tagged textual responses.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
