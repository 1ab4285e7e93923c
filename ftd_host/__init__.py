"""
FTD Host - OpenThread Full Thread Device host driver

Python host driver that controls an OpenThread CLI device (a simulated
`ot-cli-ftd` process or a board on a serial port) through its line-oriented
command interface.
"""

__version__ = "0.1.0"
__author__ = "FTD Host Contributors"

from ftd_host.commands import Session

__all__ = ["Session", "__version__"]
