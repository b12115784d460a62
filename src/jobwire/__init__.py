""" Python implementation of jobwire: a server that hands out jobs from a job
    file to one client at a time, and a client that fetches those jobs and
    prints each to stdout or stderr according to its category, over a small
    binary protocol with a checksum in every frame.
"""

# Utility components.

from . import config
from . import log
from .context import Context

# Submodules used by both roles.

from . import protocol
from . import transport

# Server components.

from .source import JobSource
from .admission import Admission
from .session import SessionLoop
from .server import Server

# Client components.

from .router import OutputRouter
from .dispatch import RequestDispatcher
from .client import Client, ServerBusy

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
