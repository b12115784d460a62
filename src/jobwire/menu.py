""" Interactive prompts for the client. Each prompt reads one line; an
    interrupt or end-of-input while waiting is turned into a stop, so the
    client always gets the chance to tell the server and its output
    channels before exiting.
"""

import sys

from .protocol import fields

FETCH_ONE = 1
FETCH_SEVERAL = 2
FETCH_ALL = 3
EXIT = 4

MENU = """
MENU:
1) Fetch one job from the server
2) Fetch several jobs from the server
3) Fetch all jobs from the server
4) Exit Program"""


def _readline(context, stdin):
    """ Return one line of input, or None if the wait was interrupted or
        the input is exhausted. In both cases the context is interrupted.
    """

    try:
        line = stdin.readline()
    except KeyboardInterrupt:
        context.interrupt()
        return None

    if line == '':
        context.interrupt()
        return None

    return line.strip()


def choose(context, stdin=None, stdout=None):
    """ Show the menu and return the chosen option, :data:`FETCH_ONE`
        through :data:`EXIT`. Invalid input is reported and the menu shown
        again. Returns :data:`EXIT` if interrupted.
    """

    if stdin is None:
        stdin = sys.stdin
    if stdout is None:
        stdout = sys.stdout

    while True:
        if context.interrupted:
            return EXIT

        print(MENU, file=stdout)
        print('Enter Option (1-4): ', end='', file=stdout, flush=True)

        line = _readline(context, stdin)
        if line is None:
            print(file=stdout)
            return EXIT

        try:
            option = int(line)
        except ValueError:
            option = None

        if option in (FETCH_ONE, FETCH_SEVERAL, FETCH_ALL, EXIT):
            print(file=stdout)
            return option

        print('Invalid input.', file=stdout)


def count(context, stdin=None, stdout=None):
    """ Ask how many jobs to fetch and return the number, 0 to 126. Returns
        None if interrupted.
    """

    if stdin is None:
        stdin = sys.stdin
    if stdout is None:
        stdout = sys.stdout

    while True:
        prompt = 'Enter the number of jobs to fetch (0 - %d): ' % (fields.MAXIMUM_COUNT,)
        print(prompt, end='', file=stdout, flush=True)

        line = _readline(context, stdin)
        if line is None:
            print(file=stdout)
            return None

        try:
            jobs = int(line)
        except ValueError:
            jobs = -1

        if 0 <= jobs <= fields.MAXIMUM_COUNT:
            return jobs

        print('Invalid input.', file=stdout)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
