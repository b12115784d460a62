""" Runtime settings for the server and client. Each setting has a built-in
    default that can be overridden with a ``JOBWIRE_*`` environment variable;
    command-line flags are applied on top by the caller.
"""

import os


# Built-in defaults, in seconds unless noted otherwise.

defaults = dict()
defaults['poll_interval'] = 0.1
defaults['recv_timeout'] = 60.0
defaults['settle_delay'] = 0.0005
defaults['send_delay'] = 0.0005
defaults['menu_delay'] = 0.1
defaults['log_level'] = 'INFO'
defaults['log_dir'] = None

_environment = dict()
_environment['poll_interval'] = 'JOBWIRE_POLL_INTERVAL'
_environment['recv_timeout'] = 'JOBWIRE_RECV_TIMEOUT'
_environment['settle_delay'] = 'JOBWIRE_SETTLE_DELAY'
_environment['send_delay'] = 'JOBWIRE_SEND_DELAY'
_environment['menu_delay'] = 'JOBWIRE_MENU_DELAY'
_environment['log_level'] = 'JOBWIRE_LOG_LEVEL'
_environment['log_dir'] = 'JOBWIRE_LOG_DIR'


class Settings:
    """ A plain container for the settings in :data:`defaults`. Keyword
        arguments override both the defaults and the environment; this is
        how tests and command-line flags supply their values.

        A *recv_timeout* of None or zero disables the socket deadline.
    """

    def __init__(self, debug=False, **overrides):

        for name in overrides.keys():
            if name not in defaults:
                raise TypeError('unknown setting: ' + name)

        self.debug = debug

        for name, default in defaults.items():
            if name in overrides:
                value = overrides[name]
            else:
                value = _from_environment(name, default)

            setattr(self, name, value)

        if self.recv_timeout == 0:
            self.recv_timeout = None

        if debug == True:
            self.log_level = 'DEBUG'

        self.log_level = str(self.log_level).upper()


    def __repr__(self):
        values = ['%s=%r' % (name, getattr(self, name)) for name in defaults.keys()]
        return 'Settings(debug=%r, %s)' % (self.debug, ', '.join(values))

# end of class Settings



def _from_environment(name, default):
    """ Return the environment override for the named setting, converted to
        the same type as the built-in default, or the default itself if
        there is no override.
    """

    variable = _environment[name]

    try:
        raw = os.environ[variable]
    except KeyError:
        return default

    raw = raw.strip()

    if isinstance(default, float):
        if name == 'recv_timeout' and raw.lower() in ('', '0', 'none'):
            return None

        try:
            value = float(raw)
        except ValueError:
            raise ValueError('%s must be a number, not %r' % (variable, raw))

        if value < 0:
            raise ValueError('%s must not be negative: %r' % (variable, raw))

        return value

    if raw == '':
        return default

    return raw


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
