#!/usr/bin/env python

'''
A simple logging module that logs to the console and a logfile, and has a
configurable threshold loglevel for each of console and logfile output.

Use it this way:
    import mandelbrot_mpi.utilities.log as log

    # configure my logging
    log.console_logging_level = log.INFO
    log.log_logging_level = log.DEBUG
    log.log_filename = './my.log'

    # log away!
    log.debug('A message at DEBUG level')
    log.info('Another message, INFO level')

There is only ever one copy of the log data: modules *are* singletons.
Until the first call to log() the user is free to play with the module data
to configure the logging.

Every participant of an MPI run is a separate process writing its own
logfile.  Call set_rank() before the first message so that the participants
do not clobber each other's files.
'''

import os
import sys
import threading
import traceback
import logging
import datetime

from mandelbrot_mpi import config

DefaultConsoleLogLevel = logging.CRITICAL
DefaultFileLogLevel = logging.INFO
TimingDelimiter = '#@# '

################################################################################
# Module variables - only one copy of these, ever.
#
# The console logging level is set to a high level, like CRITICAL.  The logfile
# logging is set lower, between DEBUG and CRITICAL.  The idea is to log least to
# the console, but ensure that everything that goes to the console *will* also
# appear in the log file.  There is code to ensure log <= console levels.
#
# If console logging level is set to CRITICAL+1 then nothing will print on the
# console.
################################################################################

# flag variable to determine if logging set up or not
_setup = False
_setup_lock = threading.Lock()

# logging level for the console
console_logging_level = DefaultConsoleLogLevel

# logging level for the logfile
log_logging_level = DefaultFileLogLevel

# The default name of the file to log to.
log_filename = config.log_filename

# Participant index prefixed to every record, None for a sequential run
rank = None

# set module variables so users don't have to do 'import logging'.
CRITICAL = logging.CRITICAL
ERROR = logging.ERROR
WARNING = logging.WARNING
INFO = logging.INFO
DEBUG = logging.DEBUG
NOTSET = logging.NOTSET

_logger = logging.getLogger('mandelbrot_mpi')


################################################################################
# Module code.
################################################################################

def set_rank(participant, numprocs):
    '''Tag records with the participant index and give it its own logfile.

    Has no effect on the logfile once logging has been set up.
    '''

    global rank, log_filename

    rank = participant
    if numprocs > 1 and not _setup:
        (root, ext) = os.path.splitext(log_filename)
        log_filename = '%s_P%d%s' % (root, participant, ext)


def _setup_logging():
    global _setup, log_logging_level

    with _setup_lock:
        if _setup:
            return

        # sanity check the logging levels, require console >= file
        if log_logging_level > console_logging_level:
            log_logging_level = console_logging_level

        _logger.setLevel(log_logging_level)
        _logger.propagate = False

        # setup the file logging system
        fmt = '%(asctime)s %(levelname)-8s %(mname)25s:%(lnum)-4d|%(message)s'
        logfile = logging.FileHandler(log_filename, mode='w')
        logfile.setLevel(log_logging_level)
        logfile.setFormatter(logging.Formatter(fmt))
        _logger.addHandler(logfile)

        # define a console handler which writes to sys.stdout
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(console_logging_level)
        console.setFormatter(logging.Formatter('%(message)s'))
        _logger.addHandler(console)

        # catch exceptions
        sys.excepthook = log_exception_hook

        # mark module as *setup*
        _setup = True

    # tell the world how we are set up
    start_msg = ("Logfile is '%s' with logging level of %s, "
                 "console logging level is %s"
                 % (log_filename,
                    logging.getLevelName(log_logging_level),
                    logging.getLevelName(console_logging_level)))
    _logger.log(logging.INFO, start_msg, extra={'mname': __name__, 'lnum': 0})


def log(msg, level=None):
    '''Log a message at a particular loglevel.

    msg:    The message string to log.
    level:  The logging level to log with (defaults to console level).

    The first call to this method (by anybody) initializes logging and
    then logs the message.  Subsequent calls just log the message.
    '''

    if not _setup:
        _setup_logging()

    # if logging level not supplied, assume console level
    if level is None:
        level = console_logging_level

    # get caller information - look back for first module != <this module name>
    fname = ''
    lnum = 0
    frames = traceback.extract_stack()
    frames.reverse()
    try:
        (_, mod_name) = __name__.rsplit('.', 1)
    except ValueError:
        mod_name = __name__
    for (fpath, lnum, mname, _) in frames:
        fname = os.path.splitext(os.path.basename(fpath))[0]
        if fname != mod_name:
            break

    if rank is not None:
        msg = 'P%d: %s' % (rank, msg)

    _logger.log(level, msg, extra={'mname': fname, 'lnum': lnum})


def log_exception_hook(type, value, tb):
    '''Hook function to process uncaught exceptions.

    type:   Type of exception.
    value:  The exception data.
    tb:     Traceback object.

    This has the same interface as sys.excepthook().
    '''

    msg = '\n' + ''.join(traceback.format_exception(type, value, tb))
    critical(msg)


################################################################################
# Shortcut routines to make for simpler user code.
################################################################################

def debug(msg=''):
    '''Shortcut for log(DEBUG, msg).'''

    log(msg, logging.DEBUG)


def info(msg=''):
    '''Shortcut for log(INFO, msg).'''

    log(msg, logging.INFO)


def warning(msg=''):
    '''Shortcut for log(WARNING, msg).'''

    log(msg, logging.WARNING)


def error(msg=''):
    '''Shortcut for log(ERROR, msg).'''

    log(msg, logging.ERROR)


def critical(msg=''):
    '''Shortcut for log(CRITICAL, msg).'''

    log(msg, logging.CRITICAL)


def timingInfo(msg=''):
    '''Shortcut for log(timingDelimiter, msg).'''

    log(TimingDelimiter + msg, logging.INFO)


def resource_usage(level=logging.INFO):
    '''Log memory usage at given log level.'''

    _scale = {'KB': 1024, 'MB': 1024*1024, 'GB': 1024*1024*1024,
              'kB': 1024, 'mB': 1024*1024, 'gB': 1024*1024*1024}

    if sys.platform == 'win32':
        log('Resource usage not available on %s' % sys.platform, level)
        return

    _proc_status = '/proc/%d/status' % os.getpid()

    def _VmB(VmKey):
        '''Get number of virtual bytes used.'''

        # get pseudo file /proc/<pid>/status
        try:
            with open(_proc_status) as t:
                v = t.read()
        except IOError:
            return 0.0

        # get VmKey line, eg: 'VmRSS: 999 kB\n ...
        try:
            i = v.index(VmKey)
        except ValueError:
            return 0.0
        v = v[i:].split(None, 3)
        if len(v) < 3:
            return 0.0

        # convert Vm value to bytes
        return float(v[1]) * _scale[v[2]]

    msg = ('Resource usage: memory=%.1fMB resident=%.1fMB stacksize=%.1fMB'
           % (_VmB('VmSize:')/_scale['MB'], _VmB('VmRSS:')/_scale['MB'],
              _VmB('VmStk:')/_scale['MB']))
    log(msg, level)


def TimeStamp():
    return datetime.datetime.now().strftime('%Y%m%d_%H%M%S')
