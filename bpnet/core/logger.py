import logging
import os


DEFAULT_LOG_FILENAME = 'train-log.txt'


def setup_logging(filename=None, level=logging.DEBUG, stdout=False):
    """ Sets up logging formatting, etc

    Parameters
    ----------
    filename: str, default=None
        The log file, overwritten if it exists. The default (None) writes
        to `train-log.txt` in the current directory.

    level: int, default=logging.DEBUG
        The logging level of the root logger.

    stdout: bool, default=False
        If True, log records are also written to the console.
    """
    filename = filename or os.path.join(os.path.curdir, DEFAULT_LOG_FILENAME)

    line_fmt = ("[%(asctime)s] [%(name)s:%(lineno)d] "
                "%(levelname)-8s %(message)s")

    date_fmt = "%Y-%m-%d %H:%M:%S"

    handlers = [logging.FileHandler(filename, mode='w')]

    if stdout:
        handlers.append(logging.StreamHandler())

    # `force` drops handlers left over from a previous call.
    logging.basicConfig(
        format=line_fmt, datefmt=date_fmt, level=level, handlers=handlers,
        force=True)
