"""
Shared helpers for setting up runs of the cost curve calculator
"""

# Import packages
from pathlib import Path
import logging


# Logger Setup
def setup_logger(output_dir, debug=False):
    """initiates logging, sets up logger in the output directory specified

    Parameters
    ----------
    output_dir : path
        output directory path, run.log is written there
    debug : bool, optional
        log at DEBUG instead of INFO, by default False

    Returns
    -------
    Path
        path of the log file
    """
    log_path = Path(output_dir)
    if not Path.is_dir(log_path):
        Path.mkdir(log_path, parents=True)

    # logger level
    if debug:
        loglevel = logging.DEBUG
    else:
        loglevel = logging.INFO

    # logger configs
    logging.basicConfig(
        filename=f'{log_path}/run.log',
        encoding='utf-8',
        filemode='w',
        format='%(asctime)s | %(name)s | %(levelname)s :: %(message)s',
        datefmt='%d-%b-%y %H:%M:%S',
        level=loglevel,
        force=True,
    )
    logging.getLogger('pandas').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
    return log_path / 'run.log'
