# logger_setup.py

import logging
import os

from constants import LOGGER_NAME

def setup_logging(config: dict, log_root: str = 'runs'):
    """
    Sets up logging for the application.

    Creates a run-specific log directory and configures the dedicated
    "physics_canvas" logger (not the root logger) to write to both the console
    and a log file. Keeping the root logger untouched keeps Numba's and
    pygame's own output out of the simulation log.

    Data Contract:
    - Inputs:
        - config (dict): The loaded configuration. Reads 'run_id' and the
          optional 'logging' dictionary ('level', 'format').
        - log_root (str): Directory under which run folders are created.
    - Outputs: The path of the log file (str).
    - Side Effects:
        - Configures the "physics_canvas" logger.
        - Creates directories for log files.
    - Invariants: Calling this again replaces the handlers instead of adding
      duplicates.
    """
    run_id = str(config.get('run_id', 'default'))
    log_config = config.get('logging', {})
    level = str(log_config.get('level', 'INFO')).upper()
    log_format = log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    log_dir = os.path.join(log_root, run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'simulation.log')

    formatter = logging.Formatter(log_format)

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    # Replace, never stack, handlers on repeated setup
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return log_file
