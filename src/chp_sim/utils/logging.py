"""Logging utilities for hosts driving the simulator."""

import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class Logger:
    """Named logger with console/file output and simulation-run helpers."""

    def __init__(self,
                 name: str,
                 level: str = "INFO",
                 log_file: Optional[Union[str, Path]] = None,
                 console_output: bool = True):
        """Initialize logger.

        Args:
            name: Logger name (usually __name__)
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Path to log file (optional)
            console_output: Whether to output to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Clear any existing handlers
        self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        # Prevent duplicate logs
        self.logger.propagate = False

        self.start_time = None

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def critical(self, message: str) -> None:
        self.logger.critical(message)

    def log_circuit_start(self, circuit, config: Optional[dict] = None) -> None:
        """Log the start of a circuit run."""
        self.start_time = time.time()
        self.info(f"Running circuit {circuit.name!r}: {circuit.n} qubits, "
                  f"{circuit.size} gates, {circuit.num_measurements} measurements")
        if config:
            self.info(f"Configuration: {config}")

    def log_measurement(self, qubit: int, outcome: bool, kind: Optional[str] = None) -> None:
        """Log one measurement outcome."""
        kind_info = f" ({kind})" if kind else ""
        self.info(f"Qubit {qubit} -> {int(outcome)}{kind_info}")

    def log_run_end(self, outcomes: Sequence[bool]) -> float:
        """Log the end of a run and return its duration in seconds."""
        if self.start_time is None:
            self.warning("Run was not properly started")
            return 0.0
        duration = time.time() - self.start_time
        bitstring = "".join(str(int(o)) for o in outcomes)
        self.info(f"Run completed in {duration:.4f} seconds, outcomes: {bitstring or '<none>'}")
        self.start_time = None
        return duration


def setup_logging(log_level: str = "INFO",
                  log_dir: str = "./logs",
                  console_output: bool = True) -> None:
    """Setup global logging configuration.

    Args:
        log_level: Global logging level
        log_dir: Directory for log files
        console_output: Whether to show logs in console
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "chp_sim.log"

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout) if console_output else logging.NullHandler()
        ],
        force=True,
    )

    # Suppress verbose JIT compiler output
    logging.getLogger("numba").setLevel(logging.WARNING)


# Convenience function for getting loggers
def get_logger(name: str, **kwargs) -> Logger:
    """Get a logger instance.

    Args:
        name: Logger name
        **kwargs: Additional arguments for Logger

    Returns:
        Logger instance
    """
    return Logger(name, **kwargs)
