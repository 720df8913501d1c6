"""
Logging for the OpenVPN Access Server installer
File log keeps every command and decision; the console only shows warnings
"""

import logging
import os
from typing import Optional

from asinstaller.models import Environment, PackageOperation, SupportDecision

DEFAULT_LOG_DIR = "/var/log/openvpn-as-installer"
DEFAULT_LOG_FILE = "install.log"


class LoggerManager:
    """Manages logging for the installer"""

    def __init__(self, log_dir: str = DEFAULT_LOG_DIR, log_file: str = DEFAULT_LOG_FILE,
                 name: str = "asinstaller"):
        """Initialize logger with file and console handlers"""
        self.log_dir = log_dir
        self.log_file = log_file

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Fall back to the working directory when /var/log is not writable
        try:
            os.makedirs(log_dir, exist_ok=True)
            self.log_path = os.path.join(log_dir, log_file)
            file_handler = logging.FileHandler(self.log_path)
        except OSError:
            self.log_dir = os.getcwd()
            self.log_path = os.path.join(self.log_dir, log_file)
            file_handler = logging.FileHandler(self.log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

        if log_dir != self.log_dir:
            self.log_warning(f"Cannot write to {log_dir}, logging to {self.log_path}")

    def log_info(self, message: str):
        """Log info message"""
        self.logger.info(message)

    def log_warning(self, message: str):
        """Log warning message"""
        self.logger.warning(message)

    def log_error(self, message: str, error: Optional[Exception] = None):
        """Log error message with optional exception details"""
        if error:
            self.logger.error(f"{message}: {str(error)}", exc_info=True)
        else:
            self.logger.error(message)

    def log_debug(self, message: str):
        """Log debug message"""
        self.logger.debug(message)

    def log_success(self, message: str):
        """Log success message"""
        self.logger.info(f"SUCCESS: {message}")

    # ==================== Detection Logging ====================

    def log_environment(self, env: Environment):
        self.log_info(
            f"Detected {env.pretty_name} (id={env.os_id} version={env.version_id} "
            f"codename={env.version_codename or '-'} arch={env.arch.value} kernel={env.kernel_release})"
        )

    def log_decision(self, decision: SupportDecision):
        if decision.supported:
            self.log_info(
                f"Supported platform: family={decision.family.value} variant={decision.variant} "
                f"repo={decision.package_repo_url} dco_eligible={decision.dco_eligible}"
            )
        else:
            self.log_info(f"Unsupported platform: {decision.reason}")

    # ==================== Package Operation Logging ====================

    def log_operation_attempt(self, operation: PackageOperation):
        """Log a package manager step before it runs"""
        self.log_info(f"Attempting to {operation.describe()}")

    def log_operation_success(self, operation: PackageOperation, detail: str = ""):
        self.log_success(operation.describe())
        if detail:
            self.log_debug(detail)

    def log_operation_failure(self, operation: PackageOperation, error: str):
        """Log package manager step failure; non-fatal steps only warn"""
        message = f"Failed to {operation.describe()} - Error: {error}"
        if operation.fatal_on_failure:
            self.log_error(message)
        else:
            self.log_warning(message)

    # ==================== Log File Management ====================

    def get_log_file_path(self) -> str:
        """Get the path to the log file"""
        return self.log_path

    def read_log_file(self, lines: int = 100) -> str:
        """Read the last N lines from the log file"""
        try:
            with open(self.log_path, 'r') as f:
                all_lines = f.readlines()
                return ''.join(all_lines[-lines:])
        except FileNotFoundError:
            return "Log file not found"


# Global logger instance
_logger_instance = None


def get_logger(log_dir: Optional[str] = None) -> LoggerManager:
    """Get or create the global logger instance"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = LoggerManager(log_dir or DEFAULT_LOG_DIR)
    return _logger_instance
