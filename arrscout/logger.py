"""
Logging context for arrscout.
Single place to control all output: screen + file, with flush.
"""
import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.text import Text

_PREFIX_STYLES: tuple[tuple[str, str], ...] = (
    ("[INFO]", "cyan"),
    ("[WARNING]", "yellow"),
    ("[ERROR]", "red"),
)
_CONNECTOR_TAG = re.compile(r"\[[a-z_]+\]")


class ArrscoutLogger:
    """Minimal logger: print to screen + file, always flush"""

    def __init__(self, log_file: Optional[Path] = None, debug: bool = False):
        self.log_file = log_file
        self._file_handle = None
        self._start_time = datetime.now()
        self.debug_mode = debug
        self._console = Console(highlight=False)
        self._status_active = False
        self._rate_limit_note_services: set[str] = set()

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_file, 'w', buffering=1, encoding='utf-8')  # Line buffered, UTF-8

        from arrscout.__version__ import __version__

        welcome = f"({self._start_time.strftime('%H:%M:%S')}  Started arrscout {__version__})"
        self.log(welcome)

    def _screen_text(self, line: str) -> Text:
        """Style well-known prefixes without interpreting rich markup."""
        text = Text(line)
        for prefix, style in _PREFIX_STYLES:
            start = line.find(prefix)
            if start != -1:
                text.stylize(style, start, start + len(prefix))
        match = _CONNECTOR_TAG.search(line)
        if match:
            text.stylize("grey50", match.start(), match.end())
        return text

    def _clear_status(self) -> None:
        if self._status_active:
            print("\r" + " " * 100 + "\r", end="", flush=True)
            self._status_active = False

    def status(self, msg: str):
        """Inline progress line, overwritten by the next status or log line"""
        print(f"\r{msg}", end="", flush=True)
        self._status_active = True

    def log(self, msg: str, prefix: str = ""):
        """Log to screen and file"""
        output = f"{prefix}{msg}" if prefix else msg

        self._clear_status()
        self._console.print(self._screen_text(output))

        if self._file_handle:
            self._file_handle.write(output + "\n")
            self._file_handle.flush()
            os.fsync(self._file_handle.fileno())

    def info(self, msg: str):
        """Info message"""
        self.log(msg)

    def warning(self, msg: str):
        """Warning message"""
        self.log(msg, "[WARNING] ")

    def error(self, msg: str):
        """Error message"""
        self.log(msg, "[ERROR] ")

    def api_wait(self, service: str, seconds: float):
        """Log request pacing once per service"""
        _ = seconds
        service_key = service.upper()
        if service_key in self._rate_limit_note_services:
            return
        self._rate_limit_note_services.add(service_key)
        self.log(
            f"Request pacing active for {service_key}; calls to this server are spaced out.",
            "[INFO] ",
        )

    def api_wait_debug(self, service: str, seconds: float):
        """Log pacing wait details (debug mode only)."""
        self.debug(f"Rate limiting detail: waiting {seconds:.3f}s before next {service} API call")

    def api_retry(self, service: str, attempt: int, max_attempts: int, delay: int):
        """Log API retry"""
        self.log(f"{service} request failed. Retrying in {delay}s... (attempt {attempt}/{max_attempts})", "[WARNING] ")

    def api_failed(self, service: str, max_attempts: int):
        """Log API failure"""
        self.log(f"{service} not responding after {max_attempts} attempts. Giving up.", "[ERROR] ")

    def debug(self, msg: str):
        """Debug message (only shown in debug mode)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(msg, f"[{timestamp}] [DEBUG] ")

    def api_request(self, method: str, url: str, params: dict):
        """Log API request (debug mode only)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(f"API Request: {method} {url}", f"[{timestamp}] ")
            if params:
                self.log(f"  Params: {json.dumps(params, indent=2, default=str)}", f"[{timestamp}] ")

    def api_response(self, status: int, data: object, elapsed_ms: float):
        """Log API response (debug mode only)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(f"API Response ({elapsed_ms:.0f}ms): Status {status}", f"[{timestamp}] ")
            if data:
                # Truncate large responses
                data_str = json.dumps(data, indent=2, default=str)
                if len(data_str) > 5000:
                    data_str = data_str[:5000] + "\n  ... (truncated)"
                self.log(f"  Data: {data_str}", f"[{timestamp}] ")

    def close(self):
        """Close file handle with goodbye message"""
        if self._file_handle:
            end_time = datetime.now()
            elapsed = end_time - self._start_time
            goodbye = f"({end_time.strftime('%H:%M:%S')}  Ended session, elapsed {elapsed.total_seconds():.1f}s)"
            self.log(goodbye)
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# Global instance (set by the CLI)
_logger: Optional[ArrscoutLogger] = None

def set_logger(logger: ArrscoutLogger):
    """Set global logger instance"""
    global _logger
    _logger = logger

def get_logger() -> ArrscoutLogger:
    """Get global logger instance"""
    global _logger
    if _logger is None:
        # Fallback: create stdout-only logger
        _logger = ArrscoutLogger()
    return _logger

# Convenience functions
def log(msg: str):
    get_logger().log(msg)

def info(msg: str):
    get_logger().info(msg)

def warning(msg: str):
    get_logger().warning(msg)

def error(msg: str):
    get_logger().error(msg)

def debug(msg: str):
    get_logger().debug(msg)

def status(msg: str):
    get_logger().status(msg)

def clear_status():
    get_logger()._clear_status()
