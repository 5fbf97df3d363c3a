"""General utility functions"""
import os
import re
import sys
import time
import threading
import subprocess
import unicodedata


_ILLEGAL_CHARS = re.compile(r'[<>:"|?*/\\]')
_WHITESPACE = re.compile(r'\s+')


def safe_print(msg):
    """Print with handling for surrogate characters that can't be encoded"""
    try:
        print(msg)
    except UnicodeEncodeError:
        # Replace problematic characters with safe representation
        safe_msg = msg.encode('utf-8', errors='replace').decode('utf-8')
        print(safe_msg)
    sys.stdout.flush()


def make_logger(logfile, prefix=""):
    """
    Build a thread-safe log function that prints and appends to a log file.

    Args:
        logfile: Path to the log file (None to log to console only)
        prefix: Optional tag placed after the timestamp

    Returns:
        Callable taking a single message string
    """
    log_lock = threading.Lock()
    tag = f" [{prefix}]" if prefix else ""

    def log(msg):
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        formatted_msg = f"[{timestamp}]{tag} {msg}"
        with log_lock:
            safe_print(formatted_msg)
            if logfile:
                with open(logfile, "a", encoding="utf-8", errors="replace") as f:
                    f.write(formatted_msg + "\n")
                    f.flush()

    return log


def run_command(cmd, logfile, env=None, timeout=None):
    """
    Execute a command and log its output to a file.

    Args:
        cmd: Command and arguments as a list
        logfile: Path to log file for output
        env: Optional environment variables dict
        timeout: Optional timeout in seconds (raises subprocess.TimeoutExpired)

    Returns:
        Exit code of the command
    """
    with open(logfile, "a", encoding="utf-8", errors="replace") as f:
        # Handle potential encoding issues in command strings
        try:
            cmd_str = ' '.join(str(c) for c in cmd)
        except UnicodeEncodeError:
            cmd_str = ' '.join(repr(c) for c in cmd)

        f.write(f"\n$ {cmd_str}\n")
        f.flush()
        result = subprocess.run(cmd, stdout=f, stderr=f, check=False, env=env, timeout=timeout)
        f.write(f"[Exit code: {result.returncode}]\n")
        f.flush()
        return result.returncode


def utf8_env():
    """Copy of the current environment with a UTF-8 locale for subprocesses"""
    env = os.environ.copy()
    env['LC_ALL'] = 'C.UTF-8'
    env['LANG'] = 'C.UTF-8'
    return env


def sanitize_filename(name):
    """
    Make a metadata string safe to use as a file name on common filesystems.

    Characters illegal on Windows/macOS/Linux and path separators become "_",
    control characters are dropped, whitespace runs collapse to one space and
    the edges are trimmed. Accented and other non-ASCII letters are kept as-is.

    Args:
        name: Raw string (typically a track title or file basename)

    Returns:
        Sanitized string, possibly empty
    """
    if not name:
        return ""
    cleaned = _ILLEGAL_CHARS.sub("_", name)
    cleaned = "".join(
        ch for ch in cleaned
        if ch.isspace() or unicodedata.category(ch) != "Cc"
    )
    return _WHITESPACE.sub(" ", cleaned).strip()
