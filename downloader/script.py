"""
Download script runner - spawns the external download script.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from utils.errors import DownloaderError, DownloadCancelledError
from utils.logging import fields
from .args import DownloadArgs, build_args
from .result import ScriptResult
from .supervisor import CancellationToken

logger = logging.getLogger(__name__)

DOWNLOADER_NAME = "downloader.py"


def find_venv_executable(venv_path: str, executable_name: str) -> str:
    """
    Find an executable inside a virtual environment.

    Raises:
        DownloaderError: the executable does not exist
    """
    if os.name == "nt":
        path = Path(venv_path) / "Scripts" / f"{executable_name}.exe"
    else:
        path = Path(venv_path) / "bin" / executable_name

    if not path.exists():
        raise DownloaderError(
            f"'{executable_name}' executable not found in virtual environment: {path}"
        )
    return str(path)


def resolve_python(python_path: Optional[str], venv_path: str) -> str:
    """Explicit interpreter if set, otherwise the one of the virtual environment."""
    if python_path:
        found = shutil.which(python_path)
        if found is None:
            raise DownloaderError(f"Python executable not found: {python_path}")
        return found
    return find_venv_executable(venv_path, "python")


class DownloaderScript:
    """Runs the download script and decodes its output."""

    def __init__(self, python_path: str, script_path: str = DOWNLOADER_NAME):
        self.python_path = python_path
        self.script_path = script_path

    def command(self, args: DownloadArgs) -> list[str]:
        """Full command line for a request."""
        return [self.python_path, self.script_path, *build_args(args)]

    def execute(
        self,
        args: DownloadArgs,
        token: Optional[CancellationToken] = None
    ) -> ScriptResult:
        """
        Run the download script for one request.

        Standard output carries the JSON result and standard error the
        diagnostics of the script. Cancelling `token` terminates the child.

        Returns:
            ScriptResult decoded from standard output

        Raises:
            DownloaderError: the script is missing or exited with a nonzero code
            DownloaderOutputError: the output is not a valid result
            DownloadCancelledError: `token` was cancelled
        """
        if not Path(self.script_path).exists():
            raise DownloaderError(f"missing script '{self.script_path}'")

        if token is not None and token.cancelled:
            raise DownloadCancelledError()

        cmd = self.command(args)
        logger.debug(f"Running download script: {' '.join(cmd)}", extra=fields(model=args.model_name))

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True
            )
        except OSError as e:
            raise DownloaderError(f"Failed to start download script: {e}")

        def stop():
            if process.poll() is None:
                logger.info(
                    "Terminating download script",
                    extra=fields(model=args.model_name, pid=process.pid)
                )
                process.terminate()

        if token is not None:
            token.add_callback(stop)
        try:
            stdout, stderr = process.communicate()
        finally:
            if token is not None:
                token.remove_callback(stop)

        if token is not None and token.cancelled:
            raise DownloadCancelledError()

        if process.returncode != 0:
            message = stderr.strip() if stderr else ""
            if not message:
                message = f"download script exited with code {process.returncode}"
            logger.info(
                f"Download script failed: {message}",
                extra=fields(model=args.model_name, exit_code=process.returncode)
            )
            raise DownloaderError(message, exit_code=process.returncode)

        return ScriptResult.decode(stdout or "")
