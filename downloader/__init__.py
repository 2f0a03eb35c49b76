"""
Downloader module for the model asset manager.
Builds download script arguments, runs the script and supervises cancellation.
"""

from .args import DownloadArgs, build_args
from .result import ResultState, ScriptResult, ScriptTokenizer
from .supervisor import CancellableExecution, CancellationToken, ExecutionState
from .script import DownloaderScript, find_venv_executable, resolve_python

__all__ = [
    "DownloadArgs",
    "build_args",
    "ResultState",
    "ScriptResult",
    "ScriptTokenizer",
    "CancellableExecution",
    "CancellationToken",
    "ExecutionState",
    "DownloaderScript",
    "find_venv_executable",
    "resolve_python"
]
