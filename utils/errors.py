"""
Error types for the model asset manager.

Every error raised by the core is an AssetManagerError so the command
boundary in main.py can present it without knowing its origin.
"""

from typing import Optional


class AssetManagerError(Exception):
    """Base exception for model asset manager errors."""

    def __init__(
        self,
        message: str,
        error_type: str = "internal_error",
        code: Optional[str] = None
    ):
        self.message = message
        self.error_type = error_type
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to a serializable error payload."""
        return {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code
            }
        }


class InvalidArgumentsError(AssetManagerError):
    """Command arguments are missing or malformed."""

    def __init__(self, message: str, code: str = "invalid_arguments"):
        super().__init__(
            message=message,
            error_type="configuration_error",
            code=code
        )


class AssetNotConfiguredError(AssetManagerError):
    """Asset is not present in the manifest."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            message=f"Model '{name}' is not configured",
            error_type="configuration_error",
            code="model_not_configured"
        )


class UnsupportedModuleError(AssetManagerError):
    """Asset module does not support tokenizers."""

    def __init__(self, name: str, module: str):
        self.name = name
        self.module = module
        super().__init__(
            message="only transformers models have tokenizers",
            error_type="configuration_error",
            code="unsupported_module"
        )


class TokenizerAlreadyExistsError(AssetManagerError):
    """Tokenizer is already configured for the asset."""

    def __init__(self, model_name: str, tokenizer_class: str):
        self.model_name = model_name
        self.tokenizer_class = tokenizer_class
        super().__init__(
            message=f"the following tokenizer is already downloaded: {tokenizer_class}",
            error_type="conflict_error",
            code="tokenizer_already_downloaded"
        )


class DownloaderError(AssetManagerError):
    """Download script failed to run or exited with a nonzero code."""

    def __init__(self, message: str, exit_code: int = 1):
        self.exit_code = exit_code
        super().__init__(
            message=message,
            error_type="invocation_error",
            code="downloader_failed"
        )


class DownloaderOutputError(AssetManagerError):
    """Download script succeeded but its output could not be decoded."""

    def __init__(self, message: str, details: Optional[str] = None):
        full_message = message
        if details:
            full_message = f"{message}: {details}"
        super().__init__(
            message=full_message,
            error_type="invocation_error",
            code="invalid_downloader_output"
        )


class DownloadCancelledError(AssetManagerError):
    """Download was cancelled by an interrupt or termination signal."""

    def __init__(self, message: str = "Download cancelled manually"):
        super().__init__(
            message=message,
            error_type="cancelled",
            code="download_cancelled"
        )


class ManifestError(AssetManagerError):
    """Manifest could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(
            message=message,
            error_type="io_error",
            code="manifest_error"
        )


class CatalogError(AssetManagerError):
    """Remote model catalog lookup failed."""

    def __init__(self, name: str, details: Optional[str] = None):
        self.name = name
        message = f"Model '{name}' could not be found in the catalog"
        if details:
            message = f"{message}: {details}"
        super().__init__(
            message=message,
            error_type="catalog_error",
            code="catalog_lookup_failed"
        )


class BatchOperationError(AssetManagerError):
    """One or more items of a batch could not be processed."""

    def __init__(self, failed: list[str], action: str = "processed", item: str = "tokenizer"):
        self.failed = list(failed)
        self.action = action
        self.item = item
        super().__init__(
            message=f"the following {item}(s) couldn't be {action}: {', '.join(self.failed)}",
            error_type="invocation_error",
            code="batch_operation_failed"
        )
