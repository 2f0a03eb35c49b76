"""
Arguments of the download script.
"""

from dataclasses import dataclass, field


# Download script tags
TAG_CLIENT = "--emf-client"
TAG_MODEL_CLASS = "--model-class"
TAG_MODEL_OPTIONS = "--model-options"
TAG_TOKENIZER_CLASS = "--tokenizer-class"
TAG_TOKENIZER_OPTIONS = "--tokenizer-options"
TAG_OVERWRITE = "--overwrite"
TAG_ONLY_CONFIGURATION = "--only-configuration"
TAG_SKIP = "--skip"

SKIP_MODEL = "model"
SKIP_TOKENIZER = "tokenizer"


@dataclass(frozen=True)
class DownloadArgs:
    """One download request for the download script."""
    download_path: str = ""
    model_name: str = ""
    model_module: str = ""
    model_class: str = ""
    model_options: tuple[str, ...] = field(default_factory=tuple)
    tokenizer_class: str = ""
    tokenizer_options: tuple[str, ...] = field(default_factory=tuple)
    skip_model: bool = False
    skip_tokenizer: bool = False
    only_configuration: bool = False
    overwrite: bool = False

    @property
    def skip(self) -> str:
        """Value of the skip selector, empty when nothing is skipped."""
        if self.skip_model:
            return SKIP_MODEL
        if self.skip_tokenizer:
            return SKIP_TOKENIZER
        return ""


def build_args(args: DownloadArgs) -> list[str]:
    """
    Build the argument vector of the download script.

    Unset optional values are left out entirely: the script tells an absent
    flag apart from an empty value.
    """
    # Mandatory arguments
    module = getattr(args.model_module, "value", args.model_module)
    cmd_args = [TAG_CLIENT, args.download_path, args.model_name, module]

    # Model
    if args.model_class:
        cmd_args += [TAG_MODEL_CLASS, args.model_class]
    if args.model_options:
        cmd_args += [TAG_MODEL_OPTIONS, *args.model_options]

    # Tokenizer
    if args.tokenizer_class:
        cmd_args += [TAG_TOKENIZER_CLASS, args.tokenizer_class]
    if args.tokenizer_options:
        cmd_args += [TAG_TOKENIZER_OPTIONS, *args.tokenizer_options]

    # Global flags
    if args.overwrite:
        cmd_args.append(TAG_OVERWRITE)
    if args.only_configuration:
        cmd_args.append(TAG_ONLY_CONFIGURATION)
    if args.skip:
        cmd_args += [TAG_SKIP, args.skip]

    return cmd_args
