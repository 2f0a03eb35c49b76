"""
Download script output schema.
"""

import json
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from utils.errors import DownloaderOutputError


class ResultState(str, Enum):
    """What the download script produced."""
    ABSENT = "absent"
    EMPTY = "empty"
    POPULATED = "populated"


class ScriptTokenizer(BaseModel):
    """Tokenizer part of the download script output."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    path: str = ""
    class_name: str = Field(default="", alias="class")
    options: dict[str, str] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.path and not self.class_name


class ScriptResult(BaseModel):
    """Decoded output of one download script run."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    state: ResultState = ResultState.ABSENT
    path: str = ""
    module: str = ""
    class_name: str = Field(default="", alias="class")
    options: dict[str, str] = Field(default_factory=dict)
    tokenizer: Optional[ScriptTokenizer] = None

    @property
    def is_absent(self) -> bool:
        return self.state == ResultState.ABSENT

    @property
    def is_empty(self) -> bool:
        return self.state == ResultState.EMPTY

    @property
    def is_populated(self) -> bool:
        return self.state == ResultState.POPULATED

    @classmethod
    def absent(cls) -> "ScriptResult":
        return cls(state=ResultState.ABSENT)

    @classmethod
    def decode(cls, output: str) -> "ScriptResult":
        """
        Decode the standard output of the download script.

        Blank output means the script returned nothing. A JSON object with no
        model field set is a valid empty result.

        Raises:
            DownloaderOutputError: output is not a valid result object
        """
        if not output.strip():
            return cls.absent()

        try:
            payload = json.loads(output)
        except json.JSONDecodeError as e:
            raise DownloaderOutputError("Download script returned invalid JSON", str(e))

        if not isinstance(payload, dict):
            raise DownloaderOutputError(
                "Download script returned an unexpected payload",
                type(payload).__name__
            )

        try:
            result = cls.model_validate({k: v for k, v in payload.items() if k != "state"})
        except ValidationError as e:
            raise DownloaderOutputError("Download script output does not match the schema", str(e))

        if result.path or result.module or result.class_name:
            result.state = ResultState.POPULATED
        else:
            result.state = ResultState.EMPTY
        return result
