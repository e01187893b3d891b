"""Core type definitions for the idempotent file write.

Examples:
    Building write options::

        from idempotent_ops.models import WriteOptions

        options = WriteOptions(algorithm="sha512", encoding="utf-16-le")

    Inspecting a result::

        result = await idempotent_write_file("out/report.json", payload)
        if result.operation is WriteOperation.NO_CHANGE:
            logger.info("report.unchanged", path=result.path)
"""

import codecs
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Algorithm = Literal["sha256", "sha512", "md5"]


class WriteOperation(str, Enum):
    """What an idempotent write did to the target path.

    Attributes:
        CREATED: No file existed; it was written.
        UPDATED: A file with different content existed; it was replaced.
        NO_CHANGE: The file already held identical content; nothing was touched.
    """

    CREATED = "created"
    UPDATED = "updated"
    NO_CHANGE = "no-change"


class WriteResult(BaseModel):
    """Outcome of a single idempotent write.

    Attributes:
        operation: The operation performed.
        path: The target path, as given by the caller.
    """

    operation: WriteOperation
    path: str

    model_config = {"frozen": True}


class WriteOptions(BaseModel):
    """Options for an idempotent write.

    Attributes:
        algorithm: Digest used to compare old and new content.
        encoding: Codec applied when the data is text. Ignored for bytes.
    """

    algorithm: Algorithm = Field(
        default="sha256",
        description="Hash algorithm used to compare content",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding applied to str data",
    )

    model_config = {"frozen": True}

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Reject codecs unknown to the Python codec registry.

        Raises:
            ValueError: If the encoding cannot be looked up.
        """
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown text encoding: {v}") from e
        return v
