from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from .common import Dialect

MAX_DEPTH_LIMIT = 256


class ReaderOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    dialect: Dialect = Dialect.EWKB
    # SRID given to the root when the bytes carry none (always, for plain WKB)
    default_srid: int = Field(0, ge=0, le=0xFFFFFFFF)
    # decoding recurses per level, so stay well under the interpreter's recursion limit
    max_depth: int = Field(64, ge=1, le=MAX_DEPTH_LIMIT)
