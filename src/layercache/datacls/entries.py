from typing import Any, NamedTuple, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import EntryDecodeError


class CacheResult(NamedTuple):
    """
        Outcome of a cache read. Unpacks as ``(value, found)``.
    """
    value: Any = None
    found: bool = False


MISS = CacheResult(None, False)


class LayerEntry(BaseModel):
    """
        Class represents the metadata of one built filesystem layer.

        Only the content hash and size are interpreted here; any other
        build-specific fields are carried through unchanged.
    """
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    hash: str
    size: int = Field(ge=0)
    tar_hash: Optional[str] = Field(None, alias="tarhash")

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "LayerEntry":
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise EntryDecodeError(f"Not a valid layer entry: {e}") from e
