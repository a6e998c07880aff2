"""Tick and aggregate models."""

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import orjson

from .exceptions import DecodeError


class Tick(BaseModel):
    """A single price observation for a symbol.
    
    The timestamp is carried verbatim as an RFC3339 string.
    """
    
    symbol: str = Field(min_length=1)
    price: float
    timestamp: str
    
    model_config = ConfigDict(frozen=True, strict=True)
    
    def to_bytes(self) -> bytes:
        """Serialize to JSON bytes."""
        return orjson.dumps(self.model_dump())
    
    @classmethod
    def from_bytes(cls, data: bytes) -> "Tick":
        """Deserialize from JSON bytes.
        
        Raises DecodeError if the payload is not a JSON object matching
        the tick schema.
        """
        try:
            return cls.model_validate(orjson.loads(data))
        except orjson.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON payload: {e}", data) from e
        except ValidationError as e:
            raise DecodeError(
                f"Payload does not match tick schema: {e.error_count()} error(s)", data
            ) from e


class Aggregate(BaseModel):
    """Running statistics for one symbol."""
    
    total: float = 0.0
    count: int = 0
    average: float = 0.0
    latest: float = 0.0
    
    def fold(self, tick: Tick) -> None:
        """Update statistics with a new tick."""
        self.total += tick.price
        self.count += 1
        self.latest = tick.price
        self.average = self.total / self.count
    
    def to_dict(self) -> dict:
        return self.model_dump()
    
    def __repr__(self) -> str:
        return (
            f"Aggregate(total={self.total}, count={self.count}, "
            f"average={self.average}, latest={self.latest})"
        )
