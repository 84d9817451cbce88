from dataclasses import dataclass
from typing import Any, Mapping


@dataclass
class UsageStats:
    """
    Running usage counter.

    ``total_tokens`` counts delivered stream fragments, not backend tokens;
    the backend's own tokenization is not visible to the client.
    """
    total_tokens: int = 0

    def record_fragment(self) -> None:
        self.total_tokens += 1

    def to_dict(self) -> dict[str, int]:
        return {'total_tokens': self.total_tokens}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UsageStats":
        if not isinstance(data, Mapping):
            raise ValueError('stats must be an object')
        total = data.get('total_tokens', 0)
        if not isinstance(total, int) or isinstance(total, bool) or total < 0:
            raise ValueError(f'invalid total_tokens: {total!r}')
        return cls(total_tokens=total)
