from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class JSONBody:
    data: Dict[str, Any]


@dataclass
class Part:
    name: str
    value: Any
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass
class MultipartBody:
    parts: List[Part] = field(default_factory=list)

    def add(
        self,
        name: str,
        value: Any,
        *,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> "MultipartBody":
        self.parts.append(Part(name, value, filename=filename, content_type=content_type))
        return self

    def get(self, name: str) -> Optional[Part]:
        for part in self.parts:
            if part.name == name:
                return part
        return None

    @property
    def names(self) -> List[str]:
        return [part.name for part in self.parts]
