from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Ok:
    message: str
    value: Any = None

    success = True
    is_duplicate = False

    def to_dict(self):
        return {"success": True, "message": self.message}


@dataclass(frozen=True)
class Err:
    kind: str
    message: str

    success = False

    @property
    def is_duplicate(self):
        return self.kind == "duplicate"

    def to_dict(self):
        out = {"success": False, "message": self.message}
        if self.is_duplicate:
            out["isDuplicate"] = True
        return out


Result = Ok | Err
