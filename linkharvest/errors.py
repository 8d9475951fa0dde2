from typing import Any, Dict


class ApiError(Exception):
    """An error with a stable code, rendered as {"success": false, "error": code, ...}."""

    def __init__(self, code: str, status_code: int = 400, **extra: Any):
        super().__init__(code)
        self.code = code
        self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.code, **self.extra}
