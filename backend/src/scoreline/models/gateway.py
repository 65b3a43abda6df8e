"""Gateway result envelope shared by the HTTP surface and the CLI."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class GatewayResponse(BaseModel):
    status_code: int = 200
    body: dict[str, Any]

    @property
    def source(self) -> str | None:
        return self.body.get("source")

    @classmethod
    def error(cls, status_code: int, message: str, **extra: Any) -> GatewayResponse:
        return cls(status_code=status_code, body={"error": message, **extra})
