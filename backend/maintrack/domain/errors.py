# backend/maintrack/domain/errors.py
"""
Motorun hata sınıfları.

Hepsi HTTPException türevi: servisler doğrudan (test, betik) çağrıldığında
ayrı ayrı yakalanabilir, HTTP katmanında ise tek bir handler ile
`fail(...)` zarfına dönüşür.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class EngineError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code, detail=detail)
        self.meta = meta or {}


class NotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, ident: Any):
        super().__init__(f"{entity} not found", meta={"entity": entity, "id": ident})
        self.entity = entity
        self.ident = ident


class InvalidTransition(EngineError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: Optional[str], event: Optional[str] = None):
        what = event or f"set status {target!r}"
        super().__init__(
            f"Cannot {what} from status {current!r}",
            meta={"from": current, "to": target, "event": event},
        )
        self.current = current
        self.target = target
        self.event = event


class ValidationError(EngineError):
    status_code = 422


class ConflictError(EngineError):
    status_code = status.HTTP_409_CONFLICT


class StoreError(EngineError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, operation: str):
        # İç yapı dışarı sızmasın: sadece işlem adı
        super().__init__(f"{operation} failed", meta={"operation": operation})
        self.operation = operation
