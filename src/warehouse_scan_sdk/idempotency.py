from __future__ import annotations

import uuid
from dataclasses import dataclass

IDEMPOTENCY_HEADER = "Idempotency-Key"


@dataclass(frozen=True)
class BatchKeys:
    batch_id: str
    idempotency_key: str


def new_batch_keys() -> BatchKeys:
    return BatchKeys(batch_id=str(uuid.uuid4()), idempotency_key=str(uuid.uuid4()))


def resolve_batch_keys(batch_id: str | None = None, idempotency_key: str | None = None) -> BatchKeys:
    if batch_id and idempotency_key:
        return BatchKeys(batch_id=batch_id, idempotency_key=idempotency_key)
    generated = new_batch_keys()
    return BatchKeys(
        batch_id=batch_id or generated.batch_id,
        idempotency_key=idempotency_key or generated.idempotency_key,
    )

