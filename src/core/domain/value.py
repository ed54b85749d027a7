"""
Value handles — Бакеты стоимости и capability для mint/burn

Bucket — хэндл на количество fungible-токена, выданный custody-коллаборатором.
Движок никогда не держит "сырую" стоимость напрямую, только бакеты.

Capability — явный объект полномочий, передаваемый в mint/burn/withdraw
custody-коллаборатора вместо неявного ambient authority.
"""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from pydantic import BaseModel, Field


class Bucket(BaseModel):
    """
    Бакет токенов (value unit).

    Каждый бакет имеет уникальный bucket_id: custody-коллаборатор
    отслеживает живые бакеты и отвергает повторное использование.
    """

    token_id: str = Field(..., min_length=1, description="Идентификатор токена")
    amount: Decimal = Field(..., gt=0, description="Количество токенов в бакете")
    bucket_id: str = Field(
        default_factory=lambda: uuid.uuid4().hex, description="Уникальный id бакета"
    )

    model_config = {"frozen": True}


@dataclass(frozen=True)
class Capability:
    """
    Scoped permission object.

    holder — владелец полномочий (например, 'synthetic-pool').
    key — секрет, сверяемый custody-коллаборатором с контроллером токена.
    """

    holder: str
    key: str = field(repr=False)
