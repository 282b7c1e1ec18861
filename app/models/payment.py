from typing import Optional, TYPE_CHECKING
from datetime import datetime, timezone
import uuid
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

from app.models.document import PaymentStatus

if TYPE_CHECKING:
    from app.models.document import Document

class PaymentBase(SQLModel):
    checkout_request_id: Optional[str] = Field(default=None, index=True)
    merchant_request_id: Optional[str] = None
    amount: int = Field(default=60)
    phone_number: str
    status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    mpesa_receipt_number: Optional[str] = None
    result_code: Optional[str] = None
    result_desc: Optional[str] = None

class Payment(PaymentBase, table=True):
    __tablename__ = "payments"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True))

    document_id: str = Field(foreign_key="documents.id", index=True)
    document: Optional["Document"] = Relationship(back_populates="payments")

class PaymentRead(PaymentBase):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    document_id: str
    created_at: datetime
    updated_at: datetime

# --- Request / response bodies ---

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class PaymentInitiateRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    document_id: str
    phone_number: str

    @field_validator("document_id", "phone_number")
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

class PaymentInitiateResponse(CamelModel):
    success: bool
    message: str
    checkout_request_id: str
    merchant_request_id: str

class PaymentConfirmRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    document_id: str

class PaymentConfirmResponse(CamelModel):
    status: PaymentStatus
    document_id: str
    mpesa_receipt_number: Optional[str] = None
    message: str

