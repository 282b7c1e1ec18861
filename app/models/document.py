from typing import Optional, TYPE_CHECKING, List
from enum import Enum
from datetime import datetime, timezone
import uuid
from pydantic import ConfigDict, EmailStr
from pydantic.alias_generators import to_camel
from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.payment import Payment

class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class DocumentBase(SQLModel):
    filename: str # Generated name on disk
    original_name: str
    file_size: int
    file_type: str # Lower-cased extension, e.g. ".docx"
    file_path: str
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, index=True)
    email: Optional[str] = None
    phone_number: Optional[str] = None
    mpesa_receipt_number: Optional[str] = None
    amount: int = Field(default=60)
    is_processed: bool = Field(default=False)

class Document(DocumentBase, table=True):
    __tablename__ = "documents"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True), index=True)

    payments: List["Payment"] = Relationship(back_populates="document")

class DocumentRead(DocumentBase):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    uploaded_at: datetime

class DocumentEmailUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr

class DocumentStats(SQLModel):
    total: int
    paid: int
    pending: int
    failed: int
    revenue: int
