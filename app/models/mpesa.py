from typing import Optional, List, Any
from pydantic import BaseModel, Field

# M-Pesa STK push callback envelope.
# Aliases mirror the provider's payload keys.

class CallbackItem(BaseModel):
    name: str = Field(alias="Name")
    value: Optional[Any] = Field(default=None, alias="Value")

class CallbackMeta(BaseModel):
    items: List[CallbackItem] = Field(default_factory=list, alias="Item")

class StkCallback(BaseModel):
    merchant_request_id: Optional[str] = Field(default=None, alias="MerchantRequestID")
    checkout_request_id: str = Field(alias="CheckoutRequestID")
    result_code: int = Field(alias="ResultCode")
    result_desc: Optional[str] = Field(default=None, alias="ResultDesc")
    metadata: Optional[CallbackMeta] = Field(default=None, alias="CallbackMetadata")

    def metadata_value(self, name: str) -> Optional[Any]:
        if not self.metadata:
            return None
        for item in self.metadata.items:
            if item.name == name:
                return item.value
        return None

class CallbackBody(BaseModel):
    stk_callback: StkCallback = Field(alias="stkCallback")

class MpesaCallback(BaseModel):
    body: CallbackBody = Field(alias="Body")

class CallbackAck(BaseModel):
    ResultCode: int = 0
    ResultDesc: str = "Accepted"
