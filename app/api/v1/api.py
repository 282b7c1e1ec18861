from fastapi import APIRouter
from app.api.v1.endpoints import documents, payments, mpesa

api_router = APIRouter()
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(mpesa.router, prefix="/mpesa", tags=["mpesa"])
