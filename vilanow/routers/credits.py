from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_user, http_errors
from vilanow.routers.schemas import PurchaseRequest, VerifyPaymentRequest

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/bundles")
def bundles(request: Request):
    return app_state(request, "credit_service").bundles()


@router.get("/balance")
def balance(request: Request, user: Record = Depends(current_user)):
    return {"credits": app_state(request, "credit_service").balance(user["id"])}


@router.get("/transactions")
def transactions(request: Request, user: Record = Depends(current_user)):
    return app_state(request, "credit_service").history(user["id"])


@router.post("/purchase", status_code=201)
def purchase(body: PurchaseRequest, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        result = app_state(request, "credit_service").purchase(user["id"], body.bundleId)
    return {"transaction": result.transaction, "reference": result.reference}


@router.post("/verify")
def verify(body: VerifyPaymentRequest, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        result = app_state(request, "credit_service").confirm(user["id"], body.reference)
    return {
        "transaction": result.transaction,
        "status": result.transaction.get("status"),
        "credits": result.transaction.get("credits"),
        "newBalance": result.new_balance,
    }
