import pytest

pytestmark = pytest.mark.anyio

DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ACK = {"ResultCode": 0, "ResultDesc": "Accepted"}


async def create_document(client):
    response = await client.post(
        "/api/documents/upload",
        data={"email": "a@b.com"},
        files={"file": ("report.docx", b"content", DOCX)},
    )
    return response.json()


def callback_payload(checkout_request_id, result_code=0, receipt="QKL1234ABC"):
    stk = {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": checkout_request_id,
        "ResultCode": result_code,
        "ResultDesc": "The service request is processed successfully.",
    }
    if result_code == 0:
        stk["CallbackMetadata"] = {
            "Item": [
                {"Name": "Amount", "Value": 60},
                {"Name": "MpesaReceiptNumber", "Value": receipt},
                {"Name": "PhoneNumber", "Value": 254712345678},
            ]
        }
    return {"Body": {"stkCallback": stk}}


async def test_initiate_unknown_document(client):
    response = await client.post(
        "/api/payments/initiate",
        json={"documentId": "missing", "phoneNumber": "0712345678"},
    )

    assert response.status_code == 404


async def test_initiate_rejects_unknown_fields(client):
    document = await create_document(client)

    response = await client.post(
        "/api/payments/initiate",
        json={"documentId": document["id"], "phoneNumber": "0712345678", "amount": 1},
    )

    assert response.status_code == 400


async def test_initiate_rejects_missing_phone(client):
    document = await create_document(client)

    response = await client.post("/api/payments/initiate", json={"documentId": document["id"]})

    assert response.status_code == 400


async def test_initiate_rejects_invalid_phone(client):
    document = await create_document(client)

    response = await client.post(
        "/api/payments/initiate",
        json={"documentId": document["id"], "phoneNumber": "555-0100"},
    )

    assert response.status_code == 400


async def test_confirm_twice_keeps_receipt(client):
    document = await create_document(client)
    await client.post(
        "/api/payments/initiate",
        json={"documentId": document["id"], "phoneNumber": "+254712345678"},
    )

    first = (await client.post("/api/payments/confirm", json={"documentId": document["id"]})).json()
    second = (await client.post("/api/payments/confirm", json={"documentId": document["id"]})).json()

    assert first["status"] == second["status"] == "completed"
    assert first["mpesaReceiptNumber"] == second["mpesaReceiptNumber"]
    payments = (await client.get(f"/api/documents/{document['id']}/payments")).json()
    assert len(payments) == 1


async def test_confirm_unknown_document(client):
    response = await client.post("/api/payments/confirm", json={"documentId": "missing"})

    assert response.status_code == 404


async def test_callback_completes_payment(client):
    document = await create_document(client)
    initiated = (await client.post(
        "/api/payments/initiate",
        json={"documentId": document["id"], "phoneNumber": "0712345678"},
    )).json()

    response = await client.post(
        "/api/mpesa/callback", json=callback_payload(initiated["checkoutRequestId"])
    )

    assert response.status_code == 200
    assert response.json() == ACK
    updated = (await client.get(f"/api/documents/{document['id']}")).json()
    assert updated["paymentStatus"] == "completed"
    assert updated["mpesaReceiptNumber"] == "QKL1234ABC"


async def test_callback_failure_marks_document_failed(client):
    document = await create_document(client)
    initiated = (await client.post(
        "/api/payments/initiate",
        json={"documentId": document["id"], "phoneNumber": "0712345678"},
    )).json()

    response = await client.post(
        "/api/mpesa/callback", json=callback_payload(initiated["checkoutRequestId"], result_code=1032)
    )

    assert response.json() == ACK
    updated = (await client.get(f"/api/documents/{document['id']}")).json()
    assert updated["paymentStatus"] == "failed"
    download = await client.get(f"/api/documents/{document['id']}/download")
    assert download.status_code == 403


async def test_callback_unknown_checkout_is_acknowledged(client):
    response = await client.post("/api/mpesa/callback", json=callback_payload("ws_CO_unknown"))

    assert response.status_code == 200
    assert response.json() == ACK


async def test_callback_malformed_payload_is_acknowledged(client):
    response = await client.post("/api/mpesa/callback", json={"Body": {"unexpected": True}})

    assert response.status_code == 200
    assert response.json() == ACK


async def test_callback_non_json_body_is_acknowledged(client):
    response = await client.post(
        "/api/mpesa/callback",
        content=b"<xml>not json</xml>",
        headers={"content-type": "application/xml"},
    )

    assert response.status_code == 200
    assert response.json() == ACK


async def test_callback_json_array_is_acknowledged(client):
    response = await client.post("/api/mpesa/callback", json=[{"Body": {}}])

    assert response.status_code == 200
    assert response.json() == ACK


async def test_confirm_on_failed_document_reports_failure(client):
    document = await create_document(client)
    initiated = (await client.post(
        "/api/payments/initiate",
        json={"documentId": document["id"], "phoneNumber": "0712345678"},
    )).json()
    await client.post(
        "/api/mpesa/callback", json=callback_payload(initiated["checkoutRequestId"], result_code=1032)
    )

    response = await client.post("/api/payments/confirm", json={"documentId": document["id"]})

    assert response.status_code == 200
    assert response.json()["status"] == "failed"
    assert response.json()["mpesaReceiptNumber"] is None
