from decimal import Decimal


async def _payment(client, headers, invoice_id, amount, **extra):
    data = {"invoice_id": invoice_id, "amount": amount, "payment_method": "bank_transfer"}
    data.update(extra)
    return await client.post("/payments", json=data, headers=headers)


async def _invoice(client, invoice_id, headers):
    resp = await client.get(f"/invoices/{invoice_id}", headers=headers)
    return resp.json()["data"]


async def test_partial_then_full_payment(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])

    resp = await _payment(client, admin_headers, invoice["id"], "400")
    assert resp.status_code == 201, resp.text
    assert resp.json()["data"]["currency"] == "AED"

    current = await _invoice(client, invoice["id"], admin_headers)
    assert current["status"] == "partially_paid"
    assert Decimal(current["total_paid"]) == Decimal("400.00")
    assert Decimal(current["balance_due"]) == Decimal("650.00")

    resp = await client.post(
        f"/payments/invoice/{invoice['id']}/full",
        json={"payment_method": "cash"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    full = resp.json()["data"]
    assert Decimal(full["amount"]) == Decimal("650.00")
    assert full["notes"] == "Full payment"

    current = await _invoice(client, invoice["id"], admin_headers)
    assert current["status"] == "fully_paid"
    assert Decimal(current["balance_due"]) == Decimal("0")

    resp = await client.post(
        f"/payments/invoice/{invoice['id']}/full",
        json={"payment_method": "cash"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


async def test_overpayment_rejected(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])

    resp = await _payment(client, admin_headers, invoice["id"], "1050.01")
    assert resp.status_code == 400
    body = resp.json()
    assert body["error_code"] == "PAYMENT_OVERPAYMENT"
    assert Decimal(body["details"]["balance_due"]) == Decimal("1050.00")


async def test_currency_mismatch_rejected(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])

    resp = await _payment(client, admin_headers, invoice["id"], "10", currency="USD")
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "PAYMENT_CURRENCY_MISMATCH"


async def test_cancelled_invoice_rejects_payments(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    await client.post(f"/invoices/{invoice['id']}/cancel", headers=admin_headers)

    resp = await _payment(client, admin_headers, invoice["id"], "10")
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVOICE_INVALID_STATE"


async def test_refund_reopens_invoice(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    await client.post(f"/invoices/{invoice['id']}/send", headers=admin_headers)

    paid = (await _payment(client, admin_headers, invoice["id"], "1050")).json()["data"]
    assert (await _invoice(client, invoice["id"], admin_headers))["status"] == "fully_paid"

    resp = await client.post(
        f"/payments/{paid['id']}/refund",
        json={"amount": "2000", "reason": "Duplicate"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "PAYMENT_REFUND_EXCEEDS_ORIGINAL"

    resp = await client.post(
        f"/payments/{paid['id']}/refund",
        json={"amount": "300", "reason": "Goodwill"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    refund = resp.json()["data"]
    assert Decimal(refund["amount"]) == Decimal("-300.00")
    assert refund["transaction_id"] == f"REFUND-{paid['id']}"
    assert refund["refund_of_id"] == paid["id"]
    assert refund["notes"] == f"Refund for payment {paid['id']}: Goodwill"

    current = await _invoice(client, invoice["id"], admin_headers)
    assert current["status"] == "partially_paid"
    assert Decimal(current["total_paid"]) == Decimal("750.00")

    # a refund row is not itself refundable or editable
    resp = await client.post(
        f"/payments/{refund['id']}/refund",
        json={"amount": "1", "reason": "x"},
        headers=admin_headers,
    )
    assert resp.status_code == 400

    resp = await client.patch(f"/payments/{refund['id']}", json={"amount": "10"}, headers=admin_headers)
    assert resp.status_code == 400


async def test_update_and_delete_recalculate(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    payment = (await _payment(client, admin_headers, invoice["id"], "500")).json()["data"]

    resp = await client.patch(f"/payments/{payment['id']}", json={"amount": "1051"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "PAYMENT_OVERPAYMENT"

    resp = await client.patch(f"/payments/{payment['id']}", json={"amount": "1050"}, headers=admin_headers)
    assert resp.status_code == 200
    assert (await _invoice(client, invoice["id"], admin_headers))["status"] == "fully_paid"

    resp = await client.delete(f"/payments/{payment['id']}", headers=admin_headers)
    assert resp.status_code == 200
    current = await _invoice(client, invoice["id"], admin_headers)
    assert current["status"] == "draft"
    assert Decimal(current["balance_due"]) == Decimal("1050.00")



async def test_repeated_refunds_bounded_by_original(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    await client.post(f"/invoices/{invoice['id']}/send", headers=admin_headers)
    paid = (await _payment(client, admin_headers, invoice["id"], "1050")).json()["data"]

    async def refund(amount):
        return await client.post(
            f"/payments/{paid['id']}/refund",
            json={"amount": amount, "reason": "Returned"},
            headers=admin_headers,
        )

    assert (await refund("800")).status_code == 201

    resp = await refund("800")
    assert resp.status_code == 400
    body = resp.json()
    assert body["error_code"] == "PAYMENT_REFUND_EXCEEDS_ORIGINAL"
    assert Decimal(body["details"]["refunded_amount"]) == Decimal("800.00")

    assert (await refund("250")).status_code == 201
    assert (await refund("0.01")).status_code == 400

    current = await _invoice(client, invoice["id"], admin_headers)
    assert Decimal(current["total_paid"]) == Decimal("0")
    assert Decimal(current["balance_due"]) == Decimal("1050.00")
    assert current["status"] == "sent"


async def test_refunded_payment_cannot_be_deleted_or_shrunk(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    paid = (await _payment(client, admin_headers, invoice["id"], "500")).json()["data"]
    refund = (
        await client.post(
            f"/payments/{paid['id']}/refund",
            json={"amount": "200", "reason": "Goodwill"},
            headers=admin_headers,
        )
    ).json()["data"]

    resp = await client.delete(f"/payments/{paid['id']}", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "PAYMENT_HAS_REFUNDS"

    resp = await client.patch(f"/payments/{paid['id']}", json={"amount": "150"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "PAYMENT_REFUND_EXCEEDS_ORIGINAL"

    resp = await client.patch(f"/payments/{paid['id']}", json={"amount": "300"}, headers=admin_headers)
    assert resp.status_code == 200

    current = await _invoice(client, invoice["id"], admin_headers)
    assert Decimal(current["total_paid"]) == Decimal("100.00")
    assert Decimal(current["balance_due"]) == Decimal("950.00")

    # once its refunds are gone the original can be deleted
    assert (await client.delete(f"/payments/{refund['id']}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/payments/{paid['id']}", headers=admin_headers)).status_code == 200

    current = await _invoice(client, invoice["id"], admin_headers)
    assert Decimal(current["total_paid"]) == Decimal("0")
    assert Decimal(current["balance_due"]) == Decimal("1050.00")


async def test_update_rejects_explicit_nulls(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    payment = (await _payment(client, admin_headers, invoice["id"], "500")).json()["data"]

    for field in ("amount", "payment_method", "payment_date"):
        resp = await client.patch(f"/payments/{payment['id']}", json={field: None}, headers=admin_headers)
        assert resp.status_code == 422, field

    resp = await client.patch(f"/payments/{payment['id']}", json={"notes": None}, headers=admin_headers)
    assert resp.status_code == 200


async def test_summary_and_listing(client, create_customer, create_invoice, admin_headers):
    customer = await create_customer()
    invoice = await create_invoice(customer["id"])
    await _payment(client, admin_headers, invoice["id"], "262.50", transaction_id="TX-1")
    await _payment(client, admin_headers, invoice["id"], "262.50", payment_method="cash")

    resp = await client.get(f"/payments/invoice/{invoice['id']}/summary", headers=admin_headers)
    summary = resp.json()["data"]
    assert summary["payment_count"] == 2
    assert Decimal(summary["total_paid"]) == Decimal("525.00")
    assert Decimal(summary["payment_percentage"]) == Decimal("50.00")

    resp = await client.get("/payments", params={"search": "TX-1"}, headers=admin_headers)
    items = resp.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["invoice_number"] == invoice["invoice_number"]
    assert items[0]["customer_name"] == "Sara Ahmed"

    resp = await client.get("/payments/stats", headers=admin_headers)
    stats = resp.json()["data"]
    assert stats["total"] == 2
    assert stats["by_method"]["counts"] == {"bank_transfer": 1, "cash": 1}
    assert Decimal(stats["total_value"]["AED"]) == Decimal("525.00")

    resp = await client.get("/payments/recent", headers=admin_headers)
    assert len(resp.json()["data"]) == 2

    resp = await client.get("/payments/trends", headers=admin_headers)
    points = resp.json()["data"]
    assert len(points) == 1
    assert points[0]["count"] == 2
    assert Decimal(points[0]["total_aed"]) == Decimal("525.00")
