"""Receipt and expense routes."""


class TestReceipts:

     def test_create(self, client, auth_headers, seed):
          response = client.post("/api/receipts", json={
               "tenantId": seed["tenants"]["ana"].id,
               "propertyId": seed["properties"]["lisbon"].id,
               "amount": 1200,
               "date": "2025-04-05",
               "description": "Rent April",
          }, headers=auth_headers)
          assert response.status_code == 201
          data = response.json()["data"]
          assert data["type"] == "rent"
          assert data["status"] == "paid"
          assert data["amount"] == 1200.0

     def test_unknown_tenant(self, client, auth_headers, seed):
          response = client.post("/api/receipts", json={
               "tenantId": 9999, "propertyId": seed["properties"]["lisbon"].id,
               "amount": 10, "date": "2025-04-05",
          }, headers=auth_headers)
          assert response.status_code == 404

     def test_list_by_range(self, client, auth_headers, seed):
          response = client.get("/api/receipts", params={"startDate": "2025-02-01", "endDate": "2025-03-31"},
                                headers=auth_headers)
          body = response.json()
          assert body["meta"]["total"] == 3
          assert [r["date"] for r in body["data"]] == ["2025-03-07", "2025-03-01", "2025-02-06"]

     def test_inverted_range(self, client, auth_headers, seed):
          response = client.get("/api/receipts", params={"startDate": "2025-03-01", "endDate": "2025-02-01"},
                                headers=auth_headers)
          assert response.status_code == 400

     def test_mark_pending_receipt_paid(self, client, auth_headers, seed):
          listing = client.get("/api/receipts", params={"startDate": "2025-03-07", "endDate": "2025-03-07"},
                               headers=auth_headers).json()["data"]
          receipt_id = listing[0]["id"]
          response = client.put(f"/api/receipts/{receipt_id}", json={"status": "paid"}, headers=auth_headers)
          assert response.json()["data"]["status"] == "paid"

          report = client.get("/api/reports", params={
               "type": "financial", "startDate": "2025-03-01", "endDate": "2025-03-31",
          }, headers=auth_headers).json()["data"]
          assert report["totalIncome"] == 1800.0

     def test_delete(self, client, auth_headers, seed):
          receipt_id = client.get("/api/receipts", headers=auth_headers).json()["data"][0]["id"]
          assert client.delete(f"/api/receipts/{receipt_id}", headers=auth_headers).status_code == 204
          assert client.get(f"/api/receipts/{receipt_id}", headers=auth_headers).status_code == 404


class TestExpenses:

     def test_create_and_filter(self, client, auth_headers, seed):
          response = client.post("/api/expenses", json={
               "propertyId": seed["properties"]["lisbon"].id,
               "amount": 45.5,
               "date": "2025-03-10",
               "category": "utilities",
               "description": "Water bill",
          }, headers=auth_headers)
          assert response.status_code == 201
          assert response.json()["data"]["amount"] == 45.5

          response = client.get("/api/expenses", params={"category": "utilities"}, headers=auth_headers)
          assert [e["description"] for e in response.json()["data"]] == ["Water bill"]

     def test_zero_amount_rejected(self, client, auth_headers, seed):
          response = client.post("/api/expenses", json={
               "propertyId": seed["properties"]["lisbon"].id,
               "amount": 0, "date": "2025-03-10", "category": "utilities",
          }, headers=auth_headers)
          assert response.status_code == 400

     def test_update_to_unknown_property(self, client, auth_headers, seed):
          expense_id = client.get("/api/expenses", headers=auth_headers).json()["data"][0]["id"]
          response = client.put(f"/api/expenses/{expense_id}", json={"propertyId": 9999}, headers=auth_headers)
          assert response.status_code == 404

     def test_list_newest_first(self, client, auth_headers, seed):
          response = client.get("/api/expenses", headers=auth_headers)
          assert [e["category"] for e in response.json()["data"]] == ["insurance", "maintenance"]
