"""Report routes: query-string and JSON body variants."""
from datetime import date

Q1 = {"type": "financial", "startDate": "2025-01-01", "endDate": "2025-03-31"}


class TestReportRoutes:

     def test_financial_from_query(self, client, auth_headers, seed):
          response = client.get("/api/reports", params=Q1, headers=auth_headers)
          assert response.status_code == 200
          data = response.json()["data"]
          assert data["type"] == "financial"
          assert data["totalIncome"] == 3000.0
          assert data["totalExpenses"] == 400.0
          assert data["netIncome"] == 2600.0
          assert data["profitMargin"] == 86.67
          assert data["period"]["label"] == "Jan 2025 - Mar 2025"

     def test_financial_from_body(self, client, auth_headers, seed):
          response = client.post("/api/reports", json=Q1, headers=auth_headers)
          assert response.status_code == 200
          assert response.json()["data"]["income"]["totalRent"] == 2400.0

     def test_financial_csv(self, client, auth_headers, seed):
          response = client.get("/api/reports", params={**Q1, "format": "csv"}, headers=auth_headers)
          assert response.status_code == 200
          assert response.headers["content-type"].startswith("text/csv")
          filename = f"financial-report-{date.today().isoformat()}.csv"
          assert response.headers["content-disposition"] == f'attachment; filename="{filename}"'
          lines = response.text.split("\n")
          assert lines[0].startswith("Date,")
          assert "Boiler repair" in response.text

     def test_tax_report(self, client, auth_headers, seed):
          response = client.get("/api/reports", params={"type": "tax", "year": "2025"}, headers=auth_headers)
          assert response.status_code == 200
          data = response.json()["data"]
          assert data["grossIncome"] == 3000.0
          assert data["quarterlyBreakdown"][0] == {
               "quarter": "Q1", "income": 3000.0, "expenses": 400.0, "net": 2600.0,
          }

     def test_rent_roll(self, client, auth_headers, seed):
          response = client.post("/api/reports", json={"type": "rent-roll", "asOf": "2025-03-15"},
                                 headers=auth_headers)
          data = response.json()["data"]
          assert data["totalMonthlyRent"] == 1200.0
          assert data["occupancyRate"] == 50.0

     def test_invoice_summary(self, client, auth_headers, seed):
          response = client.get("/api/reports", params={"type": "invoice-summary"}, headers=auth_headers)
          summary = response.json()["data"]["summary"]
          assert summary["invoiceCount"]["paid"] == 1
          assert summary["invoiceCount"]["pending"] == 1


class TestReportValidation:

     def test_missing_type(self, client, auth_headers, seed):
          response = client.get("/api/reports", headers=auth_headers)
          assert response.status_code == 400
          assert response.json()["error"] == "Report type is required"
          assert response.json()["field"] == "type"

     def test_unknown_type(self, client, auth_headers, seed):
          response = client.get("/api/reports", params={"type": "balance-sheet"}, headers=auth_headers)
          assert response.status_code == 400
          assert response.json()["error"].startswith("Invalid report request")

     def test_unknown_field(self, client, auth_headers, seed):
          response = client.get("/api/reports", params={"type": "tax", "startDate": "2025-01-01"},
                                headers=auth_headers)
          assert response.status_code == 400
          assert any("startDate" in error for error in response.json()["errors"])

     def test_inverted_range(self, client, auth_headers, seed):
          response = client.post("/api/reports", json={**Q1, "startDate": "2025-04-01"}, headers=auth_headers)
          assert response.status_code == 400
          assert "startDate must be on or before endDate" in response.json()["error"]

     def test_year_out_of_range(self, client, auth_headers, seed):
          response = client.post("/api/reports", json={"type": "tax", "year": 1999}, headers=auth_headers)
          assert response.status_code == 400

     def test_requires_auth(self, client, seed):
          assert client.get("/api/reports", params=Q1).status_code == 401


class TestReportStoreFailure:

     def test_query_variant(self, failing_data_source, auth_headers, seed):
          response = failing_data_source.get("/api/reports", params=Q1, headers=auth_headers)
          assert response.status_code == 500
          assert response.json() == {"error": "Database operation failed"}

     def test_body_variant(self, failing_data_source, auth_headers, seed):
          response = failing_data_source.post("/api/reports", json={"type": "tax", "year": 2025}, headers=auth_headers)
          assert response.status_code == 500
          assert response.json() == {"error": "Database operation failed"}
