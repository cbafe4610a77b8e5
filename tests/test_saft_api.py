"""SAF-T PT export routes."""
import xml.etree.ElementTree as ET
from decimal import Decimal

NS = {"s": "urn:OECD:StandardAuditFile-Tax:PT_1.04_01"}


def _q1_payload(company_info):
     return {"fiscalYear": 2025, "startMonth": 1, "endMonth": 3, "companyInfo": company_info}


class TestSaftExport:

     def test_requirements(self, client, auth_headers, seed):
          response = client.get("/api/tax/saft-pt", headers=auth_headers)
          assert response.status_code == 200
          data = response.json()["data"]
          assert "M07" in data["taxExemptionCodes"]
          assert "companyInfo" in data["requirements"]

     def test_export(self, client, auth_headers, seed, company_info):
          response = client.post("/api/tax/saft-pt", json=_q1_payload(company_info), headers=auth_headers)
          assert response.status_code == 200
          data = response.json()["data"]
          assert data["success"] is True
          assert data["invoiceCount"] == 2
          assert data["totalAmount"] == 2400.0
          assert data["filename"] == "SAF-T_123456789_2025_01-03.xml"
          assert data["period"] == {"fiscalYear": 2025, "startDate": "2025-01-01", "endDate": "2025-03-31"}

          root = ET.fromstring(data["xml"].encode("utf-8"))
          numbers = [el.text for el in root.findall(".//s:Invoice/s:InvoiceNo", NS)]
          assert numbers == ["INV-2025-00001", "INV-2025-00002"]

     def test_all_errors_reported(self, client, auth_headers, seed, company_info):
          company_info["nif"] = "123456780"
          company_info["address"]["postalCode"] = "1100"
          payload = {**_q1_payload(company_info), "startMonth": 6}
          response = client.post("/api/tax/saft-pt", json=payload, headers=auth_headers)
          assert response.status_code == 400
          body = response.json()
          assert body["error"].startswith("SAF-T export validation failed")
          assert len(body["errors"]) == 3
          assert "Start month cannot be after end month" in body["errors"]

     def test_missing_company_info(self, client, auth_headers, seed):
          response = client.post("/api/tax/saft-pt", json={"fiscalYear": 2025}, headers=auth_headers)
          assert response.status_code == 400
          assert any(error.startswith("companyInfo") for error in response.json()["errors"])


class TestSaftDownload:

     def test_download(self, client, auth_headers, seed):
          params = {
               "fiscalYear": 2025, "startMonth": 1, "endMonth": 3,
               "nif": "123456789", "name": "Ana Proprietária",
               "addressDetail": "Rua Augusta 120", "city": "Lisboa", "postalCode": "1100-053",
          }
          response = client.get("/api/tax/saft-pt/download", params=params, headers=auth_headers)
          assert response.status_code == 200
          assert response.headers["content-type"].startswith("application/xml")
          assert response.headers["content-disposition"] == 'attachment; filename="SAF-T_123456789_2025_01-03.xml"'
          assert response.headers["cache-control"] == "no-store"
          assert response.text.startswith('<?xml version="1.0" encoding="UTF-8"?>')

     def test_download_without_company(self, client, auth_headers, seed):
          response = client.get("/api/tax/saft-pt/download", params={"fiscalYear": 2025}, headers=auth_headers)
          assert response.status_code == 400


class TestSaftTotals:

     def test_edited_amount_flows_into_credit_total(self, client, auth_headers, seed, company_info):
          created = client.post("/api/invoices", json={
               "tenantId": seed["tenants"]["ana"].id,
               "issueDate": "2025-03-01",
               "dueDate": "2025-03-08",
               "description": "Rent March 2025",
               "lineItems": [{"description": "Monthly Rent", "quantity": 1, "unitPrice": 1200}],
          }, headers=auth_headers)
          assert created.status_code == 201
          invoice_id = created.json()["data"]["id"]

          updated = client.put(f"/api/invoices/{invoice_id}", json={"amount": 1500}, headers=auth_headers)
          assert updated.status_code == 200
          assert updated.json()["data"]["lineItems"][0]["total"] == 1500.0

          response = client.post("/api/tax/saft-pt", json=_q1_payload(company_info), headers=auth_headers)
          data = response.json()["data"]
          assert data["invoiceCount"] == 3
          assert data["totalAmount"] == 3900.0

          root = ET.fromstring(data["xml"].encode("utf-8"))
          gross = sum(Decimal(el.text) for el in root.findall(".//s:Invoice/s:DocumentTotals/s:GrossTotal", NS))
          assert root.find(".//s:SalesInvoices/s:TotalCredit", NS).text == "3900.00"
          assert gross == Decimal("3900.00")

     def test_amount_must_match_line_items(self, client, auth_headers, seed):
          response = client.post("/api/invoices", json={
               "tenantId": seed["tenants"]["ana"].id,
               "amount": 1500,
               "dueDate": "2025-03-08",
               "lineItems": [{"description": "Monthly Rent", "quantity": 1, "unitPrice": 1200}],
          }, headers=auth_headers)
          assert response.status_code == 400
          assert response.json()["field"] == "amount"


class TestSaftStoreFailure:

     def test_export(self, failing_data_source, auth_headers, seed, company_info):
          response = failing_data_source.post("/api/tax/saft-pt", json=_q1_payload(company_info), headers=auth_headers)
          assert response.status_code == 500
          assert response.json() == {"error": "Database operation failed"}
