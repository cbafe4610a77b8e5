"""Correspondence templates and generated letters."""
import pytest

REMINDER = {
     "name": "Rent reminder",
     "type": "reminder",
     "subject": "Rent due for {{property_name}}",
     "content": "Dear {{tenant_name}},\nYour rent of {{rent_amount}} EUR is due on {{due_date}}.\n{{signature}}",
}


@pytest.fixture
def template_id(client, auth_headers, seed):
     response = client.post("/api/correspondence/templates", json=REMINDER, headers=auth_headers)
     assert response.status_code == 201
     return response.json()["data"]["id"]


class TestTemplates:

     def test_create_collects_tokens(self, client, auth_headers, template_id):
          response = client.get(f"/api/correspondence/templates/{template_id}", headers=auth_headers)
          data = response.json()["data"]
          assert data["variables"] == ["property_name", "tenant_name", "rent_amount", "due_date", "signature"]
          assert data["content"].startswith("Dear {{tenant_name}},\n")

     def test_list_and_update(self, client, auth_headers, template_id):
          response = client.put(f"/api/correspondence/templates/{template_id}",
                                json={"name": "Monthly reminder"}, headers=auth_headers)
          assert response.status_code == 200
          assert response.json()["data"]["name"] == "Monthly reminder"
          assert response.json()["data"]["subject"] == REMINDER["subject"]

          response = client.get("/api/correspondence/templates", headers=auth_headers)
          assert [t["name"] for t in response.json()["data"]] == ["Monthly reminder"]

     def test_delete(self, client, auth_headers, template_id):
          response = client.delete(f"/api/correspondence/templates/{template_id}", headers=auth_headers)
          assert response.status_code == 204
          response = client.get(f"/api/correspondence/templates/{template_id}", headers=auth_headers)
          assert response.status_code == 404

     def test_missing_subject(self, client, auth_headers, seed):
          payload = {k: v for k, v in REMINDER.items() if k != "subject"}
          response = client.post("/api/correspondence/templates", json=payload, headers=auth_headers)
          assert response.status_code == 400


class TestGenerate:

     def _generate(self, client, auth_headers, template_id, tenant_id, variables=None):
          return client.post("/api/correspondence/generate", json={
               "templateId": template_id,
               "tenantId": tenant_id,
               "variables": variables or {},
          }, headers=auth_headers)

     def test_tenant_details_filled_in(self, client, auth_headers, seed, template_id):
          response = self._generate(client, auth_headers, template_id, seed["tenants"]["ana"].id,
                                    {"due_date": "2025-04-08"})
          assert response.status_code == 201
          data = response.json()["data"]
          assert data["subject"] == "Rent due for Rua Augusta 120"
          assert data["content"] == (
               "Dear Ana Silva,\nYour rent of 1200.00 EUR is due on 2025-04-08.\n{{signature}}"
          )
          assert data["status"] == "draft"
          assert data["originalTemplate"] == {"id": template_id, "name": "Rent reminder", "type": "reminder"}

     def test_caller_variables_win(self, client, auth_headers, seed, template_id):
          response = self._generate(client, auth_headers, template_id, seed["tenants"]["ana"].id,
                                    {"{{tenant_name}}": "Sra. Silva"})
          assert response.json()["data"]["content"].startswith("Dear Sra. Silva,")

     def test_caller_variables_escaped(self, client, auth_headers, seed, template_id):
          response = self._generate(client, auth_headers, template_id, seed["tenants"]["ana"].id,
                                    {"tenant_name": "<script>x</script>Silva & Filhos"})
          assert response.status_code == 201
          assert response.json()["data"]["content"].startswith("Dear xSilva &amp; Filhos,")

     def test_unknown_tenant(self, client, auth_headers, seed, template_id):
          response = self._generate(client, auth_headers, template_id, 9999)
          assert response.status_code == 404
          assert response.json()["error"] == "Tenant with ID 9999 not found"

     def test_unknown_template(self, client, auth_headers, seed):
          response = self._generate(client, auth_headers, 9999, seed["tenants"]["ana"].id)
          assert response.status_code == 404

     def test_send_once(self, client, auth_headers, seed, template_id):
          created = self._generate(client, auth_headers, template_id, seed["tenants"]["ana"].id).json()["data"]

          response = client.patch(f"/api/correspondence/{created['id']}/send", headers=auth_headers)
          assert response.status_code == 200
          assert response.json()["data"]["status"] == "sent"
          assert response.json()["data"]["sentAt"] is not None

          response = client.patch(f"/api/correspondence/{created['id']}/send", headers=auth_headers)
          assert response.status_code == 409

          response = client.get("/api/correspondence", params={"status": "sent"}, headers=auth_headers)
          assert [c["id"] for c in response.json()["data"]] == [created["id"]]

     def test_delete(self, client, auth_headers, seed, template_id):
          created = self._generate(client, auth_headers, template_id, seed["tenants"]["ana"].id).json()["data"]
          assert client.delete(f"/api/correspondence/{created['id']}", headers=auth_headers).status_code == 204
          assert client.get(f"/api/correspondence/{created['id']}", headers=auth_headers).status_code == 404
