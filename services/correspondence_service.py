# services/correspondence_service.py
"""
Correspondence templates and the documents generated from them.

Templates use {{token}} placeholders. substitute_variables() is the only
place that fills them in.
"""
import logging
import re
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from errors import ConflictError, NotFoundError
from models import Correspondence, CorrespondenceTemplate, Tenant
from models.correspondence import CorrespondenceStatus
from schemas.correspondence import TemplateCreate, TemplateUpdate

logger = logging.getLogger(__name__)

# Leftmost "{{" up to the first "}}": "{{{name}}}" is the token "{name" followed by "}"
TOKEN_PATTERN = re.compile(r"\{\{(.*?)\}\}")


def _token_name(key: str) -> str:
     """Accept both "name" and "{{name}}" as variable keys."""
     match = TOKEN_PATTERN.fullmatch(key)
     return match.group(1) if match else key


def substitute_variables(template: str, variables: Optional[Dict[str, str]] = None,
                         today: Optional[date] = None) -> str:
     """
     Replace {{token}} placeholders in one pass.

     current_date (ISO date) and current_year are always available; caller
     variables with the same name win. Token names are matched literally.
     Tokens with no value are left as they are.
     """
     today = today or date.today()
     lookup = {"current_date": today.isoformat(), "current_year": str(today.year)}
     for key, value in (variables or {}).items():
          lookup[_token_name(key)] = str(value)

     def replace(match: re.Match) -> str:
          value = lookup.get(match.group(1))
          return match.group(0) if value is None else value

     return TOKEN_PATTERN.sub(replace, template)


def template_tokens(text: str) -> List[str]:
     """Distinct token names in order of first appearance."""
     seen = []
     for name in TOKEN_PATTERN.findall(text):
          if name not in seen:
               seen.append(name)
     return seen


def tenant_variables(tenant: Tenant) -> Dict[str, str]:
     values = {
          "tenant_name": tenant.name,
          "tenant_email": tenant.email or "",
          "rent_amount": f"{tenant.rent:.2f}" if tenant.rent is not None else "",
          "lease_start": tenant.lease_start.isoformat() if tenant.lease_start else "",
          "lease_end": tenant.lease_end.isoformat() if tenant.lease_end else "",
     }
     if tenant.property is not None:
          values["property_name"] = tenant.property.name
          values["property_address"] = tenant.property.address or ""
     return values


class CorrespondenceService:
     """Template CRUD and correspondence generation."""

     # --- templates -------------------------------------------------------

     @staticmethod
     def get_template(db: Session, user_id: int, template_id: int) -> CorrespondenceTemplate:
          template = (
               db.query(CorrespondenceTemplate)
               .filter(CorrespondenceTemplate.id == template_id, CorrespondenceTemplate.user_id == user_id)
               .first()
          )
          if not template:
               raise NotFoundError(f"Template with ID {template_id} not found")
          return template

     @staticmethod
     def list_templates(db: Session, user_id: int) -> List[CorrespondenceTemplate]:
          return (
               db.query(CorrespondenceTemplate)
               .filter(CorrespondenceTemplate.user_id == user_id)
               .order_by(CorrespondenceTemplate.name, CorrespondenceTemplate.id)
               .all()
          )

     @staticmethod
     def create_template(db: Session, user_id: int, data: TemplateCreate) -> CorrespondenceTemplate:
          variables = data.variables or template_tokens(f"{data.subject}\n{data.content}")
          template = CorrespondenceTemplate(
               user_id=user_id,
               name=data.name,
               type=data.type,
               subject=data.subject,
               content=data.content,
               variables=variables,
          )
          db.add(template)
          db.flush()
          return template

     @staticmethod
     def update_template(db: Session, user_id: int, template_id: int, data: TemplateUpdate) -> CorrespondenceTemplate:
          template = CorrespondenceService.get_template(db, user_id, template_id)
          for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
               setattr(template, field, value)
          db.flush()
          return template

     @staticmethod
     def delete_template(db: Session, user_id: int, template_id: int) -> None:
          template = CorrespondenceService.get_template(db, user_id, template_id)
          db.delete(template)
          db.flush()

     # --- correspondence --------------------------------------------------

     @staticmethod
     def generate(
          db: Session,
          user_id: int,
          template_id: int,
          tenant_id: int,
          variables: Optional[Dict[str, str]] = None,
          today: Optional[date] = None
     ) -> Tuple[Correspondence, CorrespondenceTemplate]:
          """
          Create a draft from a template for one tenant.

          Tenant details (tenant_name, tenant_email, rent_amount, property_name,
          ...) are filled in automatically; caller variables override them.

          Raises:
               NotFoundError: If the template or the tenant is missing
          """
          template = CorrespondenceService.get_template(db, user_id, template_id)
          tenant = (
               db.query(Tenant)
               .options(joinedload(Tenant.property))
               .filter(Tenant.id == tenant_id, Tenant.user_id == user_id)
               .first()
          )
          if not tenant:
               raise NotFoundError(f"Tenant with ID {tenant_id} not found")

          values = tenant_variables(tenant)
          values.update(variables or {})

          correspondence = Correspondence(
               user_id=user_id,
               template_id=template.id,
               tenant_id=tenant.id,
               subject=substitute_variables(template.subject, values, today),
               content=substitute_variables(template.content, values, today),
               status=CorrespondenceStatus.DRAFT,
          )
          db.add(correspondence)
          db.flush()
          logger.info("Generated correspondence %s from template %s for tenant %s",
                      correspondence.id, template.id, tenant.id)
          return correspondence, template

     @staticmethod
     def get_correspondence(db: Session, user_id: int, correspondence_id: int) -> Correspondence:
          correspondence = (
               db.query(Correspondence)
               .filter(Correspondence.id == correspondence_id, Correspondence.user_id == user_id)
               .first()
          )
          if not correspondence:
               raise NotFoundError(f"Correspondence with ID {correspondence_id} not found")
          return correspondence

     @staticmethod
     def list_correspondence(
          db: Session,
          user_id: int,
          tenant_id: Optional[int] = None,
          status: Optional[CorrespondenceStatus] = None
     ) -> List[Correspondence]:
          query = db.query(Correspondence).filter(Correspondence.user_id == user_id)
          if tenant_id:
               query = query.filter(Correspondence.tenant_id == tenant_id)
          if status:
               query = query.filter(Correspondence.status == status)
          return query.order_by(Correspondence.created_at.desc(), Correspondence.id.desc()).all()

     @staticmethod
     def mark_sent(db: Session, user_id: int, correspondence_id: int) -> Correspondence:
          """
          Record that a draft was sent. Delivery itself happens elsewhere.

          Raises:
               ConflictError: If it was already sent
          """
          correspondence = CorrespondenceService.get_correspondence(db, user_id, correspondence_id)
          if correspondence.status == CorrespondenceStatus.SENT:
               raise ConflictError("Correspondence has already been sent")
          correspondence.status = CorrespondenceStatus.SENT
          correspondence.sent_at = datetime.now(timezone.utc).replace(tzinfo=None)
          db.flush()
          return correspondence

     @staticmethod
     def delete_correspondence(db: Session, user_id: int, correspondence_id: int) -> None:
          correspondence = CorrespondenceService.get_correspondence(db, user_id, correspondence_id)
          db.delete(correspondence)
          db.flush()
