# routers/tenants.py
"""Tenant API routes. The lease period lives on the tenant row."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_user_id
from errors import NotFoundError, ValidationError
from models import PaymentStatus, Property, Tenant
from schemas.common import DataResponse, ListResponse, PageMeta
from schemas.tenant import TenantCreate, TenantResponse, TenantUpdate

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


def _get_tenant(db: Session, user_id: int, tenant_id: int) -> Tenant:
     tenant = db.query(Tenant).filter(Tenant.id == tenant_id, Tenant.user_id == user_id).first()
     if not tenant:
          raise NotFoundError(f"Tenant with ID {tenant_id} not found")
     return tenant


def _check_property(db: Session, user_id: int, property_id: Optional[int]) -> None:
     if property_id is None:
          return
     if not db.query(Property.id).filter(Property.id == property_id, Property.user_id == user_id).first():
          raise NotFoundError(f"Property with ID {property_id} not found")


@router.post("", response_model=DataResponse[TenantResponse], status_code=status.HTTP_201_CREATED)
def create_tenant(
     tenant_data: TenantCreate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     _check_property(db, user_id, tenant_data.property_id)
     tenant = Tenant(
          user_id=user_id,
          property_id=tenant_data.property_id,
          name=tenant_data.name,
          email=tenant_data.email,
          phone=tenant_data.phone,
          tax_id=tenant_data.tax_id,
          rent=tenant_data.rent,
          lease_start=tenant_data.lease_start,
          lease_end=tenant_data.lease_end,
          payment_status=PaymentStatus(tenant_data.payment_status.value),
          notes=tenant_data.notes,
     )
     db.add(tenant)
     db.flush()
     return DataResponse(data=TenantResponse.model_validate(tenant))


@router.get("", response_model=ListResponse[TenantResponse])
def list_tenants(
     property_id: Optional[int] = Query(None, description="Filter by property ID"),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     query = db.query(Tenant).filter(Tenant.user_id == user_id)
     if property_id:
          query = query.filter(Tenant.property_id == property_id)

     total = query.count()
     tenants = (
          query.order_by(Tenant.name, Tenant.id)
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     return ListResponse(
          data=[TenantResponse.model_validate(t) for t in tenants],
          meta=PageMeta(total=total, page=page, page_size=page_size),
     )


@router.get("/{tenant_id}", response_model=DataResponse[TenantResponse])
def get_tenant(
     tenant_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     return DataResponse(data=TenantResponse.model_validate(_get_tenant(db, user_id, tenant_id)))


@router.put("/{tenant_id}", response_model=DataResponse[TenantResponse])
def update_tenant(
     tenant_id: int,
     tenant_data: TenantUpdate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     tenant = _get_tenant(db, user_id, tenant_id)
     changes = tenant_data.model_dump(exclude_unset=True, exclude_none=True)

     lease_start = changes.get("lease_start", tenant.lease_start)
     lease_end = changes.get("lease_end", tenant.lease_end)
     if lease_end < lease_start:
          raise ValidationError("leaseEnd must be on or after leaseStart", field="leaseEnd")
     if "property_id" in changes:
          _check_property(db, user_id, changes["property_id"])
     if "payment_status" in changes:
          changes["payment_status"] = PaymentStatus(changes["payment_status"].value)

     for field, value in changes.items():
          setattr(tenant, field, value)
     db.flush()
     return DataResponse(data=TenantResponse.model_validate(tenant))


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tenant(
     tenant_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     tenant = _get_tenant(db, user_id, tenant_id)
     db.delete(tenant)
     db.flush()
     return None
