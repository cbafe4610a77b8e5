# routers/properties.py
"""Property API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_user_id
from errors import ConflictError, NotFoundError
from models import Property, PropertyStatus, Receipt
from schemas.common import DataResponse, ListResponse, PageMeta
from schemas.property import PropertyCreate, PropertyResponse, PropertyStatusEnum, PropertyUpdate

router = APIRouter(prefix="/api/properties", tags=["properties"])


def _get_property(db: Session, user_id: int, property_id: int) -> Property:
     prop = db.query(Property).filter(Property.id == property_id, Property.user_id == user_id).first()
     if not prop:
          raise NotFoundError(f"Property with ID {property_id} not found")
     return prop


@router.post("", response_model=DataResponse[PropertyResponse], status_code=status.HTTP_201_CREATED)
def create_property(
     property_data: PropertyCreate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     prop = Property(
          user_id=user_id,
          name=property_data.name,
          address=property_data.address,
          property_type=property_data.property_type,
          rent=property_data.rent,
          status=PropertyStatus(property_data.status.value),
          description=property_data.description,
     )
     db.add(prop)
     db.flush()
     return DataResponse(data=PropertyResponse.model_validate(prop))


@router.get("", response_model=ListResponse[PropertyResponse])
def list_properties(
     status_filter: Optional[PropertyStatusEnum] = Query(None, alias="status"),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=100),
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     query = db.query(Property).filter(Property.user_id == user_id)
     if status_filter:
          query = query.filter(Property.status == PropertyStatus(status_filter.value))

     total = query.count()
     properties = (
          query.order_by(Property.name, Property.id)
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     return ListResponse(
          data=[PropertyResponse.model_validate(p) for p in properties],
          meta=PageMeta(total=total, page=page, page_size=page_size),
     )


@router.get("/{property_id}", response_model=DataResponse[PropertyResponse])
def get_property(
     property_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     return DataResponse(data=PropertyResponse.model_validate(_get_property(db, user_id, property_id)))


@router.put("/{property_id}", response_model=DataResponse[PropertyResponse])
def update_property(
     property_id: int,
     property_data: PropertyUpdate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     prop = _get_property(db, user_id, property_id)
     changes = property_data.model_dump(exclude_unset=True, exclude_none=True)
     if "status" in changes:
          changes["status"] = PropertyStatus(changes["status"].value)
     for field, value in changes.items():
          setattr(prop, field, value)
     db.flush()
     return DataResponse(data=PropertyResponse.model_validate(prop))


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
     property_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """Expenses go with the property; tenants and invoices are detached. Properties with receipts are kept."""
     prop = _get_property(db, user_id, property_id)
     if db.query(Receipt.id).filter(Receipt.property_id == prop.id).first():
          raise ConflictError("Cannot delete a property that has receipts")
     db.delete(prop)
     db.flush()
     return None
