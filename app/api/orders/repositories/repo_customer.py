from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.api.orders.models.model_customer import CustomerModel
from app.utils.phone import normalize_phone, phone_variants_for_lookup


class CustomerRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_contact(self, phone: Optional[str] = None, email: Optional[str] = None) -> Optional[CustomerModel]:
        """Phone takes precedence; stored numbers may be in any of the local/international forms."""
        filters = []
        variants = phone_variants_for_lookup(phone)
        if variants:
            filters.append(CustomerModel.phone.in_(variants))
        if email and email.strip():
            filters.append(CustomerModel.email == email.strip().lower())
        if not filters:
            return None

        candidates = self.db.query(CustomerModel).filter(or_(*filters)).order_by(CustomerModel.id).all()
        for customer in candidates:
            if customer.phone in variants:
                return customer
        return candidates[0] if candidates else None

    def find_or_create(self, *, name: str, phone: Optional[str] = None, email: Optional[str] = None) -> CustomerModel:
        normalized = normalize_phone(phone) or None
        email = email.strip().lower() if email and email.strip() else None

        customer = self.find_by_contact(normalized, email)
        if customer is not None:
            # contact details learned later fill the gaps, never overwrite
            if not customer.email and email:
                customer.email = email
            if not customer.phone and normalized:
                customer.phone = normalized
            self.db.flush()
            return customer

        customer = CustomerModel(name=name.strip(), phone=normalized, email=email)
        self.db.add(customer)
        self.db.flush()
        return customer
