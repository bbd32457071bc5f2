from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(50), nullable=True)  # Salutation, e.g. "Dr."
    last_name = Column(String(255), nullable=False, index=True)
    first_name = Column(String(255), nullable=False, index=True)
    birth_date = Column(String(10), nullable=True)  # YYYY-MM-DD
    street = Column(String(255), nullable=False)
    zip = Column(String(10), nullable=False)
    city = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)  # Landline
    mobile = Column(String(50), nullable=True)
    email = Column(String(255), nullable=False)
    website = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    appointments = relationship("Appointment", back_populates="customer")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    start = Column(DateTime, nullable=False, index=True)
    end = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), nullable=False)  # open, planned, completed
    customer_id = Column(
        Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer", back_populates="appointments")
