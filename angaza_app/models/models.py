from datetime import date, datetime
from typing import List, Optional

from bcrypt import checkpw, gensalt, hashpw
from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from core.get_db import Base

from .enums import (
    LeaseStatus,
    MaintenancePriority,
    MaintenanceStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    PropertyType,
    UnitStatus,
    UserRole,
)


class TimestampMixin:
    __mapper_args__ = {"eager_defaults": True}

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False), nullable=False, default=UserRole.TENANT
    )
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    creator: Mapped[Optional["User"]] = relationship(
        "User", remote_side="User.id", back_populates="created_users"
    )
    created_users: Mapped[List["User"]] = relationship(
        "User", back_populates="creator"
    )
    properties: Mapped[List["Property"]] = relationship(
        "Property", back_populates="landlord", foreign_keys="Property.landlord_id"
    )
    leases: Mapped[List["Lease"]] = relationship(
        "Lease", back_populates="tenant", foreign_keys="Lease.tenant_id"
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment", back_populates="tenant", foreign_keys="Payment.tenant_id"
    )

    def set_password(self, raw_password: str):
        salt = gensalt()
        self.hashed_password = hashpw(raw_password.encode("utf-8"), salt).decode(
            "utf-8"
        )

    def check_password(self, raw_password: str) -> bool:
        return checkpw(
            raw_password.encode("utf-8"), self.hashed_password.encode("utf-8")
        )

    def normalize(self) -> None:
        self.email = self.email.strip().lower()
        self.name = self.name.strip()

    def __repr__(self):
        return f"<User {self.email} ({self.id}, {self.role})>"


class Property(TimestampMixin, Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType, native_enum=False), nullable=False
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    landlord_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    landlord: Mapped["User"] = relationship(
        "User", back_populates="properties", foreign_keys=[landlord_id]
    )
    units: Mapped[List["Unit"]] = relationship(
        "Unit", back_populates="property", order_by="Unit.id"
    )

    @validates("total_units", "available_units")
    def validate_counts(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative.")
        return value

    def __repr__(self):
        return (
            f"<Property {self.name} ({self.id}) "
            f"available={self.available_units}/{self.total_units}>"
        )


class Unit(TimestampMixin, Base):
    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    size: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    rent: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[UnitStatus] = mapped_column(
        Enum(UnitStatus, native_enum=False),
        nullable=False,
        default=UnitStatus.VACANT,
        index=True,
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    property_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property: Mapped["Property"] = relationship("Property", back_populates="units")
    leases: Mapped[List["Lease"]] = relationship("Lease", back_populates="unit")
    maintenance_requests: Mapped[List["Maintenance"]] = relationship(
        "Maintenance", back_populates="unit"
    )

    @validates("rent", "size")
    def validate_amount(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative.")
        return value


class Lease(TimestampMixin, Base):
    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    rent_amount: Mapped[float] = mapped_column(Float, nullable=False)
    security_deposit: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    status: Mapped[LeaseStatus] = mapped_column(
        Enum(LeaseStatus, native_enum=False),
        nullable=False,
        default=LeaseStatus.ACTIVE,
        index=True,
    )
    document: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant: Mapped["User"] = relationship(
        "User", back_populates="leases", foreign_keys=[tenant_id]
    )
    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit: Mapped["Unit"] = relationship("Unit", back_populates="leases")
    payments: Mapped[List["Payment"]] = relationship(
        "Payment", back_populates="lease"
    )

    @validates("rent_amount", "security_deposit")
    def validate_amount(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative.")
        return value


class Maintenance(TimestampMixin, Base):
    __tablename__ = "maintenance_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[MaintenanceStatus] = mapped_column(
        Enum(MaintenanceStatus, native_enum=False),
        nullable=False,
        default=MaintenanceStatus.PENDING,
        index=True,
    )
    priority: Mapped[MaintenancePriority] = mapped_column(
        Enum(MaintenancePriority, native_enum=False),
        nullable=False,
        default=MaintenancePriority.NORMAL,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    requester: Mapped["User"] = relationship("User", foreign_keys=[created_by])
    assigned_to: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    assignee: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[assigned_to]
    )
    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit: Mapped["Unit"] = relationship("Unit", back_populates="maintenance_requests")


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_date: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    payment_type: Mapped[PaymentType] = mapped_column(
        Enum(PaymentType, native_enum=False), nullable=False
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, native_enum=False), nullable=False
    )
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant: Mapped["User"] = relationship(
        "User", back_populates="payments", foreign_keys=[tenant_id]
    )
    lease_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("leases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    lease: Mapped["Lease"] = relationship("Lease", back_populates="payments")

    @validates("amount")
    def validate_amount(self, key, value):
        if value is not None and value < 0:
            raise ValueError("Payment amount cannot be negative.")
        return value
