from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional

import phonenumbers
from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from models.enums import (
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


def normalize_phone(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    try:
        parsed = phonenumbers.parse(value, None)
    except phonenumbers.NumberParseException:
        raise ValueError("Invalid phone number format. Use e.g. +254712345678")
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Invalid phone number. Use full international format.")
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def check_password_strength(value: str) -> str:
    errors = []
    if len(value) < 8:
        errors.append("8 or more characters")
    if not re.search(r"[A-Za-z]", value):
        errors.append("a letter")
    if not re.search(r"\d", value):
        errors.append("a number")
    if errors:
        raise ValueError("Password must contain: " + ", ".join(errors))
    return value


# Users


class UserBrief(BaseModel):
    id: int
    name: str
    email: EmailStr

    model_config = {"from_attributes": True}


class UserOut(UserBrief):
    role: UserRole
    phone: Optional[str] = None
    is_active: bool
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class UserBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]):
        return normalize_phone(value)


class RegisterInput(UserBase):
    password: str = Field(
        ..., json_schema_extra={"type": "string", "format": "password"}
    )
    role: UserRole = UserRole.TENANT

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str):
        return check_password_strength(value)


class LoginInput(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value


class SelfUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone: Optional[str] = None
    password: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]):
        return normalize_phone(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: Optional[str]):
        return check_password_strength(value) if value is not None else value


class UserAdminCreate(RegisterInput):
    is_active: bool = True


class UserAdminUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]):
        return normalize_phone(value)


class TenantCreate(UserBase):
    password: str = Field(
        ..., json_schema_extra={"type": "string", "format": "password"}
    )

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str):
        return check_password_strength(value)


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: Optional[str]):
        return normalize_phone(value)


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    access_token: str
    token_type: str = "bearer"


# Properties


class PropertyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=255)
    type: PropertyType
    description: Optional[str] = None
    total_units: int = Field(..., ge=0)
    featured: bool = False
    image: Optional[str] = Field(None, max_length=512)


class PropertyCreate(PropertyBase):
    landlord_id: Optional[int] = None


class PropertyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[PropertyType] = None
    description: Optional[str] = None
    total_units: Optional[int] = Field(None, ge=0)
    featured: Optional[bool] = None
    image: Optional[str] = Field(None, max_length=512)
    landlord_id: Optional[int] = None


class PropertyBrief(BaseModel):
    id: int
    name: str
    address: str
    landlord_id: int

    model_config = {"from_attributes": True}


class UnitOut(BaseModel):
    id: int
    unit_number: str
    type: str
    size: Optional[float] = None
    rent: float
    status: UnitStatus
    description: Optional[str] = None
    property_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PropertyOut(BaseModel):
    id: int
    name: str
    address: str
    type: PropertyType
    description: Optional[str] = None
    total_units: int
    available_units: int
    featured: bool
    image: Optional[str] = None
    landlord_id: int
    landlord: Optional[UserBrief] = None
    units: List[UnitOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# Units


class UnitCreate(BaseModel):
    unit_number: str = Field(..., min_length=1, max_length=50)
    type: str = Field(..., min_length=1, max_length=50)
    size: Optional[float] = Field(None, ge=0)
    rent: float = Field(..., ge=0)
    status: UnitStatus = UnitStatus.VACANT
    description: Optional[str] = None
    property_id: int


class UnitUpdate(BaseModel):
    unit_number: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    size: Optional[float] = Field(None, ge=0)
    rent: Optional[float] = Field(None, ge=0)
    status: Optional[UnitStatus] = None
    description: Optional[str] = None


class UnitDetailOut(UnitOut):
    property: PropertyBrief


# Leases


class LeaseCreate(BaseModel):
    start_date: date
    end_date: date
    rent_amount: float = Field(..., ge=0)
    security_deposit: float = Field(0, ge=0)
    document: Optional[str] = Field(None, max_length=512)
    tenant_id: int
    unit_id: int

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date.")
        return self


class LeaseUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_amount: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)
    status: Optional[LeaseStatus] = None
    document: Optional[str] = Field(None, max_length=512)


class LeaseOut(BaseModel):
    id: int
    start_date: date
    end_date: date
    rent_amount: float
    security_deposit: float
    status: LeaseStatus
    document: Optional[str] = None
    tenant_id: int
    unit_id: int
    tenant: Optional[UserBrief] = None
    unit: Optional[UnitDetailOut] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# Maintenance


class MaintenanceCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    priority: MaintenancePriority = MaintenancePriority.NORMAL
    notes: Optional[str] = None
    unit_id: int


class MaintenanceUpdate(BaseModel):
    """Request body accepted by PUT /maintenance/{id}; narrowed per role."""

    status: Optional[MaintenanceStatus] = None
    priority: Optional[MaintenancePriority] = None
    notes: Optional[str] = None
    assigned_to: Optional[int] = None
    description: Optional[str] = Field(None, min_length=1)


class MaintenanceStaffUpdate(MaintenanceUpdate):
    pass


class MaintenanceTenantUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None


class MaintenanceOut(BaseModel):
    id: int
    title: str
    description: str
    status: MaintenanceStatus
    priority: MaintenancePriority
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_by: int
    assigned_to: Optional[int] = None
    unit_id: int
    requester: Optional[UserBrief] = None
    assignee: Optional[UserBrief] = None
    unit: Optional[UnitDetailOut] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# Payments


class PaymentCreate(BaseModel):
    amount: float = Field(..., ge=0)
    payment_date: Optional[datetime] = None
    payment_type: PaymentType
    payment_method: PaymentMethod
    reference: Optional[str] = Field(None, max_length=255)
    lease_id: int


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class LeaseBrief(BaseModel):
    id: int
    unit_id: int
    status: LeaseStatus
    start_date: date
    end_date: date

    model_config = {"from_attributes": True}


class PaymentOut(BaseModel):
    id: int
    amount: float
    payment_date: datetime
    payment_type: PaymentType
    payment_method: PaymentMethod
    status: PaymentStatus
    reference: Optional[str] = None
    tenant_id: int
    lease_id: int
    tenant: Optional[UserBrief] = None
    lease: Optional[LeaseBrief] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# Tenants


class TenantLeaseOut(LeaseBrief):
    rent_amount: float
    security_deposit: float
    unit: Optional[UnitDetailOut] = None


class TenantPaymentOut(BaseModel):
    id: int
    amount: float
    payment_date: datetime
    payment_type: PaymentType
    payment_method: PaymentMethod
    status: PaymentStatus
    lease_id: int

    model_config = {"from_attributes": True}


class TenantDetailOut(UserOut):
    leases: List[TenantLeaseOut] = []
    payments: List[TenantPaymentOut] = []
