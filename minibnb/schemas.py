from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .models import ReservationStatus, UserRole


# ----- Users -----
class UserBase(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    role: UserRole = UserRole.GUEST


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserOut(UserBase):
    id: int

    class Config:
        from_attributes = True


class UserRoleUpdate(BaseModel):
    role: UserRole


# ----- Auth -----
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    email: EmailStr
    role: UserRole


class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None


# ----- Properties -----
class PropertyBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    price_per_night: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    bedrooms: int = Field(..., ge=1)
    bathrooms: int = Field(..., ge=1)
    max_guests: int = Field(..., ge=1)


class PropertyCreate(PropertyBase):
    pass


class PropertyUpdate(BaseModel):
    """
    Partial update. Fields left out (or sent as null) keep their stored
    value; the host can never be changed through this schema.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    address: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    country: Optional[str] = Field(None, min_length=1)
    price_per_night: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    bedrooms: Optional[int] = Field(None, ge=1)
    bathrooms: Optional[int] = Field(None, ge=1)
    max_guests: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class PropertyOut(PropertyBase):
    id: int
    is_active: bool
    host_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ----- Reservations -----
class ReservationCreate(BaseModel):
    property_id: int
    check_in_date: date
    check_out_date: date
    number_of_guests: int = Field(..., ge=1)


class ReservationOut(BaseModel):
    id: int
    property_id: int
    guest_id: int
    check_in_date: date
    check_out_date: date
    number_of_guests: int
    total_price: Decimal
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BusyPeriod(BaseModel):
    check_in_date: date
    check_out_date: date

    class Config:
        from_attributes = True


# ----- Availability responses -----
class AvailabilityResponse(BaseModel):
    property_id: int
    check_in_date: date
    check_out_date: date
    available: bool
