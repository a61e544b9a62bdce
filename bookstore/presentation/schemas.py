from datetime import datetime
from typing import Any, Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from bookstore.domain.models import Role


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    fullname: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserResponse(CamelModel):
    id: str
    email: str
    fullname: Optional[str] = None
    phone: Optional[str] = None
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, user):
        # never expose the password hash
        return cls(
            id=user.id,
            email=user.email,
            fullname=user.fullname,
            phone=user.phone,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(CamelModel):
    access_token: str
    user: UserResponse


class UserUpdateRequest(CamelModel):
    fullname: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[Role] = None


class UserUpdateResponse(CamelModel):
    success: bool
    message: str
    user: UserResponse


class BookRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    categories: Any = None
    list_price: Optional[float] = None
    original_price: Optional[float] = None
    discount_price: Optional[float] = None


class AddCartItemRequest(CamelModel):
    book_id: Optional[str] = None
    quantity: Any = None


class UpdateCartItemRequest(CamelModel):
    quantity: Any = None


class OrderItemRequest(CamelModel):
    book_id: Optional[str] = None
    quantity: Any = None


class CreateOrderRequest(CamelModel):
    items: Optional[List[OrderItemRequest]] = None
    shipping_address: Any = None
    payment_method: Any = None


class UpdateOrderStatusRequest(CamelModel):
    status: Any = None


class ErrorResponse(BaseModel):
    detail: str
