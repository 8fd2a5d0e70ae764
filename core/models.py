# models.py
# Definições de dataclasses e modelos de domínio

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class DeletionType(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"


class RequestStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class DataCategory(str, Enum):
    """Categorias de dados que podem ser excluídas parcialmente"""
    ORDERS = "orders"
    ADDRESSES = "addresses"
    PAYMENT = "payment"
    PREFERENCES = "preferences"

    @classmethod
    def parse(cls, tag) -> Optional["DataCategory"]:
        """Converte uma etiqueta em categoria; None se não for reconhecida"""
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return None


# Rótulos exibidos na interface
CATEGORY_LABELS = {
    DataCategory.ORDERS: "Histórico de pedidos",
    DataCategory.ADDRESSES: "Endereços de entrega",
    DataCategory.PAYMENT: "Métodos de pagamento",
    DataCategory.PREFERENCES: "Preferências (voltar ao padrão)",
}

DEFAULT_THEME = "light"
DEFAULT_LANGUAGE = "pt_BR"


@dataclass
class User:
    id: int
    name: Optional[str]
    email: str
    password: str
    phone: Optional[str]
    created_at: str


@dataclass
class Address:
    id: int
    user_id: int
    street: Optional[str]
    number: Optional[str]
    complement: Optional[str]
    neighborhood: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zipcode: Optional[str]
    is_default: bool = False


@dataclass
class Order:
    id: int
    user_id: int
    address_id: Optional[int]
    total: float
    status: str
    payment_method: Optional[str]
    created_at: str


@dataclass
class OrderItem:
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: float


@dataclass
class UserPreferences:
    user_id: int
    notifications_enabled: bool = True
    theme: str = DEFAULT_THEME
    language: str = DEFAULT_LANGUAGE


@dataclass
class PaymentMethod:
    id: int
    user_id: int
    type: str
    card_number: Optional[str]
    card_holder: Optional[str]
    expiry_date: Optional[str]
    is_default: bool = False


@dataclass
class DeletionRequest:
    id: int
    user_id: int
    type: DeletionType
    data_types: List[str]
    reason: Optional[str]
    status: RequestStatus
    requested_at: str
    processed_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "DeletionRequest":
        raw_types = row["data_types"] or ""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            type=DeletionType(row["type"]),
            data_types=[t for t in raw_types.split(",") if t],
            reason=row["reason"],
            status=RequestStatus(row["status"]),
            requested_at=row["requested_at"],
            processed_at=row["processed_at"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type.value,
            "data_types": list(self.data_types),
            "reason": self.reason,
            "status": self.status.value,
            "requested_at": self.requested_at,
            "processed_at": self.processed_at,
        }


@dataclass
class DeletionOutcome:
    """Resultado único entregue ao chamador para cada solicitação"""
    ok: bool
    message: str
    deletion_type: DeletionType
    request_id: Optional[int] = None
    session_invalidated: bool = False
    remote_message: Optional[str] = None
    data_types: List[str] = field(default_factory=list)
