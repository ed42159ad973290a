import datetime
import decimal
import uuid
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional


@dataclass
class Entity:
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime.datetime = datetime.datetime.min


@dataclass
class Product(Entity):
    kind: ClassVar[str] = "product"

    name: str = ""
    price: decimal.Decimal = decimal.Decimal("0")
    available_on: Optional[datetime.date] = None
    sizes: List[int] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)
    thumbnail: bytes = b""
    in_stock: bool = False
