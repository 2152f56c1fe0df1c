"""Base entity, recipient and party reference models."""

from enum import Enum
from typing import Any, ClassVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class PartyKind(str, Enum):
    """Kinds of parties that can send or receive messages."""

    DRIVER = "Driver"
    CUSTOMER = "Customer"
    VENDOR = "Vendor"


class Party(BaseModel):
    """Tagged reference to a message recipient or sender."""

    model_config = ConfigDict(frozen=True)

    kind: PartyKind
    id: UUID


class Entity(BaseModel):
    """
    Persisted record with a UUID identity.

    Subclasses set ``kind`` (used as the storage key prefix) and may declare
    ``relations``, mapping a field holding one id or a list of ids to the
    kind of entity it references. Every subclass that sets ``kind`` is
    registered so references can be resolved by kind name.
    """

    kind: ClassVar[str] = "Entity"
    relations: ClassVar[dict[str, str]] = {}
    registry: ClassVar[dict[str, type["Entity"]]] = {}

    id: UUID = Field(default_factory=uuid4)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if "kind" in cls.__dict__:
            Entity.registry[cls.kind] = cls


class Recipient(Entity):
    """An entity that can receive pushes and mail, with per-category opt-ins."""

    email: EmailStr | None = None
    device_tokens: list[str] = Field(default_factory=list)
    email_settings: dict[str, bool] = Field(default_factory=dict)
    notification_settings: dict[str, bool] = Field(default_factory=dict)

    @property
    def party(self) -> Party:
        """Tagged reference to this recipient."""
        return Party(kind=PartyKind(self.kind), id=self.id)
