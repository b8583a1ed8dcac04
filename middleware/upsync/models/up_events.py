"""
Up Event Models

Pydantic models for Up webhook events and transaction resources.
Up uses JSON:API style payloads with camelCase attribute names.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UpModel(BaseModel):
    """Base model accepting Up's camelCase keys and ignoring unknown fields"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UpEventType(str, Enum):
    """Webhook event types sent by Up"""

    TRANSACTION_CREATED = "TRANSACTION_CREATED"
    TRANSACTION_SETTLED = "TRANSACTION_SETTLED"
    TRANSACTION_DELETED = "TRANSACTION_DELETED"
    PING = "PING"


class UpResourceIdentifier(UpModel):
    """JSON:API resource identifier"""

    type: str = Field(description="Resource type (e.g., transactions)")
    id: str = Field(description="Resource ID")


class UpRelationship(UpModel):
    """JSON:API relationship wrapper"""

    data: Optional[UpResourceIdentifier] = None


class UpMoney(UpModel):
    """Up money object"""

    currency_code: str = Field(alias="currencyCode", description="ISO 4217 code")
    value: str = Field(description="Two decimal places string representation")
    value_in_base_units: int = Field(
        alias="valueInBaseUnits", description="Amount in smallest currency unit"
    )

    @property
    def major_units(self) -> float:
        """Amount converted from cents to dollars"""
        return self.value_in_base_units / 100


class UpRoundUp(UpModel):
    """Round Up portion of a transaction"""

    amount: UpMoney
    boost_portion: Optional[UpMoney] = Field(None, alias="boostPortion")


class UpTransactionAttributes(UpModel):
    """Attributes of an Up transaction"""

    status: Literal["HELD", "SETTLED"]
    raw_text: Optional[str] = Field(None, alias="rawText")
    description: str = ""
    message: Optional[str] = None
    amount: UpMoney
    round_up: Optional[UpRoundUp] = Field(None, alias="roundUp")
    settled_at: Optional[str] = Field(None, alias="settledAt")
    created_at: str = Field(alias="createdAt", description="ISO 8601 datetime")


class UpTransactionRelationships(UpModel):
    account: UpRelationship


class UpTransaction(UpModel):
    """
    Up transaction resource.
    Fetched fresh from the Up API on every webhook delivery.
    """

    type: str = "transactions"
    id: str = Field(description="Up transaction ID")
    attributes: UpTransactionAttributes
    relationships: UpTransactionRelationships

    @property
    def account_id(self) -> Optional[str]:
        """Up account the transaction belongs to"""
        account = self.relationships.account.data
        return account.id if account else None

    @property
    def payee(self) -> Optional[str]:
        """Description, falling back to the raw bank text when it is empty"""
        return self.attributes.description or self.attributes.raw_text


class UpTransactionResponse(UpModel):
    """Response body of GET /transactions/{id}"""

    data: UpTransaction


class UpWebhookEventAttributes(UpModel):
    event_type: str = Field(alias="eventType")
    created_at: str = Field(alias="createdAt", description="ISO 8601 datetime")


class UpWebhookEventRelationships(UpModel):
    webhook: Optional[UpRelationship] = None
    # Absent for PING events
    transaction: Optional[UpRelationship] = None


class UpWebhookEventResource(UpModel):
    type: str = "webhook-events"
    id: Optional[str] = Field(None, description="Webhook event ID")
    attributes: UpWebhookEventAttributes
    relationships: UpWebhookEventRelationships = Field(
        default_factory=UpWebhookEventRelationships
    )


class UpWebhookEvent(UpModel):
    """
    Up webhook event model.
    Represents the complete webhook payload delivered by Up.
    """

    data: UpWebhookEventResource

    @property
    def event_id(self) -> Optional[str]:
        return self.data.id

    @property
    def event_type(self) -> str:
        return self.data.attributes.event_type

    @property
    def transaction_id(self) -> Optional[str]:
        """ID of the transaction the event refers to, if any"""
        transaction = self.data.relationships.transaction
        if transaction is None or transaction.data is None:
            return None
        return transaction.data.id
