"""
PocketSmith Record Models

Pydantic models for PocketSmith API operations.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from upsync.models.up_events import UpTransaction

ROUND_UP_PAYEE = "Round Up"


class PocketSmithTransaction(BaseModel):
    """Body of POST /transaction_accounts/{id}/transactions"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payee": "Coffee Shop",
                "amount": -4.5,
                "date": "2024-03-01T08:15:00+11:00",
                "memo": "Flat white",
                "note": "d8f3c1f0-0a7e-4b4e-9d60-5f1f2b8c6a11",
            }
        }
    )

    payee: Optional[str] = None
    amount: float = Field(description="Amount in major currency units")
    date: str = Field(description="Transaction date")
    memo: Optional[str] = None
    note: str = Field(description="Up transaction ID used as correlation key")

    def to_payload(self) -> Dict[str, Any]:
        """JSON body with empty optional fields omitted"""
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_up_transaction(cls, transaction: UpTransaction) -> "PocketSmithTransaction":
        """Map an Up transaction to its primary PocketSmith transaction"""
        attributes = transaction.attributes
        return cls(
            payee=transaction.payee,
            amount=attributes.amount.major_units,
            date=attributes.created_at,
            memo=attributes.message,
            note=transaction.id,
        )

    @classmethod
    def round_up_from_up_transaction(
        cls, transaction: UpTransaction
    ) -> Optional["PocketSmithTransaction"]:
        """Map the Round Up portion of an Up transaction, if it has one"""
        round_up = transaction.attributes.round_up
        if round_up is None:
            return None
        return cls(
            payee=ROUND_UP_PAYEE,
            amount=round_up.amount.major_units,
            date=transaction.attributes.created_at,
            note=transaction.id,
        )


class PocketSmithTransactionRecord(BaseModel):
    """Transaction as returned by the PocketSmith API"""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str] = Field(description="PocketSmith transaction ID")
    payee: Optional[str] = None
    amount: Optional[float] = None
    date: Optional[str] = None
    memo: Optional[str] = None
    note: Optional[str] = None
