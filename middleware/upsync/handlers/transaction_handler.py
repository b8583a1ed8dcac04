"""
Transaction Event Handler

Mirrors Up transactions into PocketSmith.

Create path: the primary transaction is written and awaited before the
Round Up transaction is written, so the Round Up never lands without its
parent having been accepted.

Delete path: the correlation lookup completes first, then every match is
deleted concurrently and the handler waits for all deletes to finish.
"""

import asyncio
from typing import Any, Dict, List

from upsync.models.pocketsmith_records import PocketSmithTransaction
from upsync.models.up_events import UpTransaction
from upsync.services.account_resolver import AccountFound, AccountResolver
from upsync.services.pocketsmith_service import PocketSmithService
from upsync.utils.exceptions import PocketSmithException, UnmappedAccountException
from upsync.utils.logging_config import get_logger

logger = get_logger(__name__)


class TransactionHandler:
    """Handler for Up transaction events"""

    def __init__(
        self,
        pocketsmith_service: PocketSmithService,
        account_resolver: AccountResolver,
    ):
        self.pocketsmith = pocketsmith_service
        self.account_resolver = account_resolver

    def _resolve_account(self, transaction: UpTransaction) -> str:
        """
        Look up the PocketSmith account for the transaction's Up account.

        Raises:
            UnmappedAccountException: If the mapping table has no entry
        """
        resolution = self.account_resolver.resolve(transaction.account_id)

        if not isinstance(resolution, AccountFound):
            logger.warning(
                f"Up account not mapped to PocketSmith: {resolution.source_account_id}",
                extra={
                    "up_account_id": resolution.source_account_id,
                    "transaction_id": transaction.id,
                },
            )
            raise UnmappedAccountException(resolution.source_account_id or "<missing>")

        return resolution.account_id

    async def handle_transaction_created(
        self, transaction: UpTransaction
    ) -> Dict[str, Any]:
        """
        Handle TRANSACTION_CREATED.
        Creates the PocketSmith transaction, then its Round Up if present.

        Args:
            transaction: Up transaction fetched from the Up API

        Returns:
            Processing result
        """
        account_id = self._resolve_account(transaction)

        logger.info(
            "Processing TRANSACTION_CREATED event",
            extra={
                "transaction_id": transaction.id,
                "account_id": account_id,
                "amount": transaction.attributes.amount.value_in_base_units,
                "has_round_up": transaction.attributes.round_up is not None,
            },
        )

        primary = PocketSmithTransaction.from_up_transaction(transaction)
        created = await self.pocketsmith.create_transaction(account_id, primary)
        created_ids: List[Any] = [created.get("id")]

        round_up = PocketSmithTransaction.round_up_from_up_transaction(transaction)
        if round_up is not None:
            try:
                round_up_created = await self.pocketsmith.create_transaction(
                    account_id, round_up
                )
            except PocketSmithException as e:
                # The primary transaction stays in PocketSmith without its Round Up
                logger.error(
                    "Round Up write failed after primary transaction was created",
                    extra={
                        "transaction_id": transaction.id,
                        "account_id": account_id,
                        "primary_pocketsmith_id": created.get("id"),
                        "error": e.to_dict(),
                    },
                )
                raise
            created_ids.append(round_up_created.get("id"))

        return {
            "transaction_id": transaction.id,
            "account_id": account_id,
            "created": len(created_ids),
            "pocketsmith_ids": created_ids,
        }

    async def handle_transaction_deleted(
        self, transaction: UpTransaction
    ) -> Dict[str, Any]:
        """
        Handle TRANSACTION_DELETED.
        Deletes every PocketSmith transaction correlated with the Up transaction.
        No matches is a no-op.

        Args:
            transaction: Up transaction fetched from the Up API

        Returns:
            Processing result
        """
        account_id = self._resolve_account(transaction)

        logger.info(
            "Processing TRANSACTION_DELETED event",
            extra={"transaction_id": transaction.id, "account_id": account_id},
        )

        matches = await self.pocketsmith.find_transactions_by_note(
            account_id, transaction.id
        )

        if matches:
            outcomes = await asyncio.gather(
                *(self.pocketsmith.delete_transaction(match.id) for match in matches),
                return_exceptions=True,
            )
            failures = [
                (match, outcome)
                for match, outcome in zip(matches, outcomes)
                if isinstance(outcome, BaseException)
            ]
            for match, outcome in failures:
                logger.error(
                    f"Failed to delete PocketSmith transaction {match.id}: {outcome}",
                    extra={
                        "transaction_id": transaction.id,
                        "account_id": account_id,
                        "pocketsmith_id": match.id,
                    },
                )
            if failures:
                # Every delete has settled; surface the first failure
                raise failures[0][1]
        else:
            logger.info(
                "No PocketSmith transactions to delete",
                extra={"transaction_id": transaction.id, "account_id": account_id},
            )

        return {
            "transaction_id": transaction.id,
            "account_id": account_id,
            "deleted": len(matches),
            "pocketsmith_ids": [match.id for match in matches],
        }
