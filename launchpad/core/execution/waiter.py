"""
Transaction submission and confirmation.

Two observable milestones per write call: SUBMITTED (hash known) and
CONFIRMED (receipt finalized with success status). No timeout and no retry
is applied here; a revert or rejected submission ends the action.
"""

import logging
from typing import Optional

from ..errors import ChainError, LaunchpadError
from .models import (
    ContractCall,
    PendingTransaction,
    ProgressCallback,
    ProgressEvent,
    ProgressKind,
    Receipt,
    report,
)


logger = logging.getLogger(__name__)


class TransactionWaiter:
    """Submits write calls through the ledger and waits for finalization."""

    def __init__(self, ledger):
        self.ledger = ledger

    async def submit(self, call: ContractCall) -> PendingTransaction:
        try:
            pending = await self.ledger.submit(call)
        except LaunchpadError:
            logger.warning("Submission rejected for %s", call.label)
            raise
        except Exception as e:
            logger.error(f"Submission failed for {call.label}: {e}")
            raise ChainError(f"Failed to submit {call.method}: {e}")

        logger.info("Transaction submitted: %s (%s)", pending.tx_hash, call.label)
        return pending

    async def wait(self, pending: PendingTransaction) -> Receipt:
        try:
            receipt = await self.ledger.wait(pending)
        except LaunchpadError:
            raise
        except Exception as e:
            logger.error(f"Waiting for {pending.tx_hash} failed: {e}")
            raise ChainError(f"Failed waiting for {pending.tx_hash}: {e}", tx_hash=pending.tx_hash)

        if not receipt.is_success:
            logger.warning("Transaction reverted: %s (block %s)", receipt.tx_hash, receipt.block_number)
            raise ChainError(
                f"Transaction {receipt.tx_hash} reverted",
                tx_hash=receipt.tx_hash,
            )

        logger.info(
            "Transaction confirmed: %s (block %s, gas %s)",
            receipt.tx_hash,
            receipt.block_number,
            receipt.gas_used,
        )
        return receipt

    async def submit_and_wait(
        self,
        call: ContractCall,
        progress: Optional[ProgressCallback] = None,
    ) -> Receipt:
        """
        Submit ``call`` and wait for its receipt.

        Args:
            call: The write call
            progress: Optional callback receiving SUBMITTED and CONFIRMED

        Returns:
            The successful receipt

        Raises:
            ChainError: submission rejected, waiting failed or reverted
        """
        pending = await self.submit(call)
        await report(progress, ProgressEvent(ProgressKind.SUBMITTED, pending.tx_hash, call.method))

        receipt = await self.wait(pending)
        await report(progress, ProgressEvent(ProgressKind.CONFIRMED, receipt.tx_hash, call.method))
        return receipt
