"""Quote-asset allowance checks ahead of value-moving calls."""

import logging
from typing import Optional

from .models import (
    MAX_UINT256,
    ContractCall,
    ProgressCallback,
    ProgressEvent,
    ProgressKind,
    report,
)
from .waiter import TransactionWaiter


logger = logging.getLogger(__name__)


class AllowanceGuard:
    """Makes sure ``spender`` may move ``required`` of ``token`` for ``owner``.

    An insufficient allowance is replaced by a single unlimited approval so
    later purchases skip the extra transaction.
    """

    def __init__(self, ledger, waiter: Optional[TransactionWaiter] = None):
        self.ledger = ledger
        self.waiter = waiter or TransactionWaiter(ledger)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        raw = await self.ledger.read(ContractCall("allowance", (owner, spender), address=token))
        return int(raw)

    async def ensure(
        self,
        token: str,
        owner: str,
        spender: str,
        required: int,
        progress: Optional[ProgressCallback] = None,
    ) -> bool:
        """Approve ``spender`` when the current allowance is short.

        Returns:
            True when an approval transaction was submitted and finalized
        """
        current = await self.allowance(token, owner, spender)
        if current >= required:
            logger.debug("Allowance %s covers %s, no approval needed", current, required)
            return False

        logger.info("Allowance %s below %s, approving %s for %s", current, required, token, spender)
        await report(progress, ProgressEvent(ProgressKind.APPROVING, label=token))
        receipt = await self.waiter.submit_and_wait(
            ContractCall("approve", (spender, MAX_UINT256), address=token),
        )
        await report(progress, ProgressEvent(ProgressKind.APPROVED, receipt.tx_hash, token))
        return True
