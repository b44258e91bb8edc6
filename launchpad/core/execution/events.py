"""Receipt log scanning for named contract events."""

import logging
from typing import Iterator, List, Optional

from ..errors import LogDecodeError
from .models import DecodedEvent, Receipt


logger = logging.getLogger(__name__)

TOKEN_SALE_CREATED = "TokenSaleCreated"
# Spelling matches the deployed contract's event name
TOKEN_LIQUIDITY_ADDED = "TokenLiqudityAdded"


class EventExtractor:
    """Finds events of a given name in a finalized receipt.

    Entries emitted by other contracts (token transfers, approvals) do not
    decode against the launchpad schema and are skipped.
    """

    def __init__(self, ledger):
        self.ledger = ledger

    def _decoded(self, receipt: Receipt) -> Iterator[DecodedEvent]:
        for entry in receipt.logs:
            try:
                yield self.ledger.decode_log(entry)
            except LogDecodeError:
                logger.debug("Skipping undecodable log %s in %s", entry.log_index, receipt.tx_hash)

    def find_event(self, receipt: Receipt, name: str) -> Optional[DecodedEvent]:
        for event in self._decoded(receipt):
            if event.name == name:
                return event
        return None

    def find_events(self, receipt: Receipt, name: str) -> List[DecodedEvent]:
        return [event for event in self._decoded(receipt) if event.name == name]
