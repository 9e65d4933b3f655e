# MIT License
# Copyright (c) 2025 Hashborn

"""
Transaction Submitter

Posts an encoded transaction and reads the verdict. Nothing here retries:
a rejected transaction is the final answer for that request.
"""

import logging

from ..observability.metrics import transactions_total
from ..protocol.types.common import MalformedResponse, NodeUnavailable, Rejected, SubmitUnavailable
from ..rpc.client import NodeClient

logger = logging.getLogger(__name__)

MALFORMED_RESPONSE_CODE = -1


class TransactionSubmitter:
    def __init__(self, client: NodeClient):
        self.client = client

    def submit(self, tx_hex: str) -> str:
        """
        Returns the transaction hash reported by the node.

        Raises:
            Rejected: node answered with code != 0, or with garbage
            SubmitUnavailable: the node could not be reached at all
        """
        try:
            data = self.client.send_transaction(tx_hex)
        except MalformedResponse as e:
            transactions_total.labels(outcome="rejected").inc()
            raise Rejected(MALFORMED_RESPONSE_CODE, f"malformed node response: {e}")
        except NodeUnavailable as e:
            transactions_total.labels(outcome="error").inc()
            raise SubmitUnavailable(str(e))

        code = data.get("code")
        if code == 0:
            result = data.get("result") or {}
            tx_hash = result.get("hash") if isinstance(result, dict) else None
            if not tx_hash:
                transactions_total.labels(outcome="rejected").inc()
                raise Rejected(MALFORMED_RESPONSE_CODE, "malformed node response: no result.hash")
            transactions_total.labels(outcome="sent").inc()
            logger.info(f"Transaction accepted: {tx_hash}")
            return tx_hash

        log = data.get("log") or ""
        if not isinstance(code, int):
            code = MALFORMED_RESPONSE_CODE
            log = log or "malformed node response: no code"
        transactions_total.labels(outcome="rejected").inc()
        logger.error(f"Transaction rejected: code={code} log={log}")
        raise Rejected(code, log)
