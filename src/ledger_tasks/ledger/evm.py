# src/ledger_tasks/ledger/evm.py

from __future__ import annotations

"""
web3.py adapter for the on-chain task contract.

One object plays both external roles the core needs:
- IdentityProvider: eth_accounts / eth_requestAccounts against the node or wallet RPC
- LedgerGateway:    getMyTask() reads, addTask()/deleteTask() transactions

Contract encoding stays in here; the core only sees RawTaskRecord mappings and
PendingTransaction objects.
"""

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TransactionNotFound
from web3.types import RPCEndpoint

from ..core.errors import (
    AuthorizationDenied,
    NotConnected,
    ProviderUnavailable,
    TransportError,
    describe_failure,
)
from ..core.ports import RawTaskRecord
from ..sync.task_models import CreateTask, DeleteTask, LedgerOp

logger = logging.getLogger(__name__)

# EIP-1193 / JSON-RPC error codes we act on.
USER_REJECTED_CODE = 4001
UNAUTHORIZED_CODE = 4100
METHOD_NOT_FOUND_CODE = -32601

_TASK_COMPONENTS = [
    {"internalType": "uint256", "name": "id", "type": "uint256"},
    {"internalType": "string", "name": "taskText", "type": "string"},
    {"internalType": "string", "name": "taskTitle", "type": "string"},
    {"internalType": "bool", "name": "isDeleted", "type": "bool"},
]

DEFAULT_TASK_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "string", "name": "taskText", "type": "string"},
            {"internalType": "string", "name": "taskTitle", "type": "string"},
            {"internalType": "bool", "name": "isDeleted", "type": "bool"},
        ],
        "name": "addTask",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "taskId", "type": "uint256"}],
        "name": "deleteTask",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getMyTask",
        "outputs": [
            {
                "components": _TASK_COMPONENTS,
                "internalType": "struct TaskContract.Task[]",
                "name": "",
                "type": "tuple[]",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

# Contract struct field -> RawTaskRecord key.
_FIELD_ALIASES = {
    "id": "id",
    "taskId": "id",
    "taskTitle": "title",
    "title": "title",
    "taskText": "body",
    "text": "body",
    "body": "body",
    "isDeleted": "deleted",
    "deleted": "deleted",
}


def load_abi(path: str | Path | None) -> list[dict[str, Any]]:
    """
    Load a contract ABI from JSON. Accepts a bare ABI list or a build artifact
    with an "abi" key. None -> built-in task contract ABI.
    """
    if path is None:
        return DEFAULT_TASK_ABI
    data = json.loads(Path(path).read_text("utf-8"))
    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise ValueError(f"ABI file has no ABI list: {path}")
    return data


def _task_field_names(abi: Sequence[Mapping[str, Any]]) -> list[str]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == "getMyTask":
            outputs = entry.get("outputs") or []
            if outputs:
                return [str(c.get("name", "")) for c in outputs[0].get("components") or []]
    return [c["name"] for c in _TASK_COMPONENTS]


def normalize_task_record(raw: Any, field_names: Sequence[str]) -> RawTaskRecord:
    """Decoded struct (tuple, namedtuple or mapping) -> {"id", "title", "body", "deleted"}."""
    if hasattr(raw, "_asdict"):
        items = dict(raw._asdict())
    elif isinstance(raw, Mapping):
        items = dict(raw)
    elif isinstance(raw, (list, tuple)):
        items = dict(zip(field_names, raw))
    else:
        return {}

    out: dict[str, Any] = {}
    for name, value in items.items():
        key = _FIELD_ALIASES.get(str(name))
        if key is not None:
            out[key] = value
    return out


def _rpc_error_code(err: Any) -> int | None:
    """Best-effort: pull a JSON-RPC error code out of a response dict or an exception."""
    if isinstance(err, Mapping):
        code = err.get("code")
        return code if isinstance(code, int) else None
    for arg in getattr(err, "args", ()) or ():
        if isinstance(arg, Mapping):
            code = arg.get("code")
            if isinstance(code, int):
                return code
    rpc_response = getattr(err, "rpc_response", None)
    if isinstance(rpc_response, Mapping):
        return _rpc_error_code(rpc_response.get("error"))
    return None


class EvmPendingTransaction:
    """Polls for the receipt until the transaction is mined. No timeout."""

    def __init__(self, w3: AsyncWeb3, tx_hash: Any, *, poll_seconds: float) -> None:
        self._w3 = w3
        self._tx_hash = tx_hash
        self._poll = max(0.05, float(poll_seconds))

    @property
    def tx_id(self) -> str:
        return self._w3.to_hex(self._tx_hash)

    async def wait_for_confirmation(self) -> None:
        while True:
            try:
                receipt = await self._w3.eth.get_transaction_receipt(self._tx_hash)
            except TransactionNotFound:
                logger.debug("tx %s not mined yet", self.tx_id)
                await asyncio.sleep(self._poll)
                continue
            except Exception as e:
                raise TransportError(describe_failure(e, "Failed to fetch transaction receipt")) from e

            status = receipt.get("status")
            if status == 0:
                raise TransportError(f"Transaction {self.tx_id} reverted")
            logger.info("tx %s confirmed in block %s", self.tx_id, receipt.get("blockNumber"))
            return


class EvmLedger:
    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        *,
        abi: list[dict[str, Any]] | None = None,
        poll_seconds: float = 1.0,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        self._rpc_url = (rpc_url or "").strip()
        self._poll = poll_seconds
        self._abi = abi if abi is not None else DEFAULT_TASK_ABI
        self._field_names = _task_field_names(self._abi)

        if w3 is None and self._rpc_url:
            w3 = AsyncWeb3(AsyncHTTPProvider(self._rpc_url))
        self._w3 = w3
        self._contract = None
        if w3 is not None:
            self._contract = w3.eth.contract(address=AsyncWeb3.to_checksum_address(contract_address), abi=self._abi)

        self.account: str | None = None

    # ---- IdentityProvider ----

    @property
    def available(self) -> bool:
        return self._w3 is not None

    async def _require_node(self) -> AsyncWeb3:
        if self._w3 is None:
            raise ProviderUnavailable("No RPC endpoint configured. Set LEDGER_TASKS_RPC_URL.")
        try:
            ok = await self._w3.is_connected()
        except Exception as e:
            raise ProviderUnavailable(describe_failure(e, "Wallet provider is unreachable.")) from e
        if not ok:
            raise ProviderUnavailable(f"Wallet provider is unreachable at {self._rpc_url}.")
        return self._w3

    def _remember(self, accounts: Sequence[Any]) -> list[str]:
        out = [str(a) for a in accounts if a]
        if out:
            self.account = out[0]
        return out

    async def list_authorized_accounts(self) -> Sequence[str]:
        w3 = await self._require_node()
        accounts = await w3.eth.accounts
        return self._remember(accounts)

    async def request_authorization(self) -> Sequence[str]:
        w3 = await self._require_node()
        try:
            response = await w3.provider.make_request(RPCEndpoint("eth_requestAccounts"), [])
        except Exception as e:
            code = _rpc_error_code(e)
            if code in (USER_REJECTED_CODE, UNAUTHORIZED_CODE):
                raise AuthorizationDenied(describe_failure(e, "User rejected the request.")) from e
            if code != METHOD_NOT_FOUND_CODE:
                raise TransportError(describe_failure(e, "eth_requestAccounts failed")) from e
            response = {"error": {"code": code}}

        err = response.get("error") if isinstance(response, Mapping) else None
        if err:
            code = _rpc_error_code(err)
            if code in (USER_REJECTED_CODE, UNAUTHORIZED_CODE):
                msg = err.get("message") if isinstance(err, Mapping) else None
                raise AuthorizationDenied(str(msg or "User rejected the request."))
            if code == METHOD_NOT_FOUND_CODE:
                # Plain nodes (anvil/geth dev) expose unlocked accounts without a prompt.
                logger.debug("eth_requestAccounts unsupported; falling back to eth_accounts")
                return self._remember(await w3.eth.accounts)
            raise TransportError(f"eth_requestAccounts failed: {err}")

        result = response.get("result") if isinstance(response, Mapping) else None
        return self._remember(result or [])

    # ---- LedgerGateway ----

    def _require_account(self) -> str:
        if self.account is None:
            raise NotConnected("No account selected.")
        return self.account

    async def query(self) -> Sequence[RawTaskRecord]:
        account = self._require_account()
        if self._contract is None:
            raise ProviderUnavailable("No RPC endpoint configured.")
        try:
            raw = await self._contract.functions.getMyTask().call({"from": account})
        except Exception as e:
            raise TransportError(describe_failure(e, "getMyTask failed")) from e
        return [normalize_task_record(item, self._field_names) for item in raw or []]

    async def submit(self, op: LedgerOp) -> EvmPendingTransaction:
        account = self._require_account()
        if self._contract is None or self._w3 is None:
            raise ProviderUnavailable("No RPC endpoint configured.")

        if isinstance(op, CreateTask):
            fn = self._contract.functions.addTask(op.body, op.title, op.deleted)
        elif isinstance(op, DeleteTask):
            fn = self._contract.functions.deleteTask(op.task_id)
        else:
            raise TransportError(f"Unsupported operation: {op!r}")

        try:
            tx_hash = await fn.transact({"from": account})
        except Exception as e:
            raise TransportError(describe_failure(e, "Transaction was not accepted")) from e

        pending = EvmPendingTransaction(self._w3, tx_hash, poll_seconds=self._poll)
        logger.info("submitted %s tx=%s", type(op).__name__, pending.tx_id)
        return pending
