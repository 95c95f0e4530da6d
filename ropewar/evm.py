import json
from enum import Enum
from typing import cast

import requests.exceptions
import web3.exceptions
from eth_account.signers.local import LocalAccount
from eth_utils.currency import to_wei
from loguru import logger
from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.types import TxParams


class ErrKind(Enum):
    NONCE = "nonce"
    TIMEOUT = "timeout"
    OTHER = "other"


class SendError(Exception):
    def __init__(self, kind: ErrKind, msg: str):
        super().__init__(msg)
        self.kind = kind


# rpc nodes only report nonce conflicts as text
_NONCE_HINTS = ("nonce", "already known", "replacement transaction underpriced")
_TIMEOUT_TYPES = (requests.exceptions.Timeout, web3.exceptions.TimeExhausted, TimeoutError)


def classify_error(e: BaseException) -> ErrKind:
    if isinstance(e, SendError):
        return e.kind

    if isinstance(e, _TIMEOUT_TYPES):
        return ErrKind.TIMEOUT

    if isinstance(e, web3.exceptions.ContractLogicError):
        return ErrKind.OTHER

    msg = str(e).lower()
    if isinstance(e, (web3.exceptions.Web3RPCError, ValueError)):
        if any(x in msg for x in _NONCE_HINTS):
            return ErrKind.NONCE

    return ErrKind.OTHER


def _short_msg(e: BaseException) -> str:
    msg = str(e).strip() or type(e).__name__
    msg = msg.splitlines()[0]
    return msg if len(msg) <= 120 else f"{msg[:117]}..."


def to_addr(w3: Web3, addr: str | int):
    addr = hex(addr) if isinstance(addr, int) else addr
    return w3.to_checksum_address(addr)


def get_nonce(w3: Web3, addr: str) -> int:
    try:
        return w3.eth.get_transaction_count(to_addr(w3, addr), "latest")
    except Exception as e:
        raise SendError(classify_error(e), _short_msg(e)) from e


def _dynamic_fee_params(w3: Web3) -> dict:
    latest = w3.eth.get_block("latest")
    base_fee = latest.get("baseFeePerGas")

    if base_fee is None:
        return {"gasPrice": w3.eth.gas_price}

    default_priority = to_wei("0.001", "gwei")

    try:
        priority = w3.eth.max_priority_fee
        priority = max(priority, default_priority)
    except web3.exceptions.Web3Exception:
        priority = default_priority

    max_fee = int(base_fee * 2 + priority)
    return {"type": 2, "maxPriorityFeePerGas": priority, "maxFeePerGas": max_fee}


def _evm_dump_params(params: TxParams):
    kv = dict(params)
    if "data" in kv:
        # truncate long data
        kv["data"] = f"{kv['data'][:16]}..."  # type: ignore

    return json.dumps(kv, default=str)


def _evm_log_tx(w3: Web3, txid: str, params: TxParams):
    explorers = {
        1: "https://etherscan.io/tx",
        10: "https://optimistic.etherscan.io/tx",
        8453: "https://basescan.org/tx",
        42161: "https://arbiscan.io/tx",
    }

    txurl = explorers.get(params.get("chainId", 0))
    txurl = f"{txurl}/0x{txid}" if txurl else f"0x{txid}"
    logger.debug(f"Sent tx {txurl} {_evm_dump_params(params)}")


def _prepare_params(ac: LocalAccount, pld: ContractFunction | TxParams | dict) -> TxParams:
    if isinstance(pld, ContractFunction):
        return pld.build_transaction({"from": ac.address})

    return cast(TxParams, dict(pld))


def _evm_send_internal(w3: Web3, ac: LocalAccount, params: TxParams, nonce: int) -> str:
    params["chainId"] = w3.eth.chain_id
    params["nonce"] = nonce
    params["from"] = ac.address
    for k in ("gasPrice", "maxFeePerGas", "maxPriorityFeePerGas"):
        params.pop(k, None)  # type: ignore
    params.update(_dynamic_fee_params(w3))  # type: ignore

    # gas can be passed in params directly or estimated here
    if "gas" not in params:
        params["gas"] = w3.eth.estimate_gas(params)

    params["gas"] = int(params["gas"] * 1.2)  # safety buffer
    logger.debug(f"_evm_send: {_evm_dump_params(params)}")

    signed = ac.sign_transaction(params)  # type: ignore
    txid = w3.eth.send_raw_transaction(signed.raw_transaction)
    _evm_log_tx(w3, txid.hex().removeprefix("0x"), params)
    return Web3.to_hex(txid)


def evm_send(
    w3: Web3,
    ac: LocalAccount,
    pld: ContractFunction | TxParams | dict,
    nonce: int,
) -> str:
    """Sign and broadcast one tx with the given nonce; returns the tx hash.

    No receipt wait and no retries. Any failure comes out as SendError
    carrying its ErrKind.
    """
    try:
        params = _prepare_params(ac, pld)
        return _evm_send_internal(w3, ac, params, nonce)
    except SendError:
        raise
    except Exception as e:
        raise SendError(classify_error(e), _short_msg(e)) from e
