from dataclasses import dataclass
from enum import Enum

from eth_account.signers.local import LocalAccount
from web3 import Web3

from .evm import ErrKind, evm_send, get_nonce, to_addr

# https://basescan.org/address/0x432797F45FD2170B4554db426D5be514a6451494
GAME_ADDR = "0x432797F45FD2170B4554db426D5be514a6451494"

GAME_ABI = [
    {
        "name": "pullUp",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "name": "pullDown",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "name": "gameScore",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "int256"}],
    },
    {
        "name": "ScoreUpdate",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "player", "type": "address", "indexed": True},
            {"name": "newScore", "type": "int256", "indexed": False},
        ],
    },
]


class Action(Enum):
    UP = "pullUp"
    DOWN = "pullDown"

    @property
    def arrow(self) -> str:
        return "UP ⬆️" if self is Action.UP else "DOWN ⬇️"


@dataclass
class MoveResult:
    account: str
    action: Action
    nonce: int | None = None
    txid: str | None = None
    err: ErrKind | None = None

    @property
    def ok(self) -> bool:
        return self.txid is not None


class RopeGame:
    def __init__(self, w3: Web3, caddr: str = GAME_ADDR):
        self.w3 = w3
        self.caddr = to_addr(w3, caddr)
        self.contract = w3.eth.contract(address=self.caddr, abi=GAME_ABI)

    def nonce(self, ac: LocalAccount) -> int:
        return get_nonce(self.w3, ac.address)

    def move(self, ac: LocalAccount, action: Action, nonce: int) -> str:
        fn = getattr(self.contract.functions, action.value)()
        return evm_send(self.w3, ac, fn, nonce)

    def score(self) -> int:
        return self.contract.functions.gameScore().call()

    def block_number(self) -> int:
        return self.w3.eth.block_number

    def score_updates(self, from_block: int, to_block: int):
        return self.contract.events.ScoreUpdate().get_logs(
            from_block=from_block, to_block=to_block
        )
