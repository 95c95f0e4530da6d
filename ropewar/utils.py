import time
from typing import Callable

from eth_account import Account
from eth_account.signers.local import LocalAccount
from rich.table import Table
from tqdm import tqdm
from web3 import Web3


def load_lines(filepath: str) -> list[str]:
    with open(filepath, "r") as fp:
        lines = [x.strip() for x in fp.readlines()]
        lines = [x for x in lines if x and not x.startswith("#")]
        return lines


def parse_keys(raw: str | None) -> list[str]:
    if not raw:
        return []

    keys = [x.strip() for x in raw.split(",")]
    return [x for x in keys if x]


def load_accounts(keys: list[str]) -> list[LocalAccount]:
    return [Account.from_key(x) for x in keys]


def parse_proxy(proxy: str | None) -> str | None:
    if not proxy:
        return None

    if not proxy.startswith("http") and proxy.count(":") == 3:
        parts = proxy.split(":")
        proxy = f"http://{parts[2]}:{parts[3]}@{parts[0]}:{parts[1]}"
        return proxy

    return proxy


def make_w3(rpc: str, proxy: str | None = None, timeout=30) -> Web3:
    px = parse_proxy(proxy)
    w3_kw: dict = {"timeout": timeout}
    if px:
        w3_kw["proxies"] = {"http": px, "https": px}

    return Web3(Web3.HTTPProvider(rpc, request_kwargs=w3_kw))


def short(addr: str) -> str:
    return f"...{addr[-4:]}"


def countdown(seconds: int | float, sleep: Callable[[float], None] = time.sleep):
    total = int(seconds)
    with tqdm(total=total, desc="   ⏳ Next round in", unit="s", leave=False) as bar:
        for left in range(total, 0, -1):
            bar.set_postfix_str(f"{left}s")
            sleep(1)
            bar.update(1)

    tqdm.write("GO! 🚀")


def wallets_table(w3: Web3 | None, accounts: list[LocalAccount]) -> Table:
    tbl = Table(box=None)
    tbl.add_column("#", style="dim")
    tbl.add_column("Wallet", style="cyan", no_wrap=True)
    tbl.add_column("Balance", style="green")

    for i, ac in enumerate(accounts, 1):
        bal = "-"
        if w3 is not None:
            try:
                bal = f"{w3.from_wei(w3.eth.get_balance(ac.address), 'ether'):.6f} ETH"
            except Exception as e:
                bal = f"{type(e).__name__}"

        tbl.add_row(f"{i:03d}", ac.address, bal)

    return tbl
