import random
import time
from dataclasses import dataclass
from typing import Callable

from eth_account.signers.local import LocalAccount
from loguru import logger

from .evm import ErrKind, SendError, classify_error
from .game import Action, MoveResult
from .utils import countdown, short
from .watch import ScoreWatcher


@dataclass
class WarCfg:
    moves: int = 50  # moves in fixed mode
    batch_size: int = 50  # moves per round in endless mode
    move_delay: float = 2.0  # pause after every move, seconds
    round_break: float = 180  # pause between rounds, seconds

    def __post_init__(self):
        if self.moves < 1:
            raise ValueError(f"moves must be at least 1, got {self.moves}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.move_delay < 0:
            raise ValueError(f"move_delay must not be negative, got {self.move_delay}")
        if self.round_break < 0:
            raise ValueError(f"round_break must not be negative, got {self.round_break}")


class WarBot:
    def __init__(
        self,
        game,
        accounts: list[LocalAccount],
        cfg: WarCfg | None = None,
        rnd: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
        countdown: Callable[[float], None] = countdown,
        watcher: ScoreWatcher | None = None,
    ):
        if not accounts:
            raise ValueError("No wallets configured")

        self.game = game
        self.accounts = list(accounts)
        self.cfg = cfg or WarCfg()
        self.rnd = rnd or random.Random()
        self.sleep = sleep
        self.countdown = countdown
        self.watcher = watcher

    def pick(self) -> tuple[LocalAccount, Action]:
        ac = self.rnd.choice(self.accounts)
        action = self.rnd.choice(list(Action))
        return ac, action

    def step(self, idx: int, total: int) -> MoveResult:
        ac, action = self.pick()
        rs = MoveResult(account=ac.address, action=action)
        prefix = f"Step {idx}/{total}: {short(ac.address)} {action.arrow}"

        try:
            # always ask the node, other wallets' moves may have landed in between
            rs.nonce = self.game.nonce(ac)
            rs.txid = self.game.move(ac, action, rs.nonce)
            logger.info(f"{prefix} -> {rs.txid[:10]}...")
        except SendError as e:
            rs.err = classify_error(e)
            self._log_failure(prefix, rs.err, e)

        if self.watcher is not None:
            self.watcher.log_pending()

        return rs

    def _log_failure(self, prefix: str, kind: ErrKind, e: Exception):
        if kind == ErrKind.NONCE:
            logger.warning(f"{prefix} -> Nonce error (next move refetches): {e}")
        elif kind == ErrKind.TIMEOUT:
            logger.warning(f"{prefix} -> RPC timeout: {e}")
        else:
            logger.error(f"{prefix} -> Error: {e}")

    def _moves(self, total: int) -> list[MoveResult]:
        results = []
        for i in range(total):
            results.append(self.step(i + 1, total))
            self.sleep(self.cfg.move_delay)

        return results

    def run(self, moves: int | None = None) -> list[MoveResult]:
        moves = self.cfg.moves if moves is None else moves
        logger.info(f"⚔️  Fixed mode: {moves} moves, {len(self.accounts)} wallets")
        results = self._moves(moves)

        done = sum(1 for x in results if x.ok)
        logger.info(f"Finished: {done}/{len(results)} moves sent")
        return results

    def run_rounds(self, max_rounds: int | None = None) -> int:
        """Endless mode. Returns the number of completed rounds (only when bounded)."""
        cfg = self.cfg
        logger.info(
            f"⚔️  Endless mode: {cfg.batch_size} moves per round, {cfg.round_break}s break, "
            f"{len(self.accounts)} wallets"
        )

        round_no = 1
        while max_rounds is None or round_no <= max_rounds:
            logger.info(f"🔔 STARTING ROUND {round_no}")
            results = self._moves(cfg.batch_size)

            done = sum(1 for x in results if x.ok)
            logger.info(f"🛑 Round {round_no} finished: {done}/{len(results)} moves sent")

            self.countdown(cfg.round_break)
            round_no += 1

        return round_no - 1
