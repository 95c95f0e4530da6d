import queue
import threading
from dataclasses import dataclass

from loguru import logger
from web3 import Web3

from .utils import short


@dataclass
class ScoreEvent:
    player: str
    score: int
    block: int
    txid: str


class ScoreWatcher:
    """Polls ScoreUpdate logs in a background thread and queues them.

    Purely observational: readers call drain() whenever they want to print
    what happened on chain. Poll errors are logged and the poller keeps going.
    """

    def __init__(self, game, poll: float = 5.0, max_range: int = 500):
        self.game = game
        self.poll = poll
        self.max_range = max_range
        self.events: queue.Queue[ScoreEvent] = queue.Queue()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._next_block: int | None = None

    def start(self):
        if self._thread is not None:
            return

        self._next_block = self.game.block_number() + 1
        self._thread = threading.Thread(target=self._run, name="score-watcher", daemon=True)
        self._thread.start()
        logger.info(f"Listening for ScoreUpdate events from block {self._next_block}")

    def stop(self, timeout: float | None = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def poll_once(self) -> int:
        """Fetch logs for blocks not seen yet; returns the number of queued events."""
        head = self.game.block_number()
        if self._next_block is None:
            self._next_block = head + 1
            return 0

        if head < self._next_block:
            return 0

        to_block = min(head, self._next_block + self.max_range - 1)
        logs = self.game.score_updates(self._next_block, to_block)
        for x in logs:
            txid = x["transactionHash"]
            txid = Web3.to_hex(txid) if isinstance(txid, (bytes, bytearray)) else str(txid)
            ev = ScoreEvent(x["args"]["player"], x["args"]["newScore"], x["blockNumber"], txid)
            self.events.put(ev)

        self._next_block = to_block + 1
        return len(logs)

    def drain(self) -> list[ScoreEvent]:
        items = []
        while True:
            try:
                items.append(self.events.get_nowait())
            except queue.Empty:
                return items

    def log_pending(self):
        for ev in self.drain():
            logger.info(f"[EVENT] Player {short(ev.player)} moved rope to: {ev.score}")

    def _run(self):
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.warning(f"ScoreUpdate poll failed {type(e).__name__}: {e}")

            self._stop.wait(self.poll)
