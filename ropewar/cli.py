import argparse
import os

from loguru import logger
from rich import print as rprint

from .bot import WarBot, WarCfg
from .game import GAME_ADDR, RopeGame
from .utils import load_accounts, load_lines, make_w3, parse_keys, wallets_table
from .watch import ScoreWatcher


def _positive_int(raw: str) -> int:
    val = int(raw)
    if val < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {val}")
    return val


def _seconds(raw: str) -> float:
    val = float(raw)
    if val < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {val}")
    return val


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    dft = WarCfg()
    parser = argparse.ArgumentParser(description="Random pullUp / pullDown moves on the rope war game.")
    parser.add_argument("--mode", choices=["fixed", "endless"], default="endless", help="Run mode")
    parser.add_argument("--moves", type=_positive_int, default=dft.moves, help="Moves in fixed mode")
    parser.add_argument("--batch", type=_positive_int, default=dft.batch_size, help="Moves per round")
    parser.add_argument("--delay", type=_seconds, default=dft.move_delay, help="Pause after each move, s")
    parser.add_argument(
        "--break", dest="round_break", type=_seconds, default=dft.round_break, help="Pause between rounds, s"
    )
    parser.add_argument("--watch", action="store_true", help="Log ScoreUpdate events")
    parser.add_argument("--no-table", action="store_true", help="Skip the wallets table on start")
    return parser.parse_args(argv)


def env_keys() -> list[str]:
    keys = parse_keys(os.getenv("PRIVATE_KEYS"))
    keys_file = os.getenv("KEYS_FILE")
    if not keys and keys_file:
        keys = load_lines(keys_file)

    return keys


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _log_score(game):
    try:
        logger.info(f"Current score: {game.score()}")
    except Exception as e:
        logger.warning(f"Cannot read score {type(e).__name__}: {e}")


def run(args: argparse.Namespace) -> int:
    rpc = os.getenv("RPC_URL")
    if not rpc:
        logger.error("❌ RPC_URL is not set")
        return 1

    keys = env_keys()
    if not keys:
        logger.error("❌ No private keys found (PRIVATE_KEYS or KEYS_FILE)")
        return 1

    try:
        cfg = WarCfg(
            moves=args.moves,
            batch_size=args.batch,
            move_delay=args.delay,
            round_break=args.round_break,
        )
    except ValueError as e:
        logger.error(f"❌ Bad config: {e}")
        return 1

    accounts = load_accounts(keys)
    w3 = make_w3(rpc, os.getenv("RPC_PROXY"))
    game = RopeGame(w3, os.getenv("GAME_ADDR") or GAME_ADDR)
    logger.info(f"✅ Loaded {len(accounts)} wallets, game at {game.caddr}")

    if not args.no_table:
        rprint(wallets_table(w3, accounts))

    watcher = None
    if args.watch or _env_flag("WATCH_EVENTS"):
        watcher = ScoreWatcher(game)
        watcher.start()

    bot = WarBot(game, accounts, cfg, watcher=watcher)
    try:
        if args.mode == "fixed":
            bot.run()
            if watcher is not None:
                _log_score(game)
        else:
            bot.run_rounds()
    finally:
        if watcher is not None:
            watcher.stop(timeout=1)

    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        return run(args)
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0
    except Exception as e:
        logger.exception(f"Unhandled error {type(e).__name__}: {e}")
        return 1
