from dotenv import load_dotenv

load_dotenv()

from .bot import WarBot, WarCfg  # noqa: F401
from .evm import ErrKind, SendError, evm_send, get_nonce, to_addr  # noqa: F401
from .game import GAME_ADDR, Action, MoveResult, RopeGame  # noqa: F401
from .watch import ScoreEvent, ScoreWatcher  # noqa: F401
