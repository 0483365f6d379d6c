import logging
import pathlib

from uuid6 import uuid7

DEFAULT_ID_FILE = pathlib.Path.home() / ".tictac_promo" / "player_id"


def load_or_create_player_id(path: pathlib.Path = DEFAULT_ID_FILE) -> str:
    """Return the anonymous player id stored at ``path``, creating it on first use.

    Args:
        path (pathlib.Path): File holding the id

    Returns:
        str: Stable anonymous id (UUIDv7)
    """
    path = pathlib.Path(path)
    if path.exists():
        player_id = path.read_text(encoding="utf-8").strip()
        if player_id:
            return player_id

    player_id = str(uuid7())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(player_id, encoding="utf-8")
    logging.info(f"Created anonymous player id {player_id}")
    return player_id
