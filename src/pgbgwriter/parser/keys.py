"""Item key parser.

keys come from the agent as "pg.<metric>" optionally followed by bracketed,
comma separated parameters: pg.checkpoint_time_ratio[,,write]. a parameter
can be double quoted to carry commas (connection strings sometimes do).
"""

import csv

from pgbgwriter.errors import InvalidKeyError
from pgbgwriter.models.query import KEY_PREFIX, AgentRequest


def parse_key(raw: str) -> AgentRequest:
    """Split an item key into its name and positional parameters."""
    raw = raw.strip()
    if not raw:
        raise InvalidKeyError("Empty item key")

    name, bracket, rest = raw.partition("[")
    params: list[str] = []
    if bracket:
        if not rest.endswith("]"):
            raise InvalidKeyError(f"Unterminated parameter list in key: {raw}")
        params = _split_params(rest[:-1])

    name = name.strip()
    if not name.startswith(KEY_PREFIX) or len(name) == len(KEY_PREFIX):
        raise InvalidKeyError(f"Unsupported item key: {name}")

    return AgentRequest(key=name, params=params)


def _split_params(text: str) -> list[str]:
    if not text.strip():
        return []
    # csv already knows about quoted fields with embedded commas
    row = next(csv.reader([text], skipinitialspace=True))
    return [p.strip() for p in row]
