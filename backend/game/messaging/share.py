"""Share-link encoding for games.

A game is serialized to JSON, zlib-compressed and base64url-encoded without
padding, then placed in a query parameter of the import URL. Decoding tells
apart three failures: the payload is not valid base64/zlib, the decompressed
text is not JSON, or the JSON does not have the shape of a game.
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlencode, urlsplit

import structlog

from game.logic.enums import ShareDecodeErrorKind
from game.logic.exceptions import GameDataError, ShareDecodeError
from game.messaging.mapper import GameMapper

if TYPE_CHECKING:
    from game.logic.entities import Game

logger = structlog.get_logger()

# Size limits to prevent resource exhaustion from crafted links.
MAX_PAYLOAD_LEN = 64 * 1024  # encoded characters
MAX_JSON_LEN = 256 * 1024  # decompressed bytes

DEFAULT_SHARE_PATH = "/import"
DEFAULT_SHARE_PARAM = "data"


class GameShareService:
    """Encode games into share URLs and decode them back."""

    def __init__(
        self,
        origin: str,
        *,
        path: str = DEFAULT_SHARE_PATH,
        param: str = DEFAULT_SHARE_PARAM,
        mapper: GameMapper | None = None,
    ) -> None:
        self._origin = origin.rstrip("/")
        self._path = path if path.startswith("/") else f"/{path}"
        self._param = param
        self._mapper = mapper or GameMapper()

    def encode(self, game: Game) -> str:
        compressed = zlib.compress(self._mapper.to_json(game).encode("utf-8"), level=9)
        return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")

    def decode(self, payload: str) -> Game:
        """Decode a share payload. Raises ShareDecodeError tagged with the failing stage."""
        text = self._decompress(payload)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ShareDecodeError(ShareDecodeErrorKind.MALFORMED_JSON, "Invalid share data format") from e

        if not _looks_like_game(data):
            raise ShareDecodeError(ShareDecodeErrorKind.INVALID_STRUCTURE, "Invalid game data structure")

        try:
            game = self._mapper.from_dict(data)
        except GameDataError as e:
            raise ShareDecodeError(ShareDecodeErrorKind.INVALID_STRUCTURE, "Invalid game data structure") from e

        logger.debug("share payload decoded", num_players=len(game.players))
        return game

    def create_share_url(self, game: Game) -> str:
        return f"{self._origin}{self._path}?{urlencode({self._param: self.encode(game)})}"

    def extract_payload(self, url: str) -> str:
        """Return the payload parameter of a share URL."""
        values = parse_qs(urlsplit(url).query).get(self._param)
        if not values or not values[0]:
            raise ShareDecodeError(ShareDecodeErrorKind.NOT_DECODABLE, f"Share URL has no '{self._param}' parameter")
        return values[0]

    def decode_url(self, url: str) -> Game:
        return self.decode(self.extract_payload(url))

    # -- private helpers --

    def _decompress(self, payload: str) -> str:
        stripped = payload.strip()
        if not stripped or len(stripped) > MAX_PAYLOAD_LEN:
            raise ShareDecodeError(ShareDecodeErrorKind.NOT_DECODABLE, "Failed to decompress share data")

        padded = stripped + "=" * (-len(stripped) % 4)
        try:
            compressed = base64.b64decode(padded, altchars=b"-_", validate=True)
            decompressor = zlib.decompressobj()
            raw = decompressor.decompress(compressed, MAX_JSON_LEN)
        except (binascii.Error, ValueError, zlib.error) as e:
            raise ShareDecodeError(ShareDecodeErrorKind.NOT_DECODABLE, "Failed to decompress share data") from e
        if decompressor.unconsumed_tail or not decompressor.eof:
            raise ShareDecodeError(ShareDecodeErrorKind.NOT_DECODABLE, "Failed to decompress share data")

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ShareDecodeError(ShareDecodeErrorKind.MALFORMED_JSON, "Invalid share data format") from e


def _looks_like_game(data: object) -> bool:
    """Minimal structural check before handing data to the mapper."""
    if not isinstance(data, dict):
        return False
    if not isinstance(data.get("players"), list) or not isinstance(data.get("rounds"), list):
        return False
    if not isinstance(data.get("isEnded"), bool):
        return False
    return all(
        isinstance(player, dict) and isinstance(player.get("id"), str) and isinstance(player.get("name"), str)
        for player in data["players"]
    )
