"""Tests for share-link encoding and decoding."""

import base64
import zlib
from urllib.parse import parse_qs, urlsplit

import pytest

from game.logic.enums import ShareDecodeErrorKind
from game.logic.exceptions import ShareDecodeError
from game.messaging.share import MAX_PAYLOAD_LEN, GameShareService
from game.tests.helpers.games import SKIP, create_game, with_scores, with_skip_from


def _encode_raw(raw: bytes) -> str:
    return base64.urlsafe_b64encode(zlib.compress(raw)).decode("ascii").rstrip("=")


@pytest.fixture
def share():
    return GameShareService("https://scorecard.test/")


@pytest.fixture
def sample_game():
    game = create_game("Alice", "Bob", "Zoë")
    game = with_scores(game, 0, {"Alice": 0, "Bob": 35, "Zoë": SKIP}, locked=True)
    return with_skip_from(game, "Zoë", 4)


class TestEncode:
    def test_payload_is_url_safe(self, share, sample_game):
        payload = share.encode(sample_game)
        assert payload
        assert "=" not in payload
        assert "+" not in payload
        assert "/" not in payload

    def test_decode_restores_game(self, share, sample_game):
        assert share.decode(share.encode(sample_game)) == sample_game

    def test_share_url(self, share, sample_game):
        url = share.create_share_url(sample_game)
        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://scorecard.test/import"
        assert parse_qs(parts.query)["data"] == [share.encode(sample_game)]

    def test_custom_path_and_param(self, sample_game):
        share = GameShareService("http://localhost:5173", path="open", param="g")
        url = share.create_share_url(sample_game)
        assert url.startswith("http://localhost:5173/open?g=")
        assert share.decode_url(url) == sample_game


class TestDecodeErrors:
    @pytest.mark.parametrize("payload", ["", "   ", "!!!not-base64!!!", "aGVsbG8", "A" * (MAX_PAYLOAD_LEN + 1)])
    def test_not_decodable(self, share, payload):
        with pytest.raises(ShareDecodeError) as exc_info:
            share.decode(payload)
        assert exc_info.value.kind == ShareDecodeErrorKind.NOT_DECODABLE
        assert str(exc_info.value) == "Failed to decompress share data"

    def test_truncated_stream(self, share, sample_game):
        payload = share.encode(sample_game)
        with pytest.raises(ShareDecodeError) as exc_info:
            share.decode(payload[: len(payload) // 2])
        assert exc_info.value.kind == ShareDecodeErrorKind.NOT_DECODABLE

    def test_malformed_json(self, share):
        with pytest.raises(ShareDecodeError) as exc_info:
            share.decode(_encode_raw(b"{players: oops"))
        assert exc_info.value.kind == ShareDecodeErrorKind.MALFORMED_JSON
        assert str(exc_info.value) == "Invalid share data format"

    def test_invalid_utf8(self, share):
        with pytest.raises(ShareDecodeError) as exc_info:
            share.decode(_encode_raw(b"\xff\xfe\xfd"))
        assert exc_info.value.kind == ShareDecodeErrorKind.MALFORMED_JSON

    @pytest.mark.parametrize(
        "raw",
        [
            b"[]",
            b'{"players": [], "rounds": []}',
            b'{"players": [{"id": 1, "name": "A"}], "rounds": [], "isEnded": false}',
            b'{"players": [], "rounds": [], "isEnded": false}',
        ],
    )
    def test_invalid_structure(self, share, raw):
        with pytest.raises(ShareDecodeError) as exc_info:
            share.decode(_encode_raw(raw))
        assert exc_info.value.kind == ShareDecodeErrorKind.INVALID_STRUCTURE
        assert str(exc_info.value) == "Invalid game data structure"


class TestExtractPayload:
    def test_extracts_param(self, share):
        assert share.extract_payload("https://scorecard.test/import?data=abc_-") == "abc_-"

    @pytest.mark.parametrize("url", ["https://scorecard.test/import", "https://scorecard.test/import?data="])
    def test_missing_param(self, share, url):
        with pytest.raises(ShareDecodeError) as exc_info:
            share.extract_payload(url)
        assert exc_info.value.kind == ShareDecodeErrorKind.NOT_DECODABLE
