"""Tests for query-parameter parsing of the streams endpoint."""

from __future__ import annotations

from modstream.domain.entities import StreamRequest
from modstream.interfaces.api.streams.router import parse_stream_request


class TestParseStreamRequest:
    def test_missing_title(self) -> None:
        assert parse_stream_request({}) is None
        assert parse_stream_request({"title": "   "}) is None

    def test_movie_defaults(self) -> None:
        assert parse_stream_request({"title": " Inception "}) == StreamRequest(
            title="Inception"
        )

    def test_series_alias(self) -> None:
        request = parse_stream_request(
            {"title": "Breaking Bad", "type": "series", "season": "1", "episode": "2"}
        )
        assert request is not None
        assert request.media_type == "tv"
        assert request.is_series
        assert (request.season, request.episode) == (1, 2)

    def test_unknown_type_falls_back_to_movie(self) -> None:
        request = parse_stream_request({"title": "x", "type": "anime"})
        assert request is not None
        assert request.media_type == "movie"

    def test_type_is_case_insensitive(self) -> None:
        request = parse_stream_request({"title": "x", "type": "TV"})
        assert request is not None
        assert request.media_type == "tv"

    def test_non_numeric_season_is_ignored(self) -> None:
        request = parse_stream_request(
            {"title": "x", "type": "tv", "season": "one", "episode": ""}
        )
        assert request is not None
        assert request.season is None
        assert request.episode is None

    def test_year(self) -> None:
        request = parse_stream_request({"title": "The Dark Knight", "year": "2008"})
        assert request is not None
        assert request.year == "2008"
        assert parse_stream_request({"title": "x", "year": " "}).year is None
