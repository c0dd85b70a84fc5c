"""Tests for candidate normalisation across upstream payload variants."""

from __future__ import annotations

from app.models import (
    CandidateItem,
    KeywordSearchHit,
    OmdbSearchHit,
    OmdbTitleDetail,
    SampleMovie,
    TmdbSearchResult,
    TvMazeShow,
    WatchHistoryEntry,
    is_placeholder_id,
    parse_records,
    placeholder_id,
)


def test_omdb_search_hit_normalises_missing_poster() -> None:
    hit = OmdbSearchHit.model_validate(
        {"Title": "Batman Begins", "Year": "2005", "imdbID": "tt0372784", "Type": "movie", "Poster": "N/A"}
    )

    candidate = hit.to_candidate()

    assert candidate is not None
    assert candidate.external_id == "tt0372784"
    assert candidate.content_type == "movie"
    assert candidate.poster_url is None
    assert candidate.source == "omdb"


def test_omdb_detail_requires_true_response() -> None:
    assert OmdbTitleDetail.model_validate({"Response": "False"}).to_candidate("tt1") is None

    detail = OmdbTitleDetail.model_validate(
        {
            "Response": "True",
            "Title": "Inception",
            "Year": "2010",
            "Type": "movie",
            "Genre": "Action, Science Fiction",
            "imdbRating": "8.8",
            "Language": "English, Japanese",
        }
    )
    candidate = detail.to_candidate("tt1375666")

    assert candidate is not None
    assert candidate.external_id == "tt1375666"
    assert candidate.genres == ["Action", "Sci-Fi"]
    assert candidate.rating == 8.8
    assert candidate.language == "English, Japanese"


def test_tmdb_result_builds_poster_and_year() -> None:
    result = TmdbSearchResult.model_validate(
        {"id": 1399, "name": "Game of Thrones", "first_air_date": "2011-04-17", "poster_path": "/got.jpg"}
    )

    candidate = result.to_candidate(
        content_type="series",
        external_id=placeholder_id("tmdb", 1399),
        image_base_url="https://image.tmdb.org/t/p/w300",
    )

    assert candidate is not None
    assert candidate.year == "2011"
    assert candidate.poster_url == "https://image.tmdb.org/t/p/w300/got.jpg"
    assert candidate.external_id == "tmdb:1399"
    assert not candidate.has_canonical_id


def test_tvmaze_show_exposes_imdb_external() -> None:
    show = TvMazeShow.model_validate(
        {
            "id": 82,
            "name": "Game of Thrones",
            "premiered": "2011-04-17",
            "genres": ["Drama", "Adventure", "Fantasy"],
            "externals": {"imdb": "tt0944947"},
            "image": {"medium": "https://static.tvmaze.com/got.jpg"},
            "rating": {"average": 8.9},
        }
    )

    assert show.imdb_id == "tt0944947"
    candidate = show.to_candidate(external_id=show.imdb_id)
    assert candidate is not None
    assert candidate.content_type == "series"
    assert candidate.rating == 8.9


def test_keyword_hit_guesses_type_and_genre() -> None:
    hit = KeywordSearchHit.model_validate(
        {"#TITLE": "Breaking Bad", "#YEAR": "2008–2013", "#IMDB_ID": "tt0903747", "#ACTORS": "Bryan Cranston"}
    )

    candidate = hit.to_candidate()

    assert candidate is not None
    assert candidate.content_type == "series"
    assert candidate.genres == ["Drama"]
    assert candidate.rating is None
    assert candidate.actors == "Bryan Cranston"


def test_sample_movie_extracts_year_from_title() -> None:
    candidate = SampleMovie.model_validate(
        {"title": "Coco (2017)", "imdbId": "tt2380307", "posterURL": "https://img.example.com/coco.jpg"}
    ).to_candidate()

    assert candidate is not None
    assert candidate.year == "2017"
    assert candidate.content_type == "movie"


def test_parse_records_drops_malformed_entries() -> None:
    records = parse_records(TmdbSearchResult, [{"id": 1, "title": "Ok"}, {"title": "no id"}, "junk"])

    assert [record.id for record in records] == [1]
    assert parse_records(TmdbSearchResult, {"results": []}) == []


def test_dedupe_key_prefers_canonical_ids() -> None:
    canonical = CandidateItem(title="Dune", year="2021", external_id="tt1160419")
    placeholder = CandidateItem(title="Dune", year="2021", external_id="tvmaze:123")
    bare = CandidateItem(title="Dune", year="2021")

    assert canonical.dedupe_key() == "tt1160419"
    assert placeholder.dedupe_key() == "dune-2021"
    assert bare.dedupe_key() == "dune-2021"
    assert is_placeholder_id("tmdb:42")
    assert not is_placeholder_id("tt0000001")


def test_merge_enrichment_keeps_existing_values() -> None:
    item = CandidateItem(title="Dune", year="2021", external_id="tt1160419", poster_url="https://a/p.jpg")
    detail = CandidateItem(title="Dune", external_id="tt1160419", genres=["Sci-Fi"], rating=8.0)

    merged = item.merge_enrichment(detail)

    assert merged.poster_url == "https://a/p.jpg"
    assert merged.year == "2021"
    assert merged.genres == ["Sci-Fi"]
    assert merged.rating == 8.0


def test_candidate_payload_uses_camel_case() -> None:
    payload = CandidateItem(title="Dune", external_id="tt1160419", ai_score=12.5).to_payload()

    assert payload["externalId"] == "tt1160419"
    assert payload["aiScore"] == 12.5
    assert payload["contentType"] == "unknown"


def test_watch_history_entry_accepts_front_end_aliases() -> None:
    entry = WatchHistoryEntry.model_validate(
        {"imdbId": "tt0903747", "type": "series", "genre": "Crime, Drama", "watchedAt": "2024-05-01T10:00:00"}
    )

    assert entry.external_id == "tt0903747"
    assert entry.content_type == "series"
    assert entry.model_dump(mode="json", by_alias=True)["externalId"] == "tt0903747"
