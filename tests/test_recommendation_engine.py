"""Tests for the recommendation engine."""

import pytest
from conftest import FakeCatalogClient, FakeClock, make_item, page_of

from cinefeed.exceptions import NetworkFailureError, NotConfiguredError
from cinefeed.models import ContentItem, MediaType
from cinefeed.services.preferences import GenrePreferenceStore
from cinefeed.services.recommendations.engine import RecommendationEngine, preference_score


def seed_general(catalog: FakeCatalogClient, movies: list[ContentItem], shows: list[ContentItem]):
    catalog.responses[("popular", MediaType.MOVIE, 1)] = page_of(*movies)
    catalog.responses[("popular", MediaType.TV, 1)] = page_of(*shows)


def seed_personalized(
    catalog: FakeCatalogClient,
    genre_ids: list[int],
    movies: list[ContentItem],
    shows: list[ContentItem],
):
    genres = tuple(sorted(genre_ids))
    catalog.responses[("discover", MediaType.MOVIE, genres, 1, "popularity.desc")] = page_of(*movies)
    catalog.responses[("discover", MediaType.TV, genres, 1, "popularity.desc")] = page_of(*shows)


def many_items(media_type: MediaType, count: int, start: int = 1) -> list[ContentItem]:
    return [
        make_item(
            i,
            media_type,
            popularity=float((i * 37) % 101),
            vote_average=float((i * 13) % 11),
            genre_ids=(28,) if i % 2 else (12, 16),
        )
        for i in range(start, start + count)
    ]


class TestPreferenceScore:
    """Tests for the For You score."""

    def test_combines_genre_and_rating(self):
        item = make_item(1, vote_average=8.0, genre_ids=(28, 12, 99))
        assert preference_score(item, [28, 12, 16]) == pytest.approx(0.7 * 2 / 3 + 0.3 * 0.8)

    def test_rating_only_without_preferences(self):
        item = make_item(1, vote_average=6.0, genre_ids=(28,))
        assert preference_score(item, []) == pytest.approx(0.6)


class TestGeneralFeed:
    """Tests for the feed without enough preferences."""

    @pytest.mark.asyncio
    async def test_category_order(
        self, engine: RecommendationEngine, catalog: FakeCatalogClient
    ):
        """Empty preferences give the four general rows in fixed order."""
        seed_general(catalog, many_items(MediaType.MOVIE, 30), many_items(MediaType.TV, 30))

        result = await engine.get_recommendations()

        assert result.ok
        assert [c.title for c in result.categories] == [
            "Popular Movies",
            "Top Rated Movies",
            "Popular TV Shows",
            "Top Rated TV Shows",
        ]

    @pytest.mark.asyncio
    async def test_rows_sorted_and_capped(
        self, engine: RecommendationEngine, catalog: FakeCatalogClient
    ):
        seed_general(catalog, many_items(MediaType.MOVIE, 30), many_items(MediaType.TV, 25))

        result = await engine.get_recommendations()
        popular_movies, top_movies, popular_tv, top_tv = result.categories

        for category in result.categories:
            assert len(category.items) <= 20
        for category in (popular_movies, popular_tv):
            values = [item.popularity for item in category.items]
            assert values == sorted(values, reverse=True)
        for category in (top_movies, top_tv):
            values = [item.vote_average for item in category.items]
            assert values == sorted(values, reverse=True)
        assert all(item.media_type == MediaType.MOVIE for item in popular_movies.items)
        assert all(item.media_type == MediaType.TV for item in top_tv.items)

    @pytest.mark.asyncio
    async def test_incomplete_preferences_use_general_pools(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        """Two genres are not enough for personalization."""
        await preference_store.set([28, 12])

        result = await engine.get_recommendations()

        assert result.categories[0].id == "popular-movies"
        assert catalog.count("discover") == 0


class TestPersonalizedFeed:
    """Tests for the personalized feed."""

    @pytest.mark.asyncio
    async def test_category_order(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        """For You, Trending, then rows for the first two preferred genres only."""
        await preference_store.set([28, 12, 16])
        seed_personalized(
            catalog,
            [28, 12, 16],
            many_items(MediaType.MOVIE, 10),
            many_items(MediaType.TV, 10),
        )

        result = await engine.get_recommendations()

        assert [c.title for c in result.categories] == [
            "For You",
            "Trending Now",
            "Best Action",
            "Best Adventure",
        ]
        assert [c.id for c in result.categories][2:] == ["genre-28", "genre-12"]

    @pytest.mark.asyncio
    async def test_for_you_ranking(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        await preference_store.set([28, 12, 16])
        best = make_item(1, vote_average=9.0, genre_ids=(28, 12, 16))
        good = make_item(2, vote_average=9.0, genre_ids=(28,))
        off_topic = make_item(3, MediaType.TV, vote_average=10.0, genre_ids=(99,))
        seed_personalized(catalog, [28, 12, 16], [good, best], [off_topic])

        result = await engine.get_recommendations()
        for_you = result.categories[0]

        assert [item.id for item in for_you.items] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_trending_not_filtered(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        """Trending mixes movies and series by popularity, regardless of genre."""
        await preference_store.set([28, 12, 16])
        movie = make_item(1, popularity=50.0, genre_ids=(28,))
        show = make_item(1, MediaType.TV, popularity=80.0, genre_ids=(99,))
        seed_personalized(catalog, [28, 12, 16], [movie], [show])

        result = await engine.get_recommendations()
        trending = result.categories[1]

        assert [item.key for item in trending.items] == [show.key, movie.key]

    @pytest.mark.asyncio
    async def test_genre_row_filtered_and_sorted(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        await preference_store.set([28, 12, 16])
        items = [
            make_item(1, vote_average=6.0, genre_ids=(28,)),
            make_item(2, vote_average=9.0, genre_ids=(28, 12)),
            make_item(3, vote_average=7.0, genre_ids=(12,)),
        ]
        seed_personalized(catalog, [28, 12, 16], items, [])

        result = await engine.get_recommendations()
        by_id = {c.id: c for c in result.categories}

        assert [item.id for item in by_id["genre-28"].items] == [2, 1]
        assert [item.id for item in by_id["genre-12"].items] == [2, 3]

    @pytest.mark.asyncio
    async def test_empty_genre_row_skipped(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        await preference_store.set([28, 12, 16])
        seed_personalized(catalog, [28, 12, 16], [make_item(1, genre_ids=(12,))], [])

        result = await engine.get_recommendations()

        assert [c.id for c in result.categories] == ["for-you", "trending", "genre-12"]

    @pytest.mark.asyncio
    async def test_stable_on_repeat(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        """Tied scores keep their order across calls."""
        await preference_store.set([28, 12, 16])
        tied = [make_item(i, vote_average=7.0, genre_ids=(28,)) for i in range(1, 6)]
        seed_personalized(catalog, [28, 12, 16], tied, [])

        first = await engine.get_recommendations()
        second = await engine.get_recommendations()

        assert [i.id for i in first.categories[0].items] == [1, 2, 3, 4, 5]
        assert first.categories == second.categories


class TestErrors:
    """Tests for failure handling."""

    @pytest.mark.asyncio
    async def test_no_data_returns_error(
        self, engine: RecommendationEngine, catalog: FakeCatalogClient
    ):
        """Nothing cached: empty categories plus the error, no exception."""
        catalog.error = NotConfiguredError("no key")

        result = await engine.get_recommendations()

        assert result.categories == []
        assert isinstance(result.error, NotConfiguredError)
        assert not result.ok

    @pytest.mark.asyncio
    async def test_stale_data_served(
        self, engine: RecommendationEngine, catalog: FakeCatalogClient, clock: FakeClock
    ):
        seed_general(catalog, [make_item(1)], [make_item(2, MediaType.TV)])
        await engine.get_recommendations()

        clock.advance(3600)
        catalog.error = NetworkFailureError("offline")
        result = await engine.get_recommendations()

        assert result.ok
        assert [i.id for i in result.categories[0].items] == [1]

    @pytest.mark.asyncio
    async def test_personalized_failure_falls_back_to_general(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        await preference_store.set([28, 12, 16])
        seed_general(catalog, [make_item(1)], [])
        catalog.error = NetworkFailureError("offline")
        catalog.fail_on = {
            ("discover", MediaType.MOVIE, (12, 16, 28), 1, "popularity.desc"),
            ("discover", MediaType.TV, (12, 16, 28), 1, "popularity.desc"),
        }

        result = await engine.get_recommendations()

        assert result.ok
        assert result.categories[0].id == "popular-movies"


class TestRefresh:
    """Tests for refresh."""

    @pytest.mark.asyncio
    async def test_refresh_refetches_both_pools(
        self, engine: RecommendationEngine, catalog: FakeCatalogClient
    ):
        await engine.get_recommendations()
        assert len(catalog.calls) == 8

        error = await engine.refresh()
        assert error is None
        assert len(catalog.calls) == 16

        await engine.get_recommendations()
        assert len(catalog.calls) == 16

    @pytest.mark.asyncio
    async def test_refresh_prewarms_personalized(
        self,
        engine: RecommendationEngine,
        catalog: FakeCatalogClient,
        preference_store: GenrePreferenceStore,
    ):
        await preference_store.set([28, 12, 16])

        await engine.refresh()

        assert catalog.count("discover") == 8
        assert catalog.count("popular") == 0

    @pytest.mark.asyncio
    async def test_refresh_reports_error(
        self, engine: RecommendationEngine, catalog: FakeCatalogClient
    ):
        catalog.error = NetworkFailureError("offline")

        error = await engine.refresh()

        assert isinstance(error, NetworkFailureError)
