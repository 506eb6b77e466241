"""
Tests for the filter panel reducer, active filter count and URL parameters.
"""
import pytest

from storefront.services.catalog import (
    CatalogState,
    ClearFilters,
    Facets,
    FilterState,
    SetInStock,
    SetMinRating,
    SetPage,
    SetPriceRange,
    SetSearch,
    SetSort,
    SortKey,
    ToggleBrand,
    ToggleCategory,
    active_filter_count,
    reduce_catalog,
    state_from_params,
    to_query_params,
)

FACETS = Facets(categories=("kitchen", "home"), brands=("Homely", "Lumo"), price_bounds=(5.0, 250.0))


@pytest.fixture
def on_page_three():
    return reduce_catalog(CatalogState.initial(FACETS), SetPage(3))


class TestReducer:

    @pytest.mark.parametrize("action", [
        SetSearch("lamp"),
        ToggleCategory("kitchen"),
        ToggleBrand("Lumo"),
        SetPriceRange(10, 100),
        SetMinRating(4),
        SetInStock(True),
        SetSort(SortKey.PRICE_LOW),
        ClearFilters(FACETS),
    ])
    def test_every_change_but_paging_resets_page(self, on_page_three, action):
        assert on_page_three.page == 3
        assert reduce_catalog(on_page_three, action).page == 1

    def test_set_page_keeps_filters(self, on_page_three):
        state = reduce_catalog(on_page_three, SetPage(4))
        assert state.page == 4
        assert state.filters == on_page_three.filters

    def test_set_page_rejects_zero(self, on_page_three):
        with pytest.raises(ValueError):
            reduce_catalog(on_page_three, SetPage(0))

    def test_state_is_not_mutated(self):
        state = CatalogState.initial(FACETS)
        reduce_catalog(state, ToggleCategory("kitchen"))
        assert state.filters.categories == ()

    def test_toggle_adds_then_removes(self):
        state = CatalogState.initial(FACETS)
        state = reduce_catalog(state, ToggleCategory("kitchen"))
        state = reduce_catalog(state, ToggleCategory("home"))
        assert state.filters.categories == ("kitchen", "home")
        state = reduce_catalog(state, ToggleCategory("kitchen"))
        assert state.filters.categories == ("home",)

    def test_clear_filters_restores_facet_bounds(self):
        state = CatalogState.initial(FACETS)
        for action in (ToggleBrand("Lumo"), SetPriceRange(20, 30), SetMinRating(3), SetInStock(True)):
            state = reduce_catalog(state, action)
        cleared = reduce_catalog(state, ClearFilters(FACETS))
        assert cleared.filters == FilterState(price_range=(5.0, 250.0))

    def test_inverted_price_range_rejected(self):
        with pytest.raises(ValueError):
            reduce_catalog(CatalogState.initial(FACETS), SetPriceRange(90, 10))

    def test_unknown_action_rejected(self):
        with pytest.raises(TypeError):
            reduce_catalog(CatalogState.initial(FACETS), "not-an-action")


class TestActiveFilterCount:

    def test_defaults_count_zero(self):
        assert active_filter_count(FilterState.defaults(FACETS), FACETS) == 0

    def test_each_group_counts_once(self):
        filters = FilterState(
            categories=("kitchen", "home"),
            brands=("Lumo",),
            price_range=(5.0, 100.0),
            min_rating=4,
            in_stock=True,
        )
        assert active_filter_count(filters, FACETS) == 5


class TestQueryParams:

    def test_defaults_are_omitted(self):
        assert to_query_params(CatalogState.initial(FACETS)) == {}

    def test_non_defaults_are_written(self):
        state = CatalogState.initial(FACETS)
        for action in (SetSearch("mug"), ToggleCategory("kitchen"), ToggleBrand("Homely"),
                       SetSort(SortKey.NEWEST), SetPage(2)):
            state = reduce_catalog(state, action)
        assert to_query_params(state) == {
            "search": "mug",
            "category": ["kitchen"],
            "brand": ["Homely"],
            "sort": "newest",
            "page": 2,
        }

    def test_round_trip(self):
        params = {"search": "mug", "category": ["kitchen"], "brand": ["Homely"], "sort": "rating", "page": 3}
        assert to_query_params(state_from_params(params, FACETS)) == params

    def test_single_string_values_accepted(self):
        state = state_from_params({"category": "home", "brand": "Lumo"}, FACETS)
        assert state.filters.categories == ("home",)
        assert state.filters.brands == ("Lumo",)

    def test_repeated_values_do_not_cancel_out(self):
        state = state_from_params({"category": ["home", "home"]}, FACETS)
        assert state.filters.categories == ("home",)

    @pytest.mark.parametrize("params,sort,page", [
        ({"sort": "bogus"}, SortKey.NAME, 1),
        ({"page": "abc"}, SortKey.NAME, 1),
        ({"page": "-4"}, SortKey.NAME, 1),
        ({"sort": "price-high", "page": "2"}, SortKey.PRICE_HIGH, 2),
    ])
    def test_bad_values_fall_back(self, params, sort, page):
        state = state_from_params(params, FACETS)
        assert (state.sort, state.page) == (sort, page)

    def test_price_and_flags(self):
        state = state_from_params(
            {"min_price": "10", "max_price": 99, "min_rating": 4, "in_stock": "true"},
            FACETS,
        )
        assert state.filters.price_range == (10.0, 99.0)
        assert state.filters.min_rating == 4
        assert state.filters.in_stock is True
        assert active_filter_count(state.filters, FACETS) == 3
