"""
Catalog query pipeline and filter panel state

Pure functions over an in-memory product list: no I/O, no mutation of the
inputs, same input gives the same page. Products may be mappings or objects
exposing the product fields as attributes.

Pipeline order: search -> categories -> brands -> price -> rating -> in stock
-> stable sort -> count -> page slice.

Panel state is an immutable CatalogState. UI intents are actions folded in
with reduce_catalog(); every action except SetPage sends the shopper back to
page 1.
"""
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

DEFAULT_PAGE_SIZE = 12
DEFAULT_PRICE_RANGE: Tuple[float, float] = (0.0, 1000.0)
SEARCH_FIELDS = ("name", "description", "category", "brand")

SUGGESTION_PRODUCT_LIMIT = 5
SUGGESTION_CATEGORY_LIMIT = 2
SUGGESTION_BRAND_LIMIT = 2


class SortKey(str, Enum):
    NAME = "name"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    RATING = "rating"
    NEWEST = "newest"
    POPULARITY = "popularity"


def _get(product: Any, name: str) -> Any:
    if isinstance(product, Mapping):
        return product.get(name)
    return getattr(product, name, None)


# ----- Value types -----

@dataclass(frozen=True)
class Facets:
    """Filter options derived from the full catalog."""
    categories: Tuple[str, ...] = ()
    brands: Tuple[str, ...] = ()
    price_bounds: Tuple[float, float] = DEFAULT_PRICE_RANGE


@dataclass(frozen=True)
class FilterState:
    categories: Tuple[str, ...] = ()
    brands: Tuple[str, ...] = ()
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
    min_rating: float = 0
    in_stock: bool = False

    def __post_init__(self):
        low, high = self.price_range
        if low > high:
            raise ValueError(f"price range lower bound {low} exceeds upper bound {high}")
        if self.min_rating < 0:
            raise ValueError("min_rating must be >= 0")

    @classmethod
    def defaults(cls, facets: Optional[Facets] = None) -> "FilterState":
        return cls(price_range=(facets or Facets()).price_bounds)


@dataclass(frozen=True)
class CatalogQuery:
    filters: FilterState = field(default_factory=FilterState)
    sort: SortKey = SortKey.NAME
    search: str = ""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")


@dataclass(frozen=True)
class CatalogPage:
    items: List[Any]
    total_count: int
    total_pages: int
    page: int
    page_size: int


# ----- Pipeline -----

def _matches_search(product: Any, term: str) -> bool:
    for name in SEARCH_FIELDS:
        value = _get(product, name)
        if value and term in str(value).lower():
            return True
    return False


def _sorted(products: List[Any], sort: SortKey) -> List[Any]:
    # sorted() is stable, including with reverse=True
    if sort == SortKey.NAME:
        return sorted(products, key=lambda p: (_get(p, "name") or "").casefold())
    if sort == SortKey.PRICE_LOW:
        return sorted(products, key=lambda p: float(_get(p, "price") or 0))
    if sort == SortKey.PRICE_HIGH:
        return sorted(products, key=lambda p: float(_get(p, "price") or 0), reverse=True)
    if sort == SortKey.RATING:
        return sorted(products, key=lambda p: float(_get(p, "rating") or 0), reverse=True)
    if sort == SortKey.POPULARITY:
        return sorted(products, key=lambda p: float(_get(p, "popularity_score") or 0), reverse=True)
    if sort == SortKey.NEWEST:
        return sorted(
            products,
            key=lambda p: (_get(p, "created_at") is not None, _get(p, "created_at")),
            reverse=True,
        )
    return list(products)


def run_catalog_query(products: Sequence[Any], query: CatalogQuery) -> CatalogPage:
    """Filter, sort and paginate `products`. The input sequence is never modified."""
    filters = query.filters
    result = list(products)

    term = query.search.strip().lower()
    if term:
        result = [p for p in result if _matches_search(p, term)]

    if filters.categories:
        result = [p for p in result if _get(p, "category") in filters.categories]

    if filters.brands:
        result = [p for p in result if _get(p, "brand") in filters.brands]

    low, high = filters.price_range
    result = [p for p in result if low <= float(_get(p, "price") or 0) <= high]

    if filters.min_rating > 0:
        result = [p for p in result if float(_get(p, "rating") or 0) >= filters.min_rating]

    if filters.in_stock:
        result = [p for p in result if (_get(p, "stock") or 0) > 0]

    result = _sorted(result, query.sort)

    total_count = len(result)
    start = (query.page - 1) * query.page_size
    return CatalogPage(
        items=result[start:start + query.page_size],
        total_count=total_count,
        total_pages=math.ceil(total_count / query.page_size),
        page=query.page,
        page_size=query.page_size,
    )


def derive_facets(products: Sequence[Any]) -> Facets:
    """Distinct categories and brands in first-seen order, plus whole-number price bounds."""
    categories: List[str] = []
    brands: List[str] = []
    prices: List[float] = []

    for product in products:
        category = _get(product, "category")
        if category and category not in categories:
            categories.append(category)
        brand = _get(product, "brand")
        if brand and brand not in brands:
            brands.append(brand)
        price = _get(product, "price")
        if price is not None:
            prices.append(float(price))

    if not prices:
        return Facets(tuple(categories), tuple(brands), DEFAULT_PRICE_RANGE)

    bounds = (float(math.floor(min(prices))), float(math.ceil(max(prices))))
    return Facets(tuple(categories), tuple(brands), bounds)


def build_suggestions(matches: Sequence[Any], term: str) -> Dict[str, List[Any]]:
    """
    Autocomplete groups for products already matched on the search term.

    Categories come from the matched products; brands only when the brand
    itself contains the term.
    """
    lowered = term.strip().lower()
    products = list(matches)[:SUGGESTION_PRODUCT_LIMIT]

    categories: List[str] = []
    brands: List[str] = []
    for product in products:
        category = _get(product, "category")
        if category and category not in categories and len(categories) < SUGGESTION_CATEGORY_LIMIT:
            categories.append(category)
        brand = _get(product, "brand")
        if (
            brand
            and lowered in brand.lower()
            and brand not in brands
            and len(brands) < SUGGESTION_BRAND_LIMIT
        ):
            brands.append(brand)

    return {"products": products, "categories": categories, "brands": brands}


# ----- Panel state and reducer -----

@dataclass(frozen=True)
class CatalogState:
    filters: FilterState = field(default_factory=FilterState)
    sort: SortKey = SortKey.NAME
    search: str = ""
    page: int = 1

    @classmethod
    def initial(cls, facets: Optional[Facets] = None) -> "CatalogState":
        return cls(filters=FilterState.defaults(facets))

    def to_query(self, page_size: int = DEFAULT_PAGE_SIZE) -> CatalogQuery:
        return CatalogQuery(
            filters=self.filters,
            sort=self.sort,
            search=self.search,
            page=self.page,
            page_size=page_size,
        )


@dataclass(frozen=True)
class SetSearch:
    term: str


@dataclass(frozen=True)
class ToggleCategory:
    category: str


@dataclass(frozen=True)
class ToggleBrand:
    brand: str


@dataclass(frozen=True)
class SetPriceRange:
    low: float
    high: float


@dataclass(frozen=True)
class SetMinRating:
    rating: float


@dataclass(frozen=True)
class SetInStock:
    in_stock: bool


@dataclass(frozen=True)
class SetSort:
    sort: SortKey


@dataclass(frozen=True)
class SetPage:
    page: int


@dataclass(frozen=True)
class ClearFilters:
    facets: Facets = field(default_factory=Facets)


CatalogAction = Union[
    SetSearch, ToggleCategory, ToggleBrand, SetPriceRange, SetMinRating,
    SetInStock, SetSort, SetPage, ClearFilters,
]


def _toggle(values: Tuple[str, ...], value: str) -> Tuple[str, ...]:
    if value in values:
        return tuple(v for v in values if v != value)
    return values + (value,)


def reduce_catalog(state: CatalogState, action: CatalogAction) -> CatalogState:
    """Return the next panel state. `state` is never modified."""
    filters = state.filters

    if isinstance(action, SetPage):
        if action.page < 1:
            raise ValueError("page must be >= 1")
        return replace(state, page=action.page)

    if isinstance(action, SetSearch):
        return replace(state, search=action.term, page=1)
    if isinstance(action, SetSort):
        return replace(state, sort=SortKey(action.sort), page=1)

    if isinstance(action, ToggleCategory):
        filters = replace(filters, categories=_toggle(filters.categories, action.category))
    elif isinstance(action, ToggleBrand):
        filters = replace(filters, brands=_toggle(filters.brands, action.brand))
    elif isinstance(action, SetPriceRange):
        filters = replace(filters, price_range=(float(action.low), float(action.high)))
    elif isinstance(action, SetMinRating):
        filters = replace(filters, min_rating=action.rating)
    elif isinstance(action, SetInStock):
        filters = replace(filters, in_stock=bool(action.in_stock))
    elif isinstance(action, ClearFilters):
        filters = FilterState.defaults(action.facets)
    else:
        raise TypeError(f"Unknown catalog action: {action!r}")

    return replace(state, filters=filters, page=1)


def active_filter_count(filters: FilterState, facets: Facets) -> int:
    """Number of filter groups that differ from their defaults."""
    count = 0
    if filters.categories:
        count += 1
    if filters.brands:
        count += 1
    if filters.min_rating > 0:
        count += 1
    if filters.in_stock:
        count += 1
    if tuple(filters.price_range) != tuple(facets.price_bounds):
        count += 1
    return count


# ----- URL query parameters -----

def to_query_params(state: CatalogState) -> Dict[str, Any]:
    """Shareable URL parameters for `state`, omitting defaults."""
    params: Dict[str, Any] = {}
    if state.search.strip():
        params["search"] = state.search
    if state.filters.categories:
        params["category"] = list(state.filters.categories)
    if state.filters.brands:
        params["brand"] = list(state.filters.brands)
    if state.sort != SortKey.NAME:
        params["sort"] = state.sort.value
    if state.page > 1:
        params["page"] = state.page
    return params


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [v for v in value if v]


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def state_from_params(params: Mapping[str, Any], facets: Optional[Facets] = None) -> CatalogState:
    """
    Rebuild panel state from URL parameters by folding the equivalent actions.

    Accepts the keys written by to_query_params plus min_price, max_price,
    min_rating and in_stock. Unknown sort values fall back to name; page
    values that are not positive integers fall back to 1.
    """
    facets = facets or Facets()
    state = CatalogState.initial(facets)
    actions: List[CatalogAction] = []

    search = params.get("search")
    if search:
        actions.append(SetSearch(search))
    for category in dict.fromkeys(_as_list(params.get("category"))):
        actions.append(ToggleCategory(category))
    for brand in dict.fromkeys(_as_list(params.get("brand"))):
        actions.append(ToggleBrand(brand))

    low, high = facets.price_bounds
    if params.get("min_price") is not None:
        low = float(params["min_price"])
    if params.get("max_price") is not None:
        high = float(params["max_price"])
    if (low, high) != facets.price_bounds:
        actions.append(SetPriceRange(low, high))

    if params.get("min_rating"):
        actions.append(SetMinRating(float(params["min_rating"])))
    if _truthy(params.get("in_stock")):
        actions.append(SetInStock(True))

    try:
        sort = SortKey(params.get("sort") or SortKey.NAME)
    except ValueError:
        sort = SortKey.NAME
    if sort != SortKey.NAME:
        actions.append(SetSort(sort))

    for action in actions:
        state = reduce_catalog(state, action)

    try:
        page = int(params.get("page") or 1)
    except (TypeError, ValueError):
        page = 1
    if page > 1:
        state = reduce_catalog(state, SetPage(page))
    return state
