"""
Tests for reviews, rating roll-up and helpful votes.
"""
import pytest

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.services.review_service import ReviewService, average_rating


@pytest.mark.parametrize("ratings,expected", [
    ([], None),
    ([5], 5.0),
    ([4, 5], 4.5),
    ([4, 4, 5], 4.3),
    ([1, 2, 2, 2, 2, 2], 1.8),
    ([3, 4, 4, 4], 3.8),
])
def test_average_rating(ratings, expected):
    assert average_rating(ratings) == expected


@pytest.mark.anyio
class TestSubmit:

    async def test_submit_rolls_up_product_rating(self, gateway, user, user_factory, product_factory):
        product = product_factory()
        other = user_factory("other@example.com")

        await ReviewService.submit(gateway, user["id"], product["id"], 5, "Great", "Loved it")
        await ReviewService.submit(gateway, other["id"], product["id"], 2)

        stored = gateway.tables["products"][0]
        assert stored["rating"] == 3.5
        assert stored["review_count"] == 2

    async def test_resubmitting_replaces_the_review(self, gateway, user, product_factory):
        product = product_factory()
        first = await ReviewService.submit(gateway, user["id"], product["id"], 2, "Meh")
        second = await ReviewService.submit(gateway, user["id"], product["id"], 4, "Grew on me")

        assert second["id"] == first["id"]
        assert len(gateway.tables["reviews"]) == 1
        assert gateway.tables["reviews"][0]["title"] == "Grew on me"
        assert gateway.tables["products"][0]["rating"] == 4.0

    @pytest.mark.parametrize("rating", [0, 6, -1, None])
    async def test_rating_outside_range_rejected(self, gateway, user, product_factory, rating):
        product = product_factory()
        with pytest.raises(ValidationError):
            await ReviewService.submit(gateway, user["id"], product["id"], rating)
        assert gateway.tables["reviews"] == []

    async def test_text_is_trimmed_and_blank_becomes_none(self, gateway, user, product_factory):
        product = product_factory()
        review = await ReviewService.submit(gateway, user["id"], product["id"], 4, "  Solid  ", "   ")
        assert review["title"] == "Solid"
        assert review["comment"] is None

    @pytest.mark.parametrize("field,length", [("title", 101), ("comment", 1001)])
    async def test_text_length_limits(self, gateway, user, product_factory, field, length):
        product = product_factory()
        with pytest.raises(ValidationError):
            await ReviewService.submit(gateway, user["id"], product["id"], 4, **{field: "x" * length})

    async def test_unknown_product(self, gateway, user):
        with pytest.raises(NotFoundError):
            await ReviewService.submit(gateway, user["id"], 404, 5)


@pytest.mark.anyio
class TestDelete:

    async def test_delete_recomputes_rating(self, gateway, user, product_factory):
        product = product_factory()
        review = await ReviewService.submit(gateway, user["id"], product["id"], 5)
        await ReviewService.delete(gateway, user["id"], review["id"])

        stored = gateway.tables["products"][0]
        assert stored["rating"] is None
        assert stored["review_count"] == 0

    async def test_cannot_delete_someone_elses_review(self, gateway, user, user_factory, product_factory):
        product = product_factory()
        other = user_factory("other@example.com")
        review = await ReviewService.submit(gateway, other["id"], product["id"], 5)

        with pytest.raises(NotFoundError):
            await ReviewService.delete(gateway, user["id"], review["id"])
        assert len(gateway.tables["reviews"]) == 1


@pytest.mark.anyio
class TestHelpful:

    async def test_toggle_is_its_own_inverse(self, gateway, user, user_factory, product_factory):
        product = product_factory()
        author = user_factory("author@example.com")
        review = await ReviewService.submit(gateway, author["id"], product["id"], 4)

        assert await ReviewService.toggle_helpful(gateway, user["id"], review["id"]) == (True, 1)
        assert await ReviewService.helpful_review_ids(gateway, user["id"], product["id"]) == {review["id"]}

        assert await ReviewService.toggle_helpful(gateway, user["id"], review["id"]) == (False, 0)
        assert await ReviewService.helpful_review_ids(gateway, user["id"], product["id"]) == set()
        assert gateway.tables["reviews"][0]["helpful_count"] == 0

    async def test_count_reflects_all_voters(self, gateway, user, user_factory, product_factory):
        product = product_factory()
        author = user_factory("author@example.com")
        other = user_factory("other@example.com")
        review = await ReviewService.submit(gateway, author["id"], product["id"], 4)

        await ReviewService.toggle_helpful(gateway, user["id"], review["id"])
        voted, count = await ReviewService.toggle_helpful(gateway, other["id"], review["id"])

        assert voted is True
        assert count == 2
        assert gateway.tables["reviews"][0]["helpful_count"] == 2

    async def test_unknown_review(self, gateway, user):
        with pytest.raises(NotFoundError):
            await ReviewService.toggle_helpful(gateway, user["id"], 77)


@pytest.mark.anyio
async def test_list_for_product_is_newest_first(gateway, user, user_factory, product_factory):
    product = product_factory()
    other = user_factory("other@example.com")
    first = await ReviewService.submit(gateway, user["id"], product["id"], 3)
    second = await ReviewService.submit(gateway, other["id"], product["id"], 5)

    reviews = await ReviewService.list_for_product(gateway, product["id"])
    assert [r["id"] for r in reviews] == [second["id"], first["id"]]
