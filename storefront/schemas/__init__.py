from storefront.schemas.user import (
    UserCreate, UserLogin, UserResponse, Token, PasswordResetRequest, PasswordResetConfirm,
    MessageResponse, ProfileUpdate, ProfileResponse, ProfileList,
)
from storefront.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, FacetsResponse, CatalogPageResponse, SuggestionsResponse,
)
from storefront.schemas.cart import CartItemCreate, CartItemUpdate, CartItemResponse, CartResponse, PriceQuote
from storefront.schemas.order import OrderItemResponse, OrderResponse, OrderList, CheckoutRequest
from storefront.schemas.address import AddressCreate, AddressUpdate, AddressResponse
from storefront.schemas.review import ReviewCreate, ReviewResponse, ReviewList, HelpfulVoteResponse, UserReviewState
