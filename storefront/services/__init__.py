from storefront.services.gateway import DataGateway, Relation, get_gateway
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.review_service import ReviewService
from storefront.services.user_service import UserService
