from storefront.models.user import User, Profile, PasswordResetToken
from storefront.models.product import Product
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.address import Address
from storefront.models.review import Review, ReviewHelpful
