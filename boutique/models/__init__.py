from boutique.models.user import User
from boutique.models.product import Product
from boutique.models.order import Order
from boutique.models.order_item import OrderItem
from boutique.models.admin_log import AdminLog
from boutique.models.rate_limit import RateLimitCounter

# add ALL models here
