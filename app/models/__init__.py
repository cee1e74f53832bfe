from app.models.user import User
from app.models.photoshoot import Photoshoot
from app.models.photo import Photo
from app.models.order import Order, OrderItem
from app.models.portfolio import PortfolioItem
from app.models.price import PriceSetting
from app.models.access_log import AccessLog

__all__ = [
    "User",
    "Photoshoot",
    "Photo",
    "Order",
    "OrderItem",
    "PortfolioItem",
    "PriceSetting",
    "AccessLog",
]
