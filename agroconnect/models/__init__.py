# Database Models
from agroconnect.models.user import db, User, UserSession
from agroconnect.models.profile import UserProfile
from agroconnect.models.esg import ESGVerification, ESGScoreDetails
from agroconnect.models.farming import Season, Image
from agroconnect.models.market import Product, Order

# Repository name -> model; shared by both storage backends
TABLES = {
    'users': User,
    'sessions': UserSession,
    'profiles': UserProfile,
    'esg_verifications': ESGVerification,
    'esg_scores': ESGScoreDetails,
    'seasons': Season,
    'images': Image,
    'products': Product,
    'orders': Order,
}

__all__ = [
    'db', 'User', 'UserSession', 'UserProfile',
    'ESGVerification', 'ESGScoreDetails',
    'Season', 'Image', 'Product', 'Order',
    'TABLES'
]
