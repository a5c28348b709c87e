"""REST resource services."""

from library_client.services.auth import AuthService
from library_client.services.books import BookService
from library_client.services.favorites import FavoriteService
from library_client.services.loans import LoanService
from library_client.services.messages import MessageService
from library_client.services.payments import PaymentService
from library_client.services.reviews import ReviewService
from library_client.services.users import UserService

__all__ = [
    "AuthService",
    "BookService",
    "FavoriteService",
    "LoanService",
    "MessageService",
    "PaymentService",
    "ReviewService",
    "UserService",
]
