# Services package.
#
# Each module validates and normalizes one entity before handing it to the
# repository; none of them sees SQL:
#
#   post_service  — PostService: create / read / update / delete for Post
#   user_service  — UserService: the same for User, plus the password-only
#                   read and write used by the credential workflow
#   updates       — merge(): applies a partial update onto a stored entity
#
# Services receive their repository at construction time, so the router
# layer can hand them the SQL storage and the tests the in-memory one.
from app.services.post_service import PostService
from app.services.user_service import UserService

__all__ = ["PostService", "UserService"]
