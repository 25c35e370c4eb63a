# Importing this package registers every model on Base.metadata
from inkpress.models.user import User
from inkpress.models.post import Post

__all__ = ["User", "Post"]
