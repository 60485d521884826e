# stores — Data access and business rules, one store per resource
from stores.tasks import TaskStore
from stores.categories import CategoryStore
from stores.comments import CommentStore
from stores.users import UserStore
from stores.businesses import BusinessStore

__all__ = ["TaskStore", "CategoryStore", "CommentStore", "UserStore", "BusinessStore"]
