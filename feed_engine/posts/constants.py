# Posts module constants
from feed_engine.config import settings

# Error messages
POST_NOT_FOUND = "Post not found"
NOT_POST_AUTHOR = "Only the author can delete this post"
ALREADY_FAVORITED = "Post is already in favorites"
NOT_FAVORITED = "Post is not in favorites"

# Warning messages (returned alongside a successful mutation)
IMAGE_UPLOAD_FAILED = "Post {post_id} was created without its image: {reason}"
IMAGE_ATTACH_FAILED = "Post {post_id} disappeared before its image could be attached"
UNATTACHED_IMAGE_LEFT = "The unattached image of post {post_id} could not be removed: {reason}"
ASSET_DELETE_FAILED = "Post {post_id} was deleted but its image could not be removed: {reason}"
DUPLICATE_FAVORITES = "Found {count} favorite relations for post {post_id} and user {user_id}, removed one"

# Validation messages
TITLE_EMPTY = "Title must not be empty"
CONTENT_EMPTY = "Content must not be empty"
IMAGE_NOT_AN_IMAGE = "Attachment must be an image"
IMAGE_TOO_LARGE = "Image must not exceed {limit} bytes"

# Limits
MAX_TITLE_LENGTH = settings.MAX_TITLE_LENGTH
MAX_CONTENT_LENGTH = settings.MAX_CONTENT_LENGTH
MAX_IMAGE_BYTES = settings.MAX_IMAGE_BYTES