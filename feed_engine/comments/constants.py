# Comments module constants
from feed_engine.config import settings

# Error messages
COMMENT_NOT_FOUND = "Comment not found"
NOT_COMMENT_PARTY = "Only the comment author or the post author can delete this comment"

# Validation messages
COMMENT_EMPTY = "Comment must not be empty"

# Limits
MAX_COMMENT_LENGTH = settings.MAX_COMMENT_LENGTH
