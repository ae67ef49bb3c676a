# Comments on posts: comment store, comment service and local comment thread
