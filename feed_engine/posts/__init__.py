# Posts: content store, feed composer and local view cache
