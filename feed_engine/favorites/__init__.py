# Favorite relations between users and posts
