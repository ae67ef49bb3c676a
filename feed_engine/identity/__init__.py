# Identity context: who is making the request
