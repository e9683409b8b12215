"""Server-side sessions: the store and the middleware that exposes it."""
