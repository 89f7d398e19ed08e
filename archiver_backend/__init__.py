"""Backend for serving installable car/track archives.

This package intentionally keeps FastAPI route handlers thin:
- asset kind registry (cars, tracks)
- one-time download URL injection into item metadata
- build-and-cache retrieval of per-item ZIP archives

Cache note:
An archive under the cache root is considered valid forever. If content changes
on disk after an archive was built, delete the cached ZIP to force a rebuild.
"""
