"""Alfred Feeds - launcher results from the services a product team lives in."""

__version__ = "0.1.0"
