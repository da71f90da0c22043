"""MongoMCP - MongoDB tools over the Model Context Protocol.

Exposes question and generic collection operations on a MongoDB database
as named tools, with a runtime schema registry for caller-defined collections.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
