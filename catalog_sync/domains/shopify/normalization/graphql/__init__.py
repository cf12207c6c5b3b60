from .collections import GraphQLCollectionAdapter
from .products import GraphQLProductAdapter

__all__ = ["GraphQLProductAdapter", "GraphQLCollectionAdapter"]
