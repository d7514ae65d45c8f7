"""
BFF Service Clients

Downstream services the homepage aggregates.
"""

from .product_client import ProductServiceClient, create_mock_product, create_mock_products

__all__ = ["ProductServiceClient", "create_mock_product", "create_mock_products"]
