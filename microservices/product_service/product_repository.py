"""
Product Repository

Data access layer - PostgreSQL (asyncpg)
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from core.config_manager import ConfigManager
from core.postgres_client import PostgresClientWrapper

from .models import (
    Inventory,
    Product,
    ProductImage,
    ProductStatus,
    Rating,
    Visibility,
)
from .protocols import ConcurrentModificationError, ProductNotFoundError

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE SCHEMA IF NOT EXISTS product;

CREATE TABLE IF NOT EXISTS product.products (
    product_id VARCHAR(64) PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    description TEXT,
    brand VARCHAR(100) NOT NULL,
    category VARCHAR(100) NOT NULL,
    subcategory VARCHAR(100),
    tags TEXT[] NOT NULL DEFAULT '{}',
    sku VARCHAR(50) NOT NULL UNIQUE,
    price NUMERIC(10, 2) NOT NULL,
    sale_price NUMERIC(10, 2),
    currency CHAR(3) NOT NULL DEFAULT 'USD',
    images JSONB NOT NULL DEFAULT '[]'::jsonb,
    rating_average NUMERIC(3, 1) NOT NULL DEFAULT 0,
    rating_count INTEGER NOT NULL DEFAULT 0,
    quantity INTEGER NOT NULL DEFAULT 0 CHECK (quantity >= 0),
    reserved_quantity INTEGER NOT NULL DEFAULT 0 CHECK (reserved_quantity >= 0),
    in_stock BOOLEAN NOT NULL DEFAULT FALSE,
    low_stock_threshold INTEGER NOT NULL DEFAULT 5,
    track_quantity BOOLEAN NOT NULL DEFAULT TRUE,
    allow_backorders BOOLEAN NOT NULL DEFAULT FALSE,
    stock_status VARCHAR(20) NOT NULL DEFAULT 'out_of_stock',
    status VARCHAR(20) NOT NULL DEFAULT 'active',
    visibility VARCHAR(20) NOT NULL DEFAULT 'public',
    featured BOOLEAN NOT NULL DEFAULT FALSE,
    trending BOOLEAN NOT NULL DEFAULT FALSE,
    recommended BOOLEAN NOT NULL DEFAULT FALSE,
    version INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CHECK (reserved_quantity <= quantity)
);

CREATE INDEX IF NOT EXISTS idx_products_category ON product.products (category);
CREATE INDEX IF NOT EXISTS idx_products_listing ON product.products (status, visibility);
"""

_FLAG_COLUMNS = {"featured", "trending", "recommended"}


class ProductRepository:
    """Product data repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[ConfigManager] = None, db: Optional[PostgresClientWrapper] = None):
        if config is None:
            config = ConfigManager("product_service")

        self.db = db or PostgresClientWrapper(config.service_name, config=config)
        self.schema = "product"
        self.products_table = "products"

    @property
    def _listed(self) -> str:
        return f"status = '{ProductStatus.ACTIVE.value}' AND visibility = '{Visibility.PUBLIC.value}'"

    async def initialize(self):
        async with self.db:
            await self.db.execute_script(SCHEMA_SQL)
        logger.info("Product repository initialized with PostgreSQL")

    async def close(self):
        await self.db.close()
        logger.info("Product repository connections closed")

    # ====================
    # Products
    # ====================

    async def get_product(self, product_id: str) -> Optional[Product]:
        query = f"SELECT * FROM {self.schema}.{self.products_table} WHERE product_id = $1"
        async with self.db:
            row = await self.db.query_row(query, [product_id])
        return self._row_to_product(row) if row else None

    async def save_product(self, product: Product) -> Product:
        inv = product.inventory
        query = f'''
            INSERT INTO {self.schema}.{self.products_table} (
                product_id, name, description, brand, category, subcategory, tags, sku,
                price, sale_price, currency, images, rating_average, rating_count,
                quantity, reserved_quantity, in_stock, low_stock_threshold, track_quantity,
                allow_backorders, stock_status, status, visibility, featured, trending, recommended
            ) VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12::jsonb, $13, $14,
                $15, $16, $17, $18, $19, $20, $21, $22, $23, $24, $25, $26
            )
            ON CONFLICT (product_id) DO NOTHING
            RETURNING *
        '''
        params = [
            product.id, product.name, product.description, product.brand,
            product.category, product.subcategory, list(product.tags), product.sku,
            product.price, product.sale_price, product.currency,
            json.dumps([img.model_dump() for img in product.images]),
            product.rating.average, product.rating.count,
            inv.quantity, inv.reserved_quantity, inv.in_stock, inv.low_stock_threshold,
            inv.track_quantity, inv.allow_backorders, inv.stock_status.value,
            product.status.value, product.visibility.value,
            product.featured, product.trending, product.recommended,
        ]
        async with self.db:
            row = await self.db.query_row(query, params)
        if row is None:
            return await self.get_product(product.id) or product
        return self._row_to_product(row)

    async def count_products(self) -> int:
        async with self.db:
            row = await self.db.query_row(f"SELECT COUNT(*) AS n FROM {self.schema}.{self.products_table}")
        return int(row["n"]) if row else 0

    async def sample_products(self, limit: int) -> List[Product]:
        query = f'''
            SELECT * FROM {self.schema}.{self.products_table}
            WHERE {self._listed}
            ORDER BY random()
            LIMIT $1
        '''
        async with self.db:
            rows = await self.db.query(query, [limit])
        return [self._row_to_product(r) for r in rows]

    async def find_flagged(self, flag: str, limit: int) -> List[Product]:
        if flag not in _FLAG_COLUMNS:
            raise ValueError(f"Unknown product flag: {flag}")
        query = f'''
            SELECT * FROM {self.schema}.{self.products_table}
            WHERE {flag} = TRUE AND {self._listed}
            ORDER BY name ASC
            LIMIT $1
        '''
        async with self.db:
            rows = await self.db.query(query, [limit])
        return [self._row_to_product(r) for r in rows]

    async def list_products(self, offset: int, limit: int) -> Tuple[List[Product], int]:
        return await self._paged("TRUE", [], offset, limit)

    async def search_products(self, query: str, offset: int, limit: int) -> Tuple[List[Product], int]:
        where = f'''
            {self._listed} AND (
                name ILIKE $1 OR brand ILIKE $1 OR description ILIKE $1
                OR EXISTS (SELECT 1 FROM unnest(tags) AS t WHERE t ILIKE $1)
            )
        '''
        return await self._paged(where, [f"%{query}%"], offset, limit)

    async def find_by_category(self, category: str, offset: int, limit: int) -> Tuple[List[Product], int]:
        return await self._paged(f"category = $1 AND {self._listed}", [category], offset, limit)

    async def _paged(self, where: str, params: List[Any], offset: int, limit: int) -> Tuple[List[Product], int]:
        n = len(params)
        count_sql = f"SELECT COUNT(*) AS n FROM {self.schema}.{self.products_table} WHERE {where}"
        page_sql = f'''
            SELECT * FROM {self.schema}.{self.products_table}
            WHERE {where}
            ORDER BY name ASC
            OFFSET ${n + 1} LIMIT ${n + 2}
        '''
        async with self.db:
            total_row = await self.db.query_row(count_sql, params)
            rows = await self.db.query(page_sql, params + [offset, limit])
        total = int(total_row["n"]) if total_row else 0
        return [self._row_to_product(r) for r in rows], total

    # ====================
    # Inventory
    # ====================

    async def update_inventory(self, product_id: str, inventory: Inventory) -> Inventory:
        query = f'''
            UPDATE {self.schema}.{self.products_table} SET
                quantity = $3,
                reserved_quantity = $4,
                in_stock = $5,
                low_stock_threshold = $6,
                track_quantity = $7,
                allow_backorders = $8,
                stock_status = $9,
                version = version + 1,
                updated_at = NOW()
            WHERE product_id = $1 AND version = $2
            RETURNING *
        '''
        params = [
            product_id,
            inventory.version,
            inventory.quantity,
            inventory.reserved_quantity,
            inventory.in_stock,
            inventory.low_stock_threshold,
            inventory.track_quantity,
            inventory.allow_backorders,
            inventory.stock_status.value,
        ]
        async with self.db:
            row = await self.db.query_row(query, params)

        if row is None:
            if await self.get_product(product_id) is None:
                raise ProductNotFoundError(f"Product not found: {product_id}")
            raise ConcurrentModificationError(f"Inventory for {product_id} was modified concurrently")
        return self._row_to_inventory(row)

    # ====================
    # Row mapping
    # ====================

    @staticmethod
    def _row_to_inventory(row: Dict[str, Any]) -> Inventory:
        return Inventory(
            quantity=row.get("quantity") or 0,
            reserved_quantity=row.get("reserved_quantity") or 0,
            in_stock=bool(row.get("in_stock")),
            low_stock_threshold=row.get("low_stock_threshold", 5),
            track_quantity=row.get("track_quantity", True),
            allow_backorders=bool(row.get("allow_backorders")),
            version=row.get("version") or 0,
        )

    def _row_to_product(self, row: Dict[str, Any]) -> Product:
        images = row.get("images") or []
        if isinstance(images, str):
            images = json.loads(images)
        sale_price = row.get("sale_price")
        return Product(
            id=row["product_id"],
            name=row["name"],
            description=row.get("description"),
            brand=row["brand"],
            category=row["category"],
            subcategory=row.get("subcategory"),
            tags=list(row.get("tags") or []),
            sku=row["sku"],
            price=Decimal(str(row["price"])),
            sale_price=Decimal(str(sale_price)) if sale_price is not None else None,
            currency=(row.get("currency") or "USD").strip(),
            images=[ProductImage(**img) for img in images],
            inventory=self._row_to_inventory(row),
            rating=Rating(
                average=Decimal(str(row.get("rating_average") or "0")),
                count=row.get("rating_count") or 0,
            ),
            status=ProductStatus(row.get("status") or ProductStatus.ACTIVE.value),
            visibility=Visibility(row.get("visibility") or Visibility.PUBLIC.value),
            featured=bool(row.get("featured")),
            trending=bool(row.get("trending")),
            recommended=bool(row.get("recommended")),
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )


__all__ = ["ProductRepository", "SCHEMA_SQL"]
