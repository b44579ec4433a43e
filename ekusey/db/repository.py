"""Order and product repositories: async DB access for the services layer."""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ekusey.db.order_tables import OrderItemRow, OrderNoteRow, OrderRow
from ekusey.db.tables import BrandRow, MediaRow, OptionRow, ProductRow


def _escape_like(value: str) -> str:
    """Escape LIKE wildcard characters in user input."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class OrderRepository:
    """Async order persistence: read/update/save by id plus history notes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, order_id: int) -> Optional[OrderRow]:
        result = await self.session.execute(select(OrderRow).where(OrderRow.id == order_id))
        return result.scalar_one_or_none()

    async def create(self, currency: str = "USD") -> OrderRow:
        """Insert an empty order. Line items are added separately."""
        order = OrderRow(currency=currency, items=[], notes=[], commission=None)
        self.session.add(order)
        await self.session.flush()
        return order

    async def add_items(self, order: OrderRow, items: Iterable[OrderItemRow]) -> None:
        for item in items:
            order.items.append(item)
        order.subtotal = sum((Decimal(i.line_total) for i in order.items), Decimal("0"))
        await self.session.flush()

    async def add_note(self, order: OrderRow, body: str) -> OrderNoteRow:
        note = OrderNoteRow(body=body)
        order.notes.append(note)
        await self.session.flush()
        return note

    async def save(self) -> None:
        await self.session.commit()


class ProductRepository:
    """Read access to the catalog (products, variations, brands, media, options)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _with_relations(self, stmt):
        return stmt.options(
            selectinload(ProductRow.brands),
            selectinload(ProductRow.image),
            selectinload(ProductRow.variations).selectinload(ProductRow.image),
        )

    async def get(self, product_id: int) -> Optional[ProductRow]:
        stmt = self._with_relations(select(ProductRow).where(ProductRow.id == product_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def buy_prices(self, product_ids: Iterable[int]) -> dict[int, Optional[Decimal]]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        result = await self.session.execute(
            select(ProductRow.id, ProductRow.buy_price).where(ProductRow.id.in_(ids))
        )
        return {row.id: row.buy_price for row in result.all()}

    def _storefront_filter(self, stmt, search: str = "", brand_slug: str = ""):
        stmt = stmt.where(
            ProductRow.status == "publish",
            ProductRow.parent_id.is_(None),
            # Any disabled brand hides the product
            ~ProductRow.brands.any(BrandRow.disabled.is_(True)),
        )
        if search:
            stmt = stmt.where(ProductRow.name.ilike(f"%{_escape_like(search)}%", escape="\\"))
        if brand_slug:
            stmt = stmt.where(ProductRow.brands.any(BrandRow.slug == brand_slug))
        return stmt

    async def list_storefront(
        self,
        page: int = 1,
        per_page: int = 12,
        search: str = "",
        brand_slug: str = "",
    ) -> tuple[list[ProductRow], int]:
        """Published products for one page, plus the total matching count."""
        count_stmt = self._storefront_filter(select(func.count(ProductRow.id)), search, brand_slug)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = self._storefront_filter(select(ProductRow), search, brand_slug)
        stmt = self._with_relations(stmt).order_by(ProductRow.created_at.desc(), ProductRow.id.desc())
        stmt = stmt.offset((page - 1) * per_page).limit(per_page)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_media(self, media_id: int) -> Optional[MediaRow]:
        return await self.session.get(MediaRow, media_id)

    async def get_option(self, key: str):
        row = await self.session.get(OptionRow, key)
        return row.value if row else None
