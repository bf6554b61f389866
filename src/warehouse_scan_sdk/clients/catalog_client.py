from __future__ import annotations

from dataclasses import dataclass

from ..models import Account, CatalogEntryRequest, CatalogEntryResponse, CatalogOption, Product
from .base import BaseClient, expect_object, expect_rows


@dataclass
class CatalogClient(BaseClient):
    def search_products(self, keyword: str) -> list[Product]:
        keyword = keyword.strip()
        if not keyword:
            return []
        payload = self._request(
            "GET", "/catalog/products", params={"q": keyword}, module="catalog", operation="search_products"
        )
        return [Product.model_validate(row) for row in expect_rows(payload, "product search")]

    def search_accounts(self, keyword: str) -> list[Account]:
        keyword = keyword.strip()
        if not keyword:
            return []
        payload = self._request(
            "GET", "/accounts", params={"q": keyword}, module="catalog", operation="search_accounts"
        )
        return [Account.model_validate(row) for row in expect_rows(payload, "account search")]

    def list_categories(self) -> list[CatalogOption]:
        payload = self._request("GET", "/catalog/categories", module="catalog", operation="list_categories")
        return [CatalogOption.model_validate(row) for row in expect_rows(payload, "category list")]

    def list_suppliers(self) -> list[CatalogOption]:
        payload = self._request("GET", "/catalog/suppliers", module="catalog", operation="list_suppliers")
        return [CatalogOption.model_validate(row) for row in expect_rows(payload, "supplier list")]

    def create_catalog_entry(self, entry: CatalogEntryRequest) -> CatalogEntryResponse:
        data = self._request(
            "POST",
            "/catalog/products",
            json_body=entry.model_dump(mode="json", exclude_none=True),
            module="catalog",
            operation="create_catalog_entry",
        )
        return CatalogEntryResponse.model_validate(expect_object(data, "catalog entry"))
