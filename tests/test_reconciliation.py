"""
Tests for the reconciliation engine
"""

from decimal import Decimal

import pytest

from catalog_sync.domains.catalog.services import (
    MetadataIdentityCorrelation,
    ReconciliationEngine,
    StoreContext,
)
from catalog_sync.domains.shopify.normalization import (
    CollectionRef,
    SourceCollection,
    SourceImage,
    SourceOption,
    SourceProduct,
    SourceVariant,
)
from tests.conftest import InMemoryDestinationStore


@pytest.fixture
def engine():
    return ReconciliationEngine(MetadataIdentityCorrelation("external_id"))


@pytest.fixture
def store_context():
    return StoreContext(currency_codes=["usd", "eur"], default_sales_channel_id="sc_1")


@pytest.fixture
def lamp():
    return SourceProduct(
        id="gid://shopify/Product/1",
        title="Lamp",
        status="ACTIVE",
        description="<p>Desk lamp</p>",
        options=[SourceOption(name="Color", values=["Red", "Blue"])],
        metafields={"bx_code": " BX-1 ", "verified": "Yes", "verified_video": ""},
        images=[SourceImage(id="gid://shopify/ProductImage/11", url="https://cdn/lamp.jpg")],
        variants=[
            SourceVariant(
                id="gid://shopify/ProductVariant/101",
                title="Red",
                sku="LAMP-RED",
                price="19.99",
                inventory_quantity=5,
                selected_options={"Color": "Red"},
                metafields={"product_width": "12.5", "battery": "no", "material": "Steel"},
            ),
            SourceVariant(
                id="gid://shopify/ProductVariant/102",
                title="Blue",
                sku="LAMP-BLUE",
                price="21.50",
                selected_options={"Color": "Blue"},
            ),
        ],
        collections=[CollectionRef(id="gid://shopify/Collection/501", title="Lighting")],
    )


class TestPlanProducts:
    def test_new_product_is_created_with_identity_stamped(self, engine, lamp, store_context):
        plan = engine.plan_products([lamp], [], {"501": "pcat_1"}, store_context)

        assert plan.to_update == []
        assert plan.create_source_ids == ["gid://shopify/Product/1"]
        payload = plan.to_create[0]
        assert "id" not in payload
        assert payload["metadata"]["external_id"] == "1"
        assert payload["metadata"]["bx_code"] == "BX-1"
        assert payload["metadata"]["b2box_verified"] is True
        assert "verified_video" not in payload["metadata"]
        assert payload["subtitle"] == "BX-1"
        assert payload["status"] == "published"
        assert payload["options"] == [{"title": "Color", "values": ["Red", "Blue"]}]
        assert payload["sales_channels"] == [{"id": "sc_1"}]
        assert payload["category_ids"] == ["pcat_1"]
        assert payload["images"] == [
            {"url": "https://cdn/lamp.jpg", "metadata": {"external_id": "11"}}
        ]

        red = payload["variants"][0]
        assert red["manage_inventory"] is False
        assert red["prices"] == [
            {"amount": Decimal("19.99"), "currency_code": "usd"},
            {"amount": Decimal("19.99"), "currency_code": "eur"},
        ]
        assert red["options"] == {"Color": "Red"}
        assert red["material"] == "Steel"
        assert red["metadata"]["product"]["width"] == 12.5
        assert red["metadata"]["product"]["height"] is None
        assert red["metadata"]["has_battery"] is False
        assert red["metadata"]["is_clothing"] is None
        assert red["metadata"]["inventory_quantity"] == 5
        assert red["metadata"]["external_id"] == "101"

    def test_draft_status_maps_to_draft(self, engine, lamp, store_context):
        draft = lamp.model_copy(update={"status": "DRAFT"})
        plan = engine.plan_products([draft], [], {}, store_context)
        assert plan.to_create[0]["status"] == "draft"

    def test_existing_product_keeps_destination_owned_state(self, engine, lamp, store_context):
        existing = {
            "id": "prod_1",
            "metadata": {"external_id": "1", "warehouse": "A", "bx_code": "OLD"},
            "categories": [{"id": "pcat_9"}],
            "variants": [
                {
                    "id": "variant_1",
                    "sku": "LAMP-RED",
                    "prices": [{"amount": 25, "currency_code": "usd"}],
                    "metadata": {"supplier": "ACME", "external_id": "101"},
                }
            ],
        }

        plan = engine.plan_products([lamp], [existing], {"501": "pcat_1"}, store_context)

        assert plan.to_create == []
        payload = plan.to_update[0]
        assert payload["id"] == "prod_1"
        assert payload["metadata"]["warehouse"] == "A"
        assert payload["metadata"]["bx_code"] == "BX-1"
        assert payload["category_ids"] == ["pcat_9", "pcat_1"]

        red, blue = payload["variants"]
        assert red["id"] == "variant_1"
        assert red["prices"] == [{"amount": 25, "currency_code": "usd"}]
        assert red["metadata"]["supplier"] == "ACME"
        assert "inventory_quantity" not in red["metadata"]
        assert "id" not in blue
        assert blue["prices"][0]["amount"] == Decimal("21.50")

    def test_variants_match_by_sku_not_identity(self, engine, lamp, store_context):
        existing = {
            "id": "prod_1",
            "metadata": {"external_id": "1"},
            "variants": [
                {"id": "variant_x", "sku": "LAMP-BLUE", "metadata": {"external_id": "101"}}
            ],
        }

        plan = engine.plan_products([lamp], [existing], {}, store_context)

        red, blue = plan.to_update[0]["variants"]
        assert "id" not in red
        assert blue["id"] == "variant_x"

    def test_variant_without_sku_matches_by_identity(self, engine, lamp, store_context):
        red = lamp.variants[0].model_copy(update={"sku": None})
        product = lamp.model_copy(update={"variants": [red, lamp.variants[1]]})
        existing = {
            "id": "prod_1",
            "metadata": {"external_id": "1"},
            "variants": [
                {
                    "id": "variant_red",
                    "sku": None,
                    "prices": [{"amount": Decimal("99.00"), "currency_code": "usd"}],
                    "metadata": {"external_id": "101"},
                },
                {"id": "variant_blue", "sku": "LAMP-BLUE", "metadata": {"external_id": "102"}},
            ],
        }

        plan = engine.plan_products([product], [existing], {}, store_context)

        red_payload, blue_payload = plan.to_update[0]["variants"]
        assert red_payload["id"] == "variant_red"
        assert red_payload["prices"] == [{"amount": Decimal("99.00"), "currency_code": "usd"}]
        assert blue_payload["id"] == "variant_blue"

    def test_destination_variant_is_matched_once(self, engine, lamp, store_context):
        blue = lamp.variants[1].model_copy(update={"sku": None, "id": lamp.variants[0].id})
        product = lamp.model_copy(update={"variants": [lamp.variants[0], blue]})
        existing = {
            "id": "prod_1",
            "metadata": {"external_id": "1"},
            "variants": [
                {"id": "variant_red", "sku": "LAMP-RED", "metadata": {"external_id": "101"}}
            ],
        }

        plan = engine.plan_products([product], [existing], {}, store_context)

        first, second = plan.to_update[0]["variants"]
        assert first["id"] == "variant_red"
        assert "id" not in second

    def test_create_and_update_sets_are_disjoint(self, engine, lamp, store_context):
        chair = SourceProduct(id="gid://shopify/Product/3", title="Chair")
        existing = [{"id": "prod_1", "metadata": {"external_id": "1"}}]

        plan = engine.plan_products([lamp, chair, lamp], existing, {}, store_context)

        assert plan.update_source_ids == ["gid://shopify/Product/1"]
        assert plan.create_source_ids == ["gid://shopify/Product/3"]
        assert not set(plan.create_source_ids) & set(plan.update_source_ids)

    @pytest.mark.asyncio
    async def test_second_pass_only_updates(self, engine, lamp, store_context):
        destination = InMemoryDestinationStore()
        identity = engine.identity

        first = engine.plan_products([lamp], [], {}, store_context)
        await destination.create("product", first.to_create)
        existing = await destination.query_all("product", filters=identity.filters_for(["1"]))
        second = engine.plan_products([lamp], existing, {}, store_context)

        assert len(first.to_create) == 1
        assert second.to_create == []
        assert len(second.to_update) == 1
        update = second.to_update[0]
        assert update["id"] == existing[0]["id"]
        for field in ("title", "description", "status", "options", "images", "metadata"):
            assert update[field] == first.to_create[0][field]
        assert [v["prices"] for v in update["variants"]] == [
            v["prices"] for v in first.to_create[0]["variants"]
        ]


class TestPlanCategories:
    def collection(self, number, title):
        return SourceCollection(id=f"gid://shopify/Collection/{number}", title=title)

    def test_unmatched_collections_are_created(self, engine):
        plan = engine.plan_categories([self.collection(501, "Home & Garden")], [])

        assert plan.to_create == [
            {
                "name": "Home & Garden",
                "handle": "home-garden",
                "description": "",
                "is_active": True,
                "metadata": {"external_id": "501"},
            }
        ]

    def test_handle_is_the_primary_key(self, engine):
        existing = [{"id": "pcat_1", "handle": "lighting", "metadata": {"external_id": "501"}}]

        plan = engine.plan_categories([self.collection(501, "Lighting")], existing)

        assert plan.to_create == []
        assert plan.matched["501"]["id"] == "pcat_1"
        assert plan.conflicts == []

    def test_handle_match_without_identity_gets_stamped(self, engine):
        existing = [{"id": "pcat_1", "handle": "lighting", "metadata": {"color": "red"}}]

        plan = engine.plan_categories([self.collection(501, "Lighting")], existing)

        assert plan.to_stamp == [
            {"id": "pcat_1", "metadata": {"color": "red", "external_id": "501"}}
        ]

    def test_handle_match_with_other_identity_is_a_conflict(self, engine):
        existing = [{"id": "pcat_1", "handle": "lighting", "metadata": {"external_id": "777"}}]

        plan = engine.plan_categories([self.collection(501, "Lighting")], existing)

        assert plan.to_create == []
        assert plan.matched["501"]["id"] == "pcat_1"
        assert plan.conflicts[0]["stamped_external_id"] == "777"

    def test_renamed_category_matches_by_identity(self, engine):
        existing = [{"id": "pcat_1", "handle": "lights", "metadata": {"external_id": "501"}}]

        plan = engine.plan_categories([self.collection(501, "Lighting")], existing)

        assert plan.to_create == []
        assert plan.matched["501"]["id"] == "pcat_1"

    def test_same_handle_is_created_once(self, engine):
        plan = engine.plan_categories(
            [self.collection(1, "Sale!"), self.collection(2, "Sale")], []
        )
        assert [c["handle"] for c in plan.to_create] == ["sale"]

    def test_category_map(self, engine):
        categories = [
            {"id": "pcat_1", "metadata": {"external_id": "501"}},
            {"id": "pcat_2", "metadata": {}},
        ]
        matched = {"777": {"id": "pcat_2"}, "501": {"id": "pcat_other"}}

        assert engine.build_category_map(categories, matched) == {
            "501": "pcat_1",
            "777": "pcat_2",
        }


class TestPlanCategoryLinks:
    def test_links_are_an_additive_union(self, engine, lamp):
        existing = [
            {"id": "prod_1", "metadata": {"external_id": "1"}, "categories": [{"id": "pcat_9"}]}
        ]

        updates = engine.plan_category_links([lamp], {"501": "pcat_1"}, existing)

        assert updates == [{"id": "prod_1", "category_ids": ["pcat_9", "pcat_1"]}]

    def test_unchanged_membership_is_skipped(self, engine, lamp):
        existing = [
            {"id": "prod_1", "metadata": {"external_id": "1"}, "categories": [{"id": "pcat_1"}]}
        ]
        assert engine.plan_category_links([lamp], {"501": "pcat_1"}, existing) == []

    def test_products_not_yet_migrated_are_skipped(self, engine, lamp):
        assert engine.plan_category_links([lamp], {"501": "pcat_1"}, []) == []


class TestStoreContext:
    def test_from_store_record(self):
        context = StoreContext.from_record(
            {
                "supported_currencies": [{"currency_code": "usd"}, {"currency_code": "eur"}],
                "default_sales_channel_id": "sc_1",
            }
        )
        assert context.currency_codes == ["usd", "eur"]
        assert context.default_sales_channel_id == "sc_1"

    def test_missing_store_falls_back_to_default_currency(self):
        context = StoreContext.from_record(None)
        assert context.currency_codes == ["usd"]
        assert context.default_sales_channel_id is None
