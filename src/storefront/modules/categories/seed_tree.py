"""The authoritative category tree that synchronization brings the store in line with."""

from storefront.modules.categories.schemas import CategorySeedNode


CATEGORY_TREE: list[CategorySeedNode] = [
    CategorySeedNode(
        slug="electronics",
        name="Electronics",
        icon="📱",
        children=[
            CategorySeedNode(
                slug="phones",
                name="Phones",
                children=[CategorySeedNode(slug="accessories", name="Accessories")],
            ),
            CategorySeedNode(slug="computers", name="Computers", icon="💻"),
        ],
    ),
    CategorySeedNode(
        slug="fashion",
        name="Fashion",
        icon="👗",
        children=[
            CategorySeedNode(slug="men", name="Men"),
            CategorySeedNode(slug="women", name="Women"),
        ],
    ),
]
