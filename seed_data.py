"""
Sample catalogue, default categories and delivery zones.

Can be run directly against the configured store:
    python seed_data.py --categories --products
"""
from typing import Any, Dict, List

from loguru import logger

from database import KVStore, new_id, now_iso


def _image(photo: str) -> str:
    return f"https://images.unsplash.com/{photo}?crop=entropy&cs=tinysrgb&fit=max&fm=jpg&q=80&w=1080"


def _product(name, description, price, category, sizes, colors, photo, stock, featured) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "price": price,
        "category": category,
        "sizes": sizes,
        "colors": colors,
        "imageUrl": _image(photo),
        "stock": stock,
        "featured": featured,
    }


SHOE_SIZES = [7, 8, 9, 10, 11, 12]
LADIES_SIZES = [5, 6, 7, 8, 9, 10]
SHIRT_SIZES = ["S", "M", "L", "XL", "XXL"]
STANDARD = ["Standard"]

PRODUCTS_BY_CATEGORY: Dict[str, List[Dict[str, Any]]] = {
    "Footwear": [
        _product("Urban Runner Pro", "Premium running shoes with advanced cushioning technology for maximum comfort and performance.",
                 8500, "Athletic Shoes", SHOE_SIZES, ["Black", "White", "Blue"], "photo-1664673605025-413c63a88ad6", 50, True),
        _product("Classic Canvas Sneakers", "Timeless casual sneakers perfect for everyday wear. Comfortable and stylish.",
                 4500, "Canvas Sneakers", [6, 7, 8, 9, 10, 11, 12, 13], ["White", "Navy", "Grey"], "photo-1759542890353-35f5568c1c90", 75, True),
        _product("Heritage Leather Boots", "Rugged leather boots built to last. Perfect for any weather and terrain.",
                 12500, "Casual Boots", SHOE_SIZES, ["Brown", "Black"], "photo-1599012307605-23a0ebe4d321", 30, False),
        _product("Executive Oxford Shoes", "Sophisticated dress shoes for the modern professional. Handcrafted quality.",
                 9800, "Oxfords", SHOE_SIZES, ["Black", "Brown"], "photo-1552422554-0d5af0c79fc6", 40, True),
        _product("Elegant Stiletto Heels", "Classic high heels that add sophistication to any outfit. Perfect for special occasions.",
                 7500, "Stilettos", LADIES_SIZES, ["Black", "Red", "Nude"], "photo-1543163521-1bf539c55dd2", 35, True),
        _product("Comfortable Ballet Flats", "Versatile and comfortable flats for all-day wear. Perfect for the office or casual outings.",
                 3500, "Ballet Flats", LADIES_SIZES, ["Black", "Beige", "Pink"], "photo-1535043934128-cf0b28d52f95", 60, False),
        _product("Summer Wedge Sandals", "Stylish wedge sandals that provide height and comfort. Perfect for warm weather.",
                 5200, "Wedge Sandals", LADIES_SIZES, ["Tan", "White", "Black"], "photo-1603487742131-4160ec999306", 45, False),
        _product("Trendy Ankle Boots", "Fashion-forward ankle boots that pair well with any outfit. Year-round style essential.",
                 8800, "Ankle Boots", LADIES_SIZES, ["Black", "Brown", "Grey"], "photo-1608256246200-53e635b5b65f", 38, True),
    ],
    "Clothes": [
        _product("Premium Cotton T-Shirt", "Soft, breathable cotton t-shirt perfect for everyday wear. Available in multiple colors.",
                 1200, "T-Shirts", SHIRT_SIZES, ["White", "Black", "Navy", "Grey"], "photo-1696086152504-4843b2106ab4", 100, True),
        _product("Classic Formal Shirt", "Elegant formal shirt for professional settings. Wrinkle-resistant fabric.",
                 2500, "Shirts", SHIRT_SIZES, ["White", "Blue", "Pink"], "photo-1648839441609-317150d56096", 80, False),
        _product("Slim Fit Jeans", "Modern slim fit jeans with stretch for comfort. Versatile and durable.",
                 3200, "Jeans", [28, 30, 32, 34, 36, 38], ["Dark Blue", "Light Blue", "Black"], "photo-1548883354-7622d03aca27", 65, True),
        _product("Elegant Summer Dress", "Beautiful flowing dress perfect for summer occasions. Lightweight and comfortable.",
                 4200, "Dresses", ["S", "M", "L", "XL"], ["Floral", "Red", "Navy", "White"], "photo-1635447272615-a414b7ea1df4", 45, True),
        _product("Stylish Winter Jacket", "Warm and fashionable jacket for cold weather. Water-resistant outer layer.",
                 6500, "Jackets", SHIRT_SIZES, ["Black", "Navy", "Khaki"], "photo-1542318418-572cbf7eb3be", 35, False),
    ],
    "Essentials": [
        _product("Premium Toiletry Set", "Complete toiletry set including shampoo, conditioner, and body wash. Travel-friendly sizes.",
                 1800, "Toiletries", STANDARD, ["Multi"], "photo-1731336478619-aaeb3ce74f25", 90, False),
        _product("Natural Skincare Kit", "Organic skincare products for daily use. Suitable for all skin types.",
                 3500, "Personal Care", STANDARD, ["Natural"], "photo-1629198688000-71f23e745b6e", 70, True),
        _product("Multi-Purpose Cleaning Kit", "Complete household cleaning supplies. Eco-friendly and effective.",
                 2200, "Household Items", STANDARD, ["Multi"], "photo-1758523670739-0d26a3ee976d", 55, False),
        _product("Premium Stationery Set", "High-quality notebook, pens, and accessories for professionals and students.",
                 1500, "Stationery", STANDARD, ["Assorted"], "photo-1550622824-47663976f800", 120, False),
    ],
    "Appliances": [
        _product("High-Speed Blender Pro", "Powerful 1000W blender for smoothies, soups, and more. Multiple speed settings.",
                 8500, "Kitchen Appliances", STANDARD, ["Black", "Silver"], "photo-1585237672814-8f85a8118bf6", 25, True),
        _product("Digital Microwave Oven", "25L capacity microwave with smart cooking presets. Energy efficient.",
                 12500, "Kitchen Appliances", STANDARD, ["White", "Black"], "photo-1585659722983-3a675dabf23d", 18, True),
        _product("Steam Iron Deluxe", "Professional steam iron with auto-shutoff and anti-drip technology.",
                 4200, "Small Appliances", STANDARD, ["Blue", "Purple"], "photo-1669820510004-9a3c83c14645", 40, False),
    ],
    "Electronics": [
        _product("Smartphone XR Plus", '6.5" display, 128GB storage, quad camera system. Latest Android OS.',
                 35000, "Phones", STANDARD, ["Black", "Blue", "White"], "photo-1636308093602-b1f355e8720d", 30, True),
        _product("Ultrabook Pro 15", '15.6" Full HD, Intel i7, 16GB RAM, 512GB SSD. Perfect for work and creativity.',
                 85000, "Laptops", STANDARD, ["Silver", "Space Grey"], "photo-1511385348-a52b4a160dc2", 15, True),
        _product("Tablet Max 10", '10.1" touchscreen, 64GB storage, long battery life. Perfect for entertainment.',
                 25000, "Tablets", STANDARD, ["Black", "Silver"], "photo-1672239069328-dd1535c0d78a", 22, False),
        _product("Wireless Headphones Pro", "Active noise cancellation, 30-hour battery, premium sound quality.",
                 8500, "Audio Devices", STANDARD, ["Black", "White", "Red"], "photo-1713618651165-a3cf7f85506c", 50, True),
    ],
}

DEFAULT_CATEGORIES = [
    {
        "name": "Footwear",
        "description": "Shoes, boots, sandals, and all types of footwear",
        "subcategories": [
            # women
            "Ballet Flats", "Canvas Sneakers", "Slip-On Flats", "Loafers", "Mules", "Espadrilles",
            "Wellington Boots", "Flip Flops", "Pumps", "Kitten Heels", "Stilettos", "Block Heels",
            "Ankle Strap Heels", "Mary Janes", "Oxfords", "Brogues", "Gladiator Sandals",
            "T-Strap Heels", "Peep Toe Shoes", "Slingback Heels", "Wedge Sandals", "Chunky Heels",
            "Platform Shoes", "Ankle Boots", "Chelsea Boots", "Combat Boots", "Knee-High Boots",
            "Over-the-Knee Boots", "Snow Boots",
            # men
            "Sneakers", "Boat Shoes", "Casual Boots", "Derby Shoes", "Monk Strap Shoes",
            "Cap Toe Shoes", "Wingtip Shoes", "Chukka Boots", "Desert Boots", "Work Boots",
            "Hiking Boots", "Penny Loafers", "Tassel Loafers", "Athletic Shoes",
        ],
    },
    {
        "name": "Clothes",
        "description": "Clothing for men, women, and children",
        "subcategories": ["T-Shirts", "Shirts", "Pants", "Dresses", "Jackets", "Sweaters", "Jeans"],
    },
    {
        "name": "Essentials",
        "description": "Daily essentials and necessities",
        "subcategories": ["Toiletries", "Personal Care", "Household Items", "Stationery"],
    },
    {
        "name": "Appliances",
        "description": "Home and kitchen appliances",
        "subcategories": ["Kitchen Appliances", "Home Appliances", "Small Appliances"],
    },
    {
        "name": "Electronics",
        "description": "Electronic devices and gadgets",
        "subcategories": ["Phones", "Laptops", "Tablets", "Accessories", "Audio Devices"],
    },
]

DEFAULT_DELIVERY_LOCATIONS = [
    {"name": "Nairobi CBD", "cost": 0, "region": "Nairobi"},
    {"name": "Westlands", "cost": 0, "region": "Nairobi"},
    {"name": "Karen", "cost": 0, "region": "Nairobi"},
    {"name": "Kilimani", "cost": 0, "region": "Nairobi"},
    {"name": "Machakos Town", "cost": 0, "region": "Machakos"},
    {"name": "Athi River", "cost": 0, "region": "Machakos"},
    {"name": "Kisumu", "cost": 500, "region": "Kisumu"},
    {"name": "Mombasa", "cost": 600, "region": "Mombasa"},
    {"name": "Nakuru", "cost": 400, "region": "Nakuru"},
    {"name": "Eldoret", "cost": 550, "region": "Eldoret"},
]


def _insert(kv: KVStore, prefix: str, data: Dict[str, Any], **extra) -> Dict[str, Any]:
    ts = now_iso()
    record = {**data, **extra, "id": new_id(), "createdAt": ts, "updatedAt": ts}
    kv.set(f"{prefix}:{record['id']}", record)
    return record


def add_category_products(kv: KVStore, category_name: str) -> List[Dict[str, Any]]:
    """Insert the sample products of one top-level category. KeyError for unknown names."""
    samples = PRODUCTS_BY_CATEGORY[category_name]
    return [_insert(kv, "product", p) for p in samples]


def seed_products(kv: KVStore) -> int:
    if kv.get_by_prefix("product:"):
        return 0
    count = 0
    for name in PRODUCTS_BY_CATEGORY:
        count += len(add_category_products(kv, name))
    logger.info(f"Seeded {count} sample products")
    return count


def seed_delivery_locations(kv: KVStore) -> int:
    if kv.get_by_prefix("delivery:"):
        return 0
    for location in DEFAULT_DELIVERY_LOCATIONS:
        _insert(kv, "delivery", location)
    logger.info(f"Seeded {len(DEFAULT_DELIVERY_LOCATIONS)} delivery locations")
    return len(DEFAULT_DELIVERY_LOCATIONS)


def seed_categories(kv: KVStore) -> int:
    if kv.get_by_prefix("category:"):
        return 0
    for category in DEFAULT_CATEGORIES:
        _insert(kv, "category", category, active=True)
    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} categories")
    return len(DEFAULT_CATEGORIES)


if __name__ == "__main__":
    import argparse

    from database import get_kv

    parser = argparse.ArgumentParser(description="Seed the store with sample data")
    parser.add_argument("--categories", action="store_true", help="Seed default categories")
    parser.add_argument("--products", action="store_true", help="Seed sample products and delivery locations")

    args = parser.parse_args()
    kv = get_kv()

    if args.categories:
        print(f"Categories added: {seed_categories(kv)}")
    if args.products:
        print(f"Products added: {seed_products(kv)}")
        print(f"Delivery locations added: {seed_delivery_locations(kv)}")
