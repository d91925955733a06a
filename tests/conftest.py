import json

import pytest

from catmatch.taxonomy import normalize_taxonomy

RAW_TAXONOMY = [
    {"id": "c1", "name": "Electronics", "subcategories": [
        {"id": "s1", "name": "Phones"},
        {"id": "s2", "name": "Laptops"},
        {"id": "s3", "name": "Audio"},
    ]},
    {"id": "c2", "name": "Tablets", "subCategories": [
        {"id": "s4", "name": "Android Tablets"},
    ]},
    {"id": "c3", "name": "Fashion", "subcategories": [
        {"id": "s5", "name": "Shirts"},
        {"id": "s6", "name": "Men's Shirts"},
        {"id": "s7", "name": "Women's Dresses"},
        {"id": "s8", "name": "Jackets & Coats"},
        {"id": "s9", "name": "Hats"},
    ]},
    {"id": "c4", "name": "Home & Kitchen", "subcategories": [
        {"id": "s10", "name": "Kitchen Appliances"},
        {"id": "s11", "name": "Decor"},
    ]},
    {"id": "c5", "name": "Gift Cards", "subcategories": []},
]


@pytest.fixture
def taxonomy():
    return normalize_taxonomy(RAW_TAXONOMY)


@pytest.fixture
def taxonomy_file(tmp_path):
    path = tmp_path / "categories.json"
    path.write_text(json.dumps(RAW_TAXONOMY), encoding="utf-8")
    return str(path)
