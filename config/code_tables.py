"""Codec lookup tables and canonical target catalogs.

Each table maps a canonical name to its one-character code. Catalog order
(insertion order of the per-type tables) is the canonical iteration order
used by the resolver and for matrix-row indexing.
"""

# Delivery method -> method code
METHOD_CODES = {
    "按档位统一投放": "A",
    "按档位扩展投放": "B",
    "按需投放": "C",
}

# Names that encode like a canonical method; decoding yields the canonical name
METHOD_ALIASES = {
    "按档位投放": "按档位统一投放",
}

# Methods whose expressions carry a type code and a target-code bracket
METHODS_WITH_TARGET_CODES = {"B"}

# Extended delivery type -> type code (only after method "B")
DELIVERY_TYPE_CODES = {
    "档位+区县": "1",
    "档位+市场类型": "2",
    "档位+区县+市场类型": "3",
    "档位+城乡分类代码": "4",
    "档位+业态": "5",
}

COUNTY_CODES = {
    "城区": "1",
    "丹江": "2",
    "房县": "3",
    "郧西": "4",
    "郧阳": "5",
    "竹山": "6",
    "竹溪": "7",
}

MARKET_CODES = {
    "城网": "C",
    "农网": "N",
}

URBAN_RURAL_CODES = {
    "主城区": "①",
    "城乡结合区": "②",
    "镇中心区": "③",
    "镇乡接合区": "④",
    "特殊区域": "⑤",
    "乡中心区": "⑥",
    "村庄": "⑦",
}

BUSINESS_FORMAT_CODES = {
    "便利店": "a",
    "超市": "b",
    "商场": "c",
    "烟草专业店": "d",
    "娱乐服务类": "e",
    "其他": "f",
}

# Delivery type -> target code table. "档位+区县+市场类型" has no table.
TARGET_CODE_TABLES = {
    "档位+区县": COUNTY_CODES,
    "档位+市场类型": MARKET_CODES,
    "档位+城乡分类代码": URBAN_RURAL_CODES,
    "档位+业态": BUSINESS_FORMAT_CODES,
}

# Market-segment names used by the urban/rural split
URBAN_MARKET = "城网"
RURAL_MARKET = "农网"
