"""Known Card Hobby sellers.

Lets the dashboard show a seller name instead of a bare seller URL.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Seller:
    """A seller the user follows regularly."""

    id: str
    name: str
    url: str


KNOWN_SELLERS: List[Seller] = [
    Seller(id="387957", name="Lucky1of1card", url="https://www.cardhobby.com/#/seller/detail/387957"),
    Seller(id="593126", name="Hachiware", url="https://www.cardhobby.com/#/seller/detail/593126"),
    Seller(id="19773", name="LAauction", url="https://www.cardhobby.com/#/seller/detail/19773"),
    Seller(id="973", name="Trac", url="https://www.cardhobby.com/#/seller/detail/973"),
    Seller(id="156145", name="Lukards", url="https://www.cardhobby.com/#/seller/detail/156145"),
    Seller(id="642291", name="来来来", url="https://www.cardhobby.com/#/seller/detail/642291"),
]

_BY_URL = {seller.url: seller for seller in KNOWN_SELLERS}


def find_seller(seller_ref: str) -> Optional[Seller]:
    """Look up a known seller by seller_ref (their profile URL)."""
    return _BY_URL.get(seller_ref)
