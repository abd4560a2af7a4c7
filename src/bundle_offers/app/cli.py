from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from bundle_offers.app.factory import create_adapters
from bundle_offers.application.publisher import OfferPublisher
from bundle_offers.domain.common.errors import OfferError
from bundle_offers.domain.offers.config import OfferDefaults
from bundle_offers.domain.offers.models import OfferGroup
from bundle_offers.domain.pricing.engine import format_price, price_offer_group
from bundle_offers.observability.logging import configure_logging


def republish(shop: str) -> int:
    store, channel = create_adapters()
    outcome = OfferPublisher(store, channel).republish(shop)
    if not outcome.ok:
        print(f"Publish failed for {shop}: {outcome.error}", file=sys.stderr)
        return 1
    print(f"Published {outcome.group_count} active offer groups for {shop}")
    return 0


def preview(group_file: str, unit_price: Optional[str], selected_tier_id: Optional[str]) -> int:
    with open(group_file, "r", encoding="utf-8") as f:
        data = json.load(f)
    try:
        group = OfferGroup.from_dict(data)
    except OfferError as e:
        print(f"Invalid offer group in {group_file}: {e}", file=sys.stderr)
        return 1

    price = unit_price if unit_price is not None else OfferDefaults().sample_unit_price
    result = price_offer_group(group, price, selected_tier_id=selected_tier_id)
    output = result.to_dict()
    symbol = group.design.currency_symbol
    for tier, quote in zip(output["tiers"], result.quotes):
        tier["formattedDiscountedTotal"] = format_price(quote.discounted_total, symbol)
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    parser = argparse.ArgumentParser(description="Bundle Offers CLI")
    subparsers = parser.add_subparsers(dest="command")

    republish_parser = subparsers.add_parser("republish", help="Overwrite the storefront copy from the record store")
    republish_parser.add_argument("--shop", required=True)

    preview_parser = subparsers.add_parser("preview", help="Price an offer group JSON file")
    preview_parser.add_argument("--group-file", required=True)
    preview_parser.add_argument("--unit-price", dest="unit_price")
    preview_parser.add_argument("--selected-tier", dest="selected_tier_id")

    args = parser.parse_args(argv)
    if args.command == "republish":
        return republish(args.shop)
    if args.command == "preview":
        return preview(args.group_file, args.unit_price, args.selected_tier_id)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
