from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
# largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")


def to_money(x) -> Decimal:
    # go through str so floats do not carry binary artifacts into the total
    return Decimal(str(x)).quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(x) -> str:
    return f"{to_money(x):.2f}"


def line_total(item: dict) -> Decimal:
    return to_money(item["price"]) * int(item["quantity"])


def items_total(items: list[dict]) -> Decimal:
    return to_money(sum((line_total(i) for i in items), Decimal("0")))
