"""Fixed-point arithmetic shared by documents and postings.

Amounts are Decimals rounded half-up to cents. These helpers are pure: they
never touch the database, so the same numbers are shown on screen and posted
to the ledger.
"""
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value):
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 don't drag binary noise along
    return Decimal(str(value))


def money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _field(line, name):
    if isinstance(line, dict):
        return line.get(name)
    return getattr(line, name, None)


def line_net(line):
    return to_decimal(_field(line, "quantity")) * to_decimal(_field(line, "unit_price"))


def line_tax(line):
    return line_net(line) * to_decimal(_field(line, "tax_rate")) / HUNDRED


def line_total(quantity, unit_price, tax_rate):
    """quantity × unit_price × (1 + tax_rate/100), rounded to cents"""
    net = to_decimal(quantity) * to_decimal(unit_price)
    return money(net * (1 + to_decimal(tax_rate) / HUNDRED))


def compute_totals(lines):
    """Return {"net", "tax", "gross"} for an iterable of lines.

    Lines may be model instances or mappings with quantity, unit_price and
    tax_rate. Sums are taken at full precision and rounded once.
    """
    net = Decimal("0")
    tax = Decimal("0")
    for line in lines:
        net += line_net(line)
        tax += line_tax(line)
    net = money(net)
    tax = money(tax)
    return {"net": net, "tax": tax, "gross": net + tax}


def allocate(amounts, total):
    """Round a mapping of unrounded amounts to cents so they sum to ``total``.

    Every amount is floored to the cent, then the cents still missing go one
    each to the largest remainders (ties keep mapping order). Used to split a
    document's rounded net over several ledger accounts.
    """
    floors = {key: to_decimal(amount).quantize(CENT, rounding=ROUND_FLOOR)
              for key, amount in amounts.items()}
    missing = int((money(total) - sum(floors.values(), ZERO)) / CENT)
    if missing and not floors:
        raise ValueError("Cannot allocate a non-zero total over nothing")
    by_remainder = sorted(
        floors, key=lambda key: to_decimal(amounts[key]) - floors[key], reverse=True
    )
    step = CENT if missing > 0 else -CENT
    for i in range(abs(missing)):
        key = by_remainder[i % len(by_remainder)]
        floors[key] += step
    return floors
